from __future__ import annotations

import logging
from typing import Any, Optional

from kimspect.core.abstract.client import BaseResourceClient
from kimspect.core.models.selector import ResourceKind, Selector

logger = logging.getLogger("kimspect")


def _scheduled_node(record: Any) -> Optional[str]:
    spec = getattr(record, "spec", None)
    return getattr(spec, "node_name", None)


class ResourceFetcher:
    """Turns a Selector into the smallest set of client calls that answers it."""

    def __init__(self, client: BaseResourceClient) -> None:
        self.client = client

    def fetch(self, selector: Selector) -> list[Any]:
        logger.debug(f"Fetching {selector}")

        if selector.kind == ResourceKind.Pod:
            records = self._fetch_pods(selector)
        else:
            records = self._fetch_nodes(selector)

        logger.debug(f"Found {len(records)} {selector.kind.plural}")
        return records

    def _fetch_pods(self, selector: Selector) -> list[Any]:
        if selector.name is not None:
            # NOTE: Selector guarantees a namespace whenever a name is set
            records = [self.client.get_pod(selector.namespace, selector.name)]  # type: ignore[arg-type]
        elif selector.all_namespaces:
            records = self.client.list_pods(None, node=selector.node)
        else:
            records = self.client.list_pods(selector.namespace, node=selector.node)

        if selector.node is None:
            return records

        # NOTE: The client may already have applied the node filter, but it is not required to
        return [record for record in records if _scheduled_node(record) == selector.node]

    def _fetch_nodes(self, selector: Selector) -> list[Any]:
        if selector.name is not None:
            return [self.client.get_node(selector.name)]

        return self.client.list_nodes()
