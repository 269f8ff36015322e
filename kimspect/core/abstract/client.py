from __future__ import annotations

import abc
from typing import Any, Optional


class BaseResourceClient(abc.ABC):
    """
    The four read-only calls the query pipeline needs from a cluster.

    Records are returned as the client produced them and are never mutated.
    Implementations raise `NotFound` when a named lookup misses and `ApiError`
    for any transport or authentication failure.
    """

    @abc.abstractmethod
    def list_pods(self, namespace: Optional[str], *, node: Optional[str] = None) -> list[Any]:
        """List pods in a namespace, or in all namespaces when `namespace` is None.

        `node` is a hint the implementation may push down to the API, callers still filter.
        """

    @abc.abstractmethod
    def get_pod(self, namespace: str, name: str) -> Any:
        pass

    @abc.abstractmethod
    def list_nodes(self) -> list[Any]:
        pass

    @abc.abstractmethod
    def get_node(self, name: str) -> Any:
        pass
