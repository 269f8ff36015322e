from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from kimspect.core.exceptions import MalformedResource
from kimspect.core.models.column import VALUE_FROM_LITERAL
from kimspect.core.models.row import Row
from kimspect.core.models.selector import ResourceKind

ContainerFilter = Callable[[str], bool]


def map_record(
    kind: ResourceKind,
    record: Any,
    *,
    now: Optional[datetime] = None,
    container_filter: Optional[ContainerFilter] = None,
) -> Row:
    """
    Normalize a raw API record into a Row. The record is only read.

    Containers and their env vars are only collected when `container_filter` is given,
    and only for the containers it accepts.

    Raises:
        MalformedResource: if the record has no name.
    """

    metadata = getattr(record, "metadata", None)
    name = getattr(metadata, "name", None)
    if not name:
        raise MalformedResource(
            f"The API returned a {kind.value} without metadata.name, "
            "this usually means the client and the cluster versions do not match",
            kind=kind.value,
            name=getattr(metadata, "generate_name", None),
        )

    fields: dict[str, Any] = {
        "name": name,
        "age": _age(metadata.creation_timestamp, now or datetime.now(timezone.utc)),
        "labels": dict(metadata.labels or {}),
        "annotations": dict(metadata.annotations or {}),
    }

    if kind == ResourceKind.Pod:
        fields.update(_pod_fields(record, container_filter))
    else:
        fields.update(_node_fields(record))

    return Row(namespace=metadata.namespace, **fields)


def _age(created: Optional[datetime], now: datetime):
    if created is None:
        return None
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return now - created


def _pod_fields(pod: Any, container_filter: Optional[ContainerFilter]) -> dict[str, Any]:
    spec, status = pod.spec, pod.status

    fields: dict[str, Any] = {
        "node_name": getattr(spec, "node_name", None),
        "ip": getattr(status, "pod_ip", None),
        "status": _pod_status(pod),
    }

    if container_filter is not None:
        fields["containers"] = {
            container.name: {env.name: _env_value(env) for env in container.env or []}
            for container in getattr(spec, "containers", None) or []
            if container_filter(container.name)
        }

    return fields


def _env_value(env: Any) -> str:
    if env.value_from is not None:
        return VALUE_FROM_LITERAL
    return env.value or ""


def _pod_status(pod: Any) -> Optional[str]:
    if pod.metadata.deletion_timestamp is not None:
        return "Terminating"

    status = pod.status
    if status is None:
        return None
    if status.reason:
        return status.reason

    for container_status in status.container_statuses or []:
        waiting = getattr(container_status.state, "waiting", None)
        if waiting is not None and waiting.reason:
            return waiting.reason

    return status.phase


def _node_fields(node: Any) -> dict[str, Any]:
    status = node.status
    node_info = getattr(status, "node_info", None)

    return {
        "status": _node_status(node),
        "ip": next(
            (address.address for address in getattr(status, "addresses", None) or [] if address.type == "InternalIP"),
            None,
        ),
        "version": getattr(node_info, "kubelet_version", None),
    }


def _node_status(node: Any) -> str:
    conditions = getattr(node.status, "conditions", None) or []
    ready = next((condition for condition in conditions if condition.type == "Ready"), None)

    if ready is None:
        result = "Unknown"
    else:
        result = "Ready" if ready.status == "True" else "NotReady"

    if getattr(node.spec, "unschedulable", False):
        result += ",SchedulingDisabled"

    return result
