from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional
from unittest.mock import patch

import pytest
from kubernetes.client.models import (
    V1Container,
    V1EnvVar,
    V1Node,
    V1NodeAddress,
    V1NodeCondition,
    V1NodeSpec,
    V1NodeStatus,
    V1NodeSystemInfo,
    V1ObjectMeta,
    V1Pod,
    V1PodSpec,
    V1PodStatus,
)

from kimspect.core.abstract.client import BaseResourceClient
from kimspect.core.exceptions import NotFound
from kimspect.core.models.config import Config

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOW = CREATED + timedelta(days=3, hours=4)


def make_pod(
    name: Optional[str],
    namespace: str = "default",
    *,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
    node: Optional[str] = "node-1",
    phase: str = "Running",
    ip: Optional[str] = "10.0.0.1",
    containers: Optional[list[V1Container]] = None,
) -> V1Pod:
    return V1Pod(
        metadata=V1ObjectMeta(
            name=name,
            namespace=namespace,
            labels=labels,
            annotations=annotations,
            creation_timestamp=CREATED,
        ),
        spec=V1PodSpec(node_name=node, containers=containers or [V1Container(name="app")]),
        status=V1PodStatus(phase=phase, pod_ip=ip),
    )


def make_container(name: str, **env: str) -> V1Container:
    return V1Container(name=name, env=[V1EnvVar(name=key, value=value) for key, value in env.items()])


def make_node(
    name: str,
    *,
    labels: Optional[dict[str, str]] = None,
    annotations: Optional[dict[str, str]] = None,
    ready: str = "True",
    unschedulable: Optional[bool] = None,
    ip: str = "192.168.0.10",
    kubelet_version: str = "v1.29.2",
) -> V1Node:
    return V1Node(
        metadata=V1ObjectMeta(name=name, labels=labels, annotations=annotations, creation_timestamp=CREATED),
        spec=V1NodeSpec(unschedulable=unschedulable),
        status=V1NodeStatus(
            conditions=[V1NodeCondition(type="Ready", status=ready)],
            addresses=[
                V1NodeAddress(type="Hostname", address=name),
                V1NodeAddress(type="InternalIP", address=ip),
            ],
            node_info=V1NodeSystemInfo(
                architecture="amd64",
                boot_id="boot",
                container_runtime_version="containerd://1.7.13",
                kernel_version="6.1.0",
                kube_proxy_version=kubelet_version,
                kubelet_version=kubelet_version,
                machine_id="machine",
                operating_system="linux",
                os_image="Ubuntu 22.04.4 LTS",
                system_uuid="uuid",
            ),
        ),
    )


class FakeResourceClient(BaseResourceClient):
    """In-memory cluster. Records every call and ignores the node hint, like a client without pushdown."""

    def __init__(
        self, pods: Iterable[V1Pod] = (), nodes: Iterable[V1Node] = (), error: Optional[Exception] = None
    ) -> None:
        self.pods = list(pods)
        self.nodes = list(nodes)
        self.error = error
        self.calls: list[tuple[Any, ...]] = []

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def list_pods(self, namespace: Optional[str], *, node: Optional[str] = None) -> list[V1Pod]:
        self._record("list_pods", namespace)
        return [pod for pod in self.pods if namespace is None or pod.metadata.namespace == namespace]

    def get_pod(self, namespace: str, name: str) -> V1Pod:
        self._record("get_pod", namespace, name)
        for pod in self.pods:
            if pod.metadata.namespace == namespace and pod.metadata.name == name:
                return pod
        raise NotFound("Pod", name, namespace)

    def list_nodes(self) -> list[V1Node]:
        self._record("list_nodes")
        return list(self.nodes)

    def get_node(self, name: str) -> V1Node:
        self._record("get_node", name)
        for node in self.nodes:
            if node.metadata.name == name:
                return node
        raise NotFound("Node", name)


@pytest.fixture
def fake_client() -> FakeResourceClient:
    return FakeResourceClient(
        pods=[
            make_pod("web-1", labels={"app": "web", "tier": "frontend"}),
            make_pod("web-2", labels={"app": "web"}, node="node-2", ip="10.0.0.2"),
            make_pod("db-0", "storage", labels={"app": "db"}, annotations={"owner": "dba"}, node="node-2"),
        ],
        nodes=[
            make_node("node-1", labels={"zone": "a"}),
            make_node("node-2", labels={"zone": "b"}, ready="False"),
        ],
    )


@pytest.fixture(autouse=True)
def mock_kubeconfig():
    with patch.object(Config, "load_kubeconfig", return_value=None):
        with patch.object(Config, "get_kube_client", return_value=None):
            with patch.object(Config, "resolve_default_namespace", return_value="default"):
                yield
