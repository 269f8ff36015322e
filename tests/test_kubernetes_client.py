from unittest.mock import MagicMock

import pytest
import urllib3
from kubernetes.client import ApiException

from kimspect.core.exceptions import ApiError, NotFound
from kimspect.core.integrations.kubernetes import KubernetesResourceClient
from kimspect.core.models.config import Config

from .conftest import make_node, make_pod


@pytest.fixture
def kube_client() -> KubernetesResourceClient:
    client = KubernetesResourceClient(MagicMock())
    client.core = MagicMock()
    return client


def test_list_pods_in_namespace(kube_client):
    kube_client.core.list_namespaced_pod.return_value = MagicMock(items=[make_pod("web-1")])

    pods = kube_client.list_pods("default")

    assert [pod.metadata.name for pod in pods] == ["web-1"]
    kube_client.core.list_namespaced_pod.assert_called_once_with(namespace="default")
    kube_client.core.list_pod_for_all_namespaces.assert_not_called()


def test_node_filter_is_pushed_down(kube_client):
    kube_client.core.list_pod_for_all_namespaces.return_value = MagicMock(items=[])

    kube_client.list_pods(None, node="node-1")

    kube_client.core.list_pod_for_all_namespaces.assert_called_once_with(field_selector="spec.nodeName=node-1")


def test_request_timeout_is_passed_through():
    client = KubernetesResourceClient(MagicMock(), request_timeout=2.5)
    client.core = MagicMock()
    client.core.list_node.return_value = MagicMock(items=[make_node("node-1")])

    client.list_nodes()

    client.core.list_node.assert_called_once_with(_request_timeout=2.5)


def test_get_missing_pod_is_not_found(kube_client):
    kube_client.core.read_namespaced_pod.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFound) as exc_info:
        kube_client.get_pod("default", "ghost")

    assert str(exc_info.value) == "Pod 'ghost' not found in namespace default"


def test_get_missing_node_is_not_found(kube_client):
    kube_client.core.read_node.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFound, match="Node 'ghost' not found"):
        kube_client.get_node("ghost")


def test_forbidden_is_an_api_error(kube_client):
    kube_client.core.list_node.side_effect = ApiException(status=403, reason="Forbidden")

    with pytest.raises(ApiError) as exc_info:
        kube_client.list_nodes()

    assert exc_info.value.status == 403
    assert isinstance(exc_info.value.cause, ApiException)


def test_list_404_is_an_api_error(kube_client):
    kube_client.core.list_namespaced_pod.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(ApiError):
        kube_client.list_pods("default")


def test_transport_error_is_an_api_error(kube_client):
    kube_client.core.list_node.side_effect = urllib3.exceptions.MaxRetryError(None, "/api/v1/nodes")

    with pytest.raises(ApiError, match="Could not reach the Kubernetes API"):
        kube_client.list_nodes()

    assert kube_client.core.list_node.call_count == 1


@pytest.mark.parametrize("request_timeout,expected", [(None, 60.0), (5, 5.0), (0, None)])
def test_from_config_bounds_requests(request_timeout, expected):
    options = {} if request_timeout is None else {"request_timeout": request_timeout}

    client = KubernetesResourceClient.from_config(Config(**options))

    assert client.request_timeout == expected
