from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import urllib3
from kubernetes import client  # type: ignore
from kubernetes.client import ApiException  # type: ignore
from kubernetes.client.models import V1Node, V1Pod  # type: ignore
from kubernetes.config.config_exception import ConfigException

from kimspect.core.abstract.client import BaseResourceClient
from kimspect.core.exceptions import ApiError, NotFound
from kimspect.core.models.config import Config
from kimspect.utils.logging import TRACE

logger = logging.getLogger("kimspect")


class KubernetesResourceClient(BaseResourceClient):
    """Resource client backed by the official kubernetes client's CoreV1Api."""

    def __init__(self, api_client: Optional[client.ApiClient] = None, *, request_timeout: Optional[float] = None):
        self.core = client.CoreV1Api(api_client=api_client)
        self.request_timeout = request_timeout

    @classmethod
    def from_config(cls, config: Config) -> KubernetesResourceClient:
        try:
            config.load_kubeconfig()
            api_client = config.get_kube_client()
        except ConfigException as e:
            raise ApiError(f"Could not load the Kubernetes configuration: {e}", cause=e) from e

        logger.debug("Using in-cluster configuration" if config.inside_cluster else "Using kubeconfig")
        return cls(api_client, request_timeout=config.kube_request_timeout)

    def list_pods(self, namespace: Optional[str], *, node: Optional[str] = None) -> list[V1Pod]:
        kwargs: dict[str, Any] = {}
        if node is not None:
            kwargs["field_selector"] = f"spec.nodeName={node}"

        if namespace is None:
            logger.debug(f"Listing pods in all namespaces {kwargs}")
            result = self._request("Pod", lambda: self.core.list_pod_for_all_namespaces(**kwargs, **self._options))
        else:
            logger.debug(f"Listing pods in namespace {namespace} {kwargs}")
            result = self._request(
                "Pod", lambda: self.core.list_namespaced_pod(namespace=namespace, **kwargs, **self._options)
            )

        return result.items

    def get_pod(self, namespace: str, name: str) -> V1Pod:
        logger.debug(f"Getting pod {namespace}/{name}")
        return self._request(
            "Pod",
            lambda: self.core.read_namespaced_pod(name=name, namespace=namespace, **self._options),
            name=name,
            namespace=namespace,
        )

    def list_nodes(self) -> list[V1Node]:
        logger.debug("Listing nodes")
        return self._request("Node", lambda: self.core.list_node(**self._options)).items

    def get_node(self, name: str) -> V1Node:
        logger.debug(f"Getting node {name}")
        return self._request("Node", lambda: self.core.read_node(name=name, **self._options), name=name)

    @property
    def _options(self) -> dict[str, Any]:
        return {"_request_timeout": self.request_timeout} if self.request_timeout is not None else {}

    @staticmethod
    def _request(
        kind: str, request: Callable[[], Any], *, name: Optional[str] = None, namespace: Optional[str] = None
    ) -> Any:
        # NOTE: No retries here. A query must reflect the present cluster state.
        try:
            result = request()
        except ApiException as e:
            if e.status == 404 and name is not None:
                raise NotFound(kind, name, namespace) from e
            raise ApiError(
                f"Error {e.status} requesting {kind} from the Kubernetes API: {e.reason}", cause=e, status=e.status
            ) from e
        except urllib3.exceptions.HTTPError as e:
            raise ApiError(f"Could not reach the Kubernetes API: {e}", cause=e) from e

        if logger.isEnabledFor(TRACE):
            logger.log(TRACE, f"Kubernetes API returned {result!r}")
        return result
