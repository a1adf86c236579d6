"""Kubernetes-backed implementation of the platform repositories."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from http import HTTPStatus

import aiohttp
from kubernetes_asyncio import config
from kubernetes_asyncio.client import (
    ApiClient,
    Configuration,
    CoreV1Api,
    NetworkingV1Api,
    V1Ingress,
    V1Node,
    V1Pod,
    V1Service,
)
from kubernetes_asyncio.client.exceptions import ApiException

from playground_engine.domain.errors import FailureError
from playground_engine.services.naming import json_pointer_escape
from playground_engine.services.pools import NodeRepository
from playground_engine.services.registry import ConfigMapRepository
from playground_engine.services.routes import IngressRepository
from playground_engine.services.sessions import WorkloadRepository

logger = logging.getLogger(__name__)


@contextmanager
def _platform_call() -> Iterator[None]:
    """Wrap API and transport errors in `FailureError`."""
    try:
        yield
    except (ApiException, aiohttp.ClientError) as exc:
        raise FailureError(exc) from exc


async def load_configuration() -> Configuration:
    """Load credentials from kubeconfig, falling back to the in-cluster account."""
    configuration = Configuration()
    try:
        await config.load_kube_config(client_configuration=configuration)
    except config.ConfigException:
        try:
            config.load_incluster_config(client_configuration=configuration)
        except config.ConfigException as exc:
            raise FailureError(exc) from exc
    return configuration


@dataclass
class KubernetesCluster(
    NodeRepository, IngressRepository, WorkloadRepository, ConfigMapRepository
):
    """Namespaced access to pods, services, ingresses, config maps and nodes."""

    namespace: str
    core_api: CoreV1Api | None = None
    networking_api: NetworkingV1Api | None = None
    api_client: ApiClient | None = None

    async def connect(self) -> None:
        """Create the API client from the available credentials."""
        configuration = await load_configuration()
        self.api_client = ApiClient(configuration=configuration)
        self.core_api = CoreV1Api(self.api_client)
        self.networking_api = NetworkingV1Api(self.api_client)
        logger.info("Connected to Kubernetes namespace %s", self.namespace)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.api_client is not None:
            await self.api_client.close()

    @property
    def _core(self) -> CoreV1Api:
        if self.core_api is None:
            raise RuntimeError("Kubernetes client is not connected")
        return self.core_api

    @property
    def _networking(self) -> NetworkingV1Api:
        if self.networking_api is None:
            raise RuntimeError("Kubernetes client is not connected")
        return self.networking_api

    async def list_nodes(self, label_selector: str | None = None) -> list[V1Node]:
        """Return cluster nodes, optionally filtered by labels."""
        params = {"label_selector": label_selector} if label_selector else {}
        with _platform_call():
            response = await self._core.list_node(**params)
        return list(response.items)

    async def get_pod(self, name: str) -> V1Pod | None:
        """Return a pod by name; a missing pod yields `None`."""
        with _platform_call():
            try:
                return await self._core.read_namespaced_pod(name, self.namespace)
            except ApiException as exc:
                if exc.status == HTTPStatus.NOT_FOUND:
                    return None
                raise

    async def list_pods(self, label_selector: str) -> list[V1Pod]:
        with _platform_call():
            response = await self._core.list_namespaced_pod(
                self.namespace, label_selector=label_selector
            )
        return list(response.items)

    async def create_pod(self, pod: V1Pod) -> None:
        with _platform_call():
            await self._core.create_namespaced_pod(self.namespace, pod)

    async def delete_pod(self, name: str) -> None:
        with _platform_call():
            await self._core.delete_namespaced_pod(name, self.namespace)

    async def patch_pod(self, name: str, operations: list[dict[str, object]]) -> None:
        """Apply a JSON patch; a list body is sent as json-patch."""
        with _platform_call():
            await self._core.patch_namespaced_pod(name, self.namespace, operations)

    async def create_service(self, service: V1Service) -> None:
        with _platform_call():
            await self._core.create_namespaced_service(self.namespace, service)

    async def delete_service(self, name: str) -> None:
        with _platform_call():
            await self._core.delete_namespaced_service(name, self.namespace)

    async def get_ingress(self, name: str) -> V1Ingress:
        with _platform_call():
            return await self._networking.read_namespaced_ingress(name, self.namespace)

    async def replace_ingress(self, name: str, ingress: V1Ingress) -> None:
        with _platform_call():
            await self._networking.replace_namespaced_ingress(
                name, self.namespace, ingress
            )

    async def get_config_map_data(self, name: str) -> dict[str, str] | None:
        with _platform_call():
            config_map = await self._core.read_namespaced_config_map(
                name, self.namespace
            )
        return config_map.data

    async def add_config_map_value(self, name: str, key: str, value: str) -> None:
        """Equivalent to a json patch `add` of `/data/<key>`."""
        operation = {"op": "add", "path": _data_path(key), "value": value}
        with _platform_call():
            await self._core.patch_namespaced_config_map(
                name, self.namespace, [operation]
            )

    async def remove_config_map_value(self, name: str, key: str) -> None:
        """Equivalent to a json patch `remove` of `/data/<key>`."""
        operation = {"op": "remove", "path": _data_path(key)}
        with _platform_call():
            await self._core.patch_namespaced_config_map(
                name, self.namespace, [operation]
            )


def _data_path(key: str) -> str:
    return f"/data/{json_pointer_escape(key)}"
