"""Shared test fixtures."""

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest
from kubernetes_asyncio.client import (
    V1Ingress,
    V1IngressRule,
    V1IngressSpec,
    V1Node,
    V1ObjectMeta,
    V1Pod,
    V1PodStatus,
    V1Service,
)

from playground_engine.config import Settings
from playground_engine.containers import AppContainer, build_container
from playground_engine.domain.errors import FailureError
from playground_engine.domain.templates import (
    NameValuePair,
    Port,
    RuntimeConfiguration,
    Template,
)
from playground_engine.domain.users import User
from playground_engine.services.codec import dump_yaml
from playground_engine.services.manifests import build_pod
from playground_engine.services.naming import (
    HOSTNAME_LABEL,
    INSTANCE_TYPE_LABEL,
    NODE_POOL_LABEL,
    TEMPLATES_CONFIG_MAP,
    USERS_CONFIG_MAP,
)
from playground_engine.services.pools import NodeRepository
from playground_engine.services.registry import ConfigMapRepository
from playground_engine.services.routes import IngressRepository
from playground_engine.services.sessions import WorkloadRepository

HOST = "playground.test"


def make_template(image: str = "paritytech/substrate:latest") -> Template:
    return Template(
        name="Node Template",
        image=image,
        description="A fresh node template",
        runtime=RuntimeConfiguration(
            env=[NameValuePair(name="RUST_LOG", value="info")],
            ports=[
                Port(name="front-end", path="/front-end", port=8000, protocol="TCP"),
                Port(name="wss", path="/wss", port=9944, target=9944),
            ],
        ),
    )


def make_node(
    hostname: str, pool: str | None = None, instance_type: str | None = None
) -> V1Node:
    labels = {HOSTNAME_LABEL: hostname}
    if pool is not None:
        labels[NODE_POOL_LABEL] = pool
    if instance_type is not None:
        labels[INSTANCE_TYPE_LABEL] = instance_type
    return V1Node(metadata=V1ObjectMeta(name=hostname, labels=labels))


def make_ingress(hosts: list[str] | None = None) -> V1Ingress:
    rules = [V1IngressRule(host=host) for host in (hosts or [HOST])]
    return V1Ingress(
        metadata=V1ObjectMeta(name="ingress"),
        spec=V1IngressSpec(rules=rules),
    )


def make_session_pod(
    session_id: str,
    template: Template | None = None,
    duration: timedelta = timedelta(minutes=45),
    pool_id: str = "default",
    node: str = "node-1",
) -> V1Pod:
    """A scheduled, running session pod."""
    pod = build_pod(HOST, session_id, template or make_template(), duration, pool_id)
    pod.spec.node_name = node
    pod.status = V1PodStatus(
        phase="Running", start_time=datetime(2026, 1, 1, tzinfo=UTC)
    )
    return pod


def _matches(labels: dict[str, str] | None, selector: str | None) -> bool:
    if selector is None:
        return True
    key, _, value = selector.partition("=")
    return (labels or {}).get(key) == value


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


@dataclass
class InMemoryCluster(
    NodeRepository, IngressRepository, WorkloadRepository, ConfigMapRepository
):
    """In-memory cluster for tests.

    Created pods are scheduled on `schedule_on` straight away; operations named
    in `failures` raise the configured error instead of running.
    """

    nodes: list[V1Node] = field(default_factory=list)
    pods: dict[str, V1Pod] = field(default_factory=dict)
    services: dict[str, V1Service] = field(default_factory=dict)
    ingress: V1Ingress | None = field(default_factory=make_ingress)
    config_maps: dict[str, dict[str, str] | None] = field(
        default_factory=lambda: {USERS_CONFIG_MAP: {}, TEMPLATES_CONFIG_MAP: {}}
    )
    schedule_on: str | None = "node-1"
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    connected: bool = False

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def list_nodes(self, label_selector: str | None = None) -> list[V1Node]:
        self._call("list_nodes")
        return [
            node for node in self.nodes if _matches(node.metadata.labels, label_selector)
        ]

    async def get_pod(self, name: str) -> V1Pod | None:
        self._call("get_pod")
        return copy.deepcopy(self.pods.get(name))

    async def list_pods(self, label_selector: str) -> list[V1Pod]:
        self._call("list_pods")
        return [
            copy.deepcopy(pod)
            for pod in self.pods.values()
            if _matches(pod.metadata.labels, label_selector)
        ]

    async def create_pod(self, pod: V1Pod) -> None:
        self._call("create_pod")
        if pod.metadata.name in self.pods:
            raise FailureError("pod already exists")
        stored = copy.deepcopy(pod)
        if self.schedule_on is not None:
            stored.spec.node_name = self.schedule_on
        stored.status = V1PodStatus(phase="Pending")
        self.pods[pod.metadata.name] = stored

    async def delete_pod(self, name: str) -> None:
        self._call("delete_pod")
        if self.pods.pop(name, None) is None:
            raise FailureError("pod not found")

    async def patch_pod(self, name: str, operations: list[dict[str, object]]) -> None:
        self._call("patch_pod")
        pod = self.pods[name]
        for operation in operations:
            assert operation["op"] == "add"
            prefix = "/metadata/annotations/"
            path = str(operation["path"])
            assert path.startswith(prefix)
            key = _unescape(path[len(prefix) :])
            pod.metadata.annotations[key] = operation["value"]

    async def create_service(self, service: V1Service) -> None:
        self._call("create_service")
        if service.metadata.name in self.services:
            raise FailureError("service already exists")
        self.services[service.metadata.name] = copy.deepcopy(service)

    async def delete_service(self, name: str) -> None:
        self._call("delete_service")
        if self.services.pop(name, None) is None:
            raise FailureError("service not found")

    async def get_ingress(self, name: str) -> V1Ingress:
        self._call("get_ingress")
        if self.ingress is None:
            raise FailureError("ingress not found")
        return copy.deepcopy(self.ingress)

    async def replace_ingress(self, name: str, ingress: V1Ingress) -> None:
        self._call("replace_ingress")
        self.ingress = copy.deepcopy(ingress)

    async def get_config_map_data(self, name: str) -> dict[str, str] | None:
        self._call("get_config_map_data")
        data = self.config_maps.get(name)
        return dict(data) if data is not None else None

    async def add_config_map_value(self, name: str, key: str, value: str) -> None:
        self._call("add_config_map_value")
        self.config_maps.setdefault(name, {})[key] = value

    async def remove_config_map_value(self, name: str, key: str) -> None:
        self._call("remove_config_map_value")
        data = self.config_maps.get(name) or {}
        if key not in data:
            raise FailureError("key not found")
        del data[key]

    def add_template(self, key: str, template: Template) -> None:
        self.config_maps[TEMPLATES_CONFIG_MAP][key] = dump_yaml(template)

    def add_user(self, key: str, user: User) -> None:
        self.config_maps[USERS_CONFIG_MAP][key] = dump_yaml(user)

    def rule_hosts(self) -> list[str | None]:
        return [rule.host for rule in self.ingress.spec.rules]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        host=HOST,
        session_default_duration=45,
        session_max_duration=240,
        session_default_pool_affinity="default",
        session_default_max_per_node=1,
    )


@pytest.fixture
def cluster() -> InMemoryCluster:
    cluster = InMemoryCluster(
        nodes=[
            make_node("node-1", pool="default"),
            make_node("node-2", pool="default"),
        ]
    )
    cluster.add_template("node-template", make_template())
    cluster.add_user("alice", User())
    cluster.add_user("root", User(admin=True))
    return cluster


@pytest.fixture
def container(settings: Settings, cluster: InMemoryCluster) -> AppContainer:
    return build_container(settings, cluster=cluster)
