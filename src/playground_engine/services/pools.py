"""Node pool aggregation."""

from dataclasses import dataclass
from typing import Protocol

from kubernetes_asyncio.client import V1Node

from playground_engine.domain.errors import MissingDataError
from playground_engine.domain.pools import Node, Pool
from playground_engine.services.naming import (
    HOSTNAME_LABEL,
    INSTANCE_TYPE_LABEL,
    NODE_POOL_LABEL,
    pool_selector,
)

DEFAULT_POOL = "default"
LOCAL_INSTANCE_TYPE = "local"
UNKNOWN_HOSTNAME = "unknown"


class NodeRepository(Protocol):
    """Read access to cluster nodes."""

    async def list_nodes(self, label_selector: str | None = None) -> list[V1Node]:
        """Return nodes, optionally filtered by a label selector."""


def _labels(node: V1Node) -> dict[str, str]:
    if node.metadata is None or node.metadata.labels is None:
        return {}
    return node.metadata.labels


def nodes_to_pool(pool_id: str, nodes: list[V1Node]) -> Pool:
    """Derive a pool from its nodes; the first node decides the instance type."""
    if not nodes:
        raise MissingDataError("empty list of nodes")
    instance_type = _labels(nodes[0]).get(INSTANCE_TYPE_LABEL, LOCAL_INSTANCE_TYPE)
    return Pool(
        name=pool_id,
        instance_type=instance_type,
        nodes=[
            Node(hostname=_labels(node).get(HOSTNAME_LABEL, UNKNOWN_HOSTNAME))
            for node in nodes
        ],
    )


def group_nodes_by_pool(nodes: list[V1Node]) -> dict[str, list[V1Node]]:
    """Group nodes on the pool label; unlabelled nodes land in `default`."""
    groups: dict[str, list[V1Node]] = {}
    for node in nodes:
        pool_id = _labels(node).get(NODE_POOL_LABEL, DEFAULT_POOL)
        groups.setdefault(pool_id, []).append(node)
    return groups


@dataclass
class PoolService:
    """Service exposing pool-level capacity facts."""

    repository: NodeRepository

    async def list_pools(self) -> dict[str, Pool]:
        """Return every pool keyed by id."""
        nodes = await self.repository.list_nodes()
        groups = group_nodes_by_pool(nodes)
        return {
            pool_id: nodes_to_pool(pool_id, groups[pool_id])
            for pool_id in sorted(groups)
        }

    async def get_pool(self, pool_id: str) -> Pool | None:
        """Return a pool, or `None` when no node carries its label."""
        nodes = await self.repository.list_nodes(pool_selector(pool_id))
        if not nodes:
            return None
        return nodes_to_pool(pool_id, nodes)
