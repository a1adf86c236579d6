"""Domain models for node pools."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    """Read-only view of a cluster machine."""

    hostname: str


@dataclass(frozen=True)
class Pool:
    """Group of nodes sharing the same pool label."""

    name: str
    instance_type: str | None
    nodes: list[Node]
