"""Cluster environment the engine runs against."""

from dataclasses import dataclass


@dataclass
class Environment:
    """Namespace and public host of the playground.

    `host` and `secured` may be refreshed once at startup from the ingress.
    """

    namespace: str
    host: str
    secured: bool = False
