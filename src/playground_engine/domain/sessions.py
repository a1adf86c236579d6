"""Domain models for playground sessions."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from playground_engine.domain.templates import Template


class Phase(Enum):
    """Lifecycle phase reported by the platform for a session pod."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ContainerPhase(Enum):
    """State of the session container."""

    RUNNING = "Running"
    WAITING = "Waiting"
    TERMINATED = "Terminated"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ContainerStatus:
    """Observed state of the session container."""

    phase: ContainerPhase
    reason: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class PodDetails:
    """Compute-unit status surfaced with a session."""

    phase: Phase
    reason: str
    message: str
    start_time: datetime | None
    container: ContainerStatus | None


@dataclass(frozen=True)
class Session:
    """A user's running instance of a template.

    Never persisted on its own: rebuilt from the session pod on every read.
    """

    session_id: str
    user_id: str
    template: Template
    url: str
    duration: timedelta
    node: str
    pod: PodDetails


@dataclass(frozen=True)
class SessionConfiguration:
    """Parameters of a session creation request."""

    template: str
    duration: timedelta | None = None
    pool_affinity: str | None = None


@dataclass(frozen=True)
class SessionUpdateConfiguration:
    """Parameters of a session update request."""

    duration: timedelta | None = None


@dataclass(frozen=True)
class SessionDefaults:
    """Cluster-wide session policy."""

    duration: timedelta
    max_duration: timedelta
    pool_affinity: str
    max_sessions_per_node: int
