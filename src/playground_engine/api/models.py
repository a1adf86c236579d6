"""Request models and response serializers for the HTTP API."""

from datetime import timedelta

from pydantic import BaseModel, Field

from playground_engine.domain.pools import Pool
from playground_engine.domain.sessions import (
    Session,
    SessionConfiguration,
    SessionUpdateConfiguration,
)


class SessionRequest(BaseModel):
    """Session creation payload; duration in minutes."""

    template: str
    duration: int | None = Field(default=None, gt=0)
    pool_affinity: str | None = None

    def to_configuration(self) -> SessionConfiguration:
        return SessionConfiguration(
            template=self.template,
            duration=_minutes(self.duration),
            pool_affinity=self.pool_affinity,
        )


class SessionUpdateRequest(BaseModel):
    """Session update payload; duration in minutes."""

    duration: int | None = Field(default=None, gt=0)

    def to_configuration(self) -> SessionUpdateConfiguration:
        return SessionUpdateConfiguration(duration=_minutes(self.duration))


def _minutes(value: int | None) -> timedelta | None:
    return timedelta(minutes=value) if value is not None else None


def serialize_session(session: Session) -> dict[str, object]:
    pod = session.pod
    container = pod.container
    return {
        "id": session.session_id,
        "user_id": session.user_id,
        "url": session.url,
        "template": session.template.model_dump(mode="json", exclude_none=True),
        "duration": session.duration // timedelta(minutes=1),
        "node": session.node,
        "pod": {
            "phase": pod.phase.value,
            "reason": pod.reason,
            "message": pod.message,
            "start_time": pod.start_time.isoformat() if pod.start_time else None,
            "container": {
                "phase": container.phase.value,
                "reason": container.reason,
                "message": container.message,
            }
            if container
            else None,
        },
    }


def serialize_pool(pool: Pool) -> dict[str, object]:
    return {
        "name": pool.name,
        "instance_type": pool.instance_type,
        "nodes": [{"hostname": node.hostname} for node in pool.nodes],
    }
