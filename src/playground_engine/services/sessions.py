"""Session orchestration: admission control and multi-resource provisioning."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from kubernetes_asyncio.client import V1Pod, V1Service

from playground_engine.domain.environment import Environment
from playground_engine.domain.errors import (
    EngineError,
    MissingDataError,
    UnauthorizedError,
)
from playground_engine.domain.sessions import (
    Session,
    SessionConfiguration,
    SessionDefaults,
    SessionUpdateConfiguration,
)
from playground_engine.domain.users import User
from playground_engine.services.codec import duration_to_annotation, pod_to_session
from playground_engine.services.manifests import build_pod, build_service
from playground_engine.services.naming import (
    SESSION_DURATION_ANNOTATION,
    json_pointer_escape,
    pod_name,
    service_name,
    session_selector,
)
from playground_engine.services.pools import PoolService
from playground_engine.services.registry import TemplateService
from playground_engine.services.routes import RouteTable

logger = logging.getLogger(__name__)


class WorkloadRepository(Protocol):
    """Platform operations on session pods and services."""

    async def get_pod(self, name: str) -> V1Pod | None:
        """Return a pod by name, if present."""

    async def list_pods(self, label_selector: str) -> list[V1Pod]:
        """Return pods matching a label selector."""

    async def create_pod(self, pod: V1Pod) -> None:
        """Create a pod."""

    async def delete_pod(self, name: str) -> None:
        """Delete a pod by name."""

    async def patch_pod(self, name: str, operations: list[dict[str, object]]) -> None:
        """Apply a JSON patch to a pod."""

    async def create_service(self, service: V1Service) -> None:
        """Create a service."""

    async def delete_service(self, name: str) -> None:
        """Delete a service by name."""


def resolve_pool_affinity(requested: str | None, user: User, default: str) -> str:
    """Pick the target pool.

    Precedence, first present wins: the request override, the user's fixed
    affinity, the global default. Always resolves.
    """
    candidates = (requested, user.pool_affinity)
    return next((pool_id for pool_id in candidates if pool_id is not None), default)


def resolve_duration(requested: timedelta | None, default: timedelta) -> timedelta:
    """The request override when present, the configured default otherwise."""
    return requested if requested is not None else default


def check_customization(user: User, configuration: SessionConfiguration) -> None:
    """Reject overrides the user is not allowed to request."""
    if user.admin:
        return
    if configuration.duration is not None and not user.can_customize_duration:
        raise UnauthorizedError("duration customization not allowed")
    if configuration.pool_affinity is not None and not user.can_customize_pool_affinity:
        raise UnauthorizedError("pool affinity customization not allowed")


def check_update_customization(
    user: User, configuration: SessionUpdateConfiguration
) -> None:
    """Reject a duration change the user is not allowed to request."""
    if user.admin:
        return
    if configuration.duration is not None and not user.can_customize_duration:
        raise UnauthorizedError("duration customization not allowed")


@dataclass
class SessionOrchestrator:
    """Creates, updates, deletes and reads sessions.

    The session pod is the system of record; nothing is cached here. Creation
    touches three resources (route rule, pod, service) in that order and
    deletion removes them in reverse. There is no compensation: a failure
    midway leaves the earlier steps applied. The capacity check and the pod
    creation are not atomic either, so concurrent creations may overshoot
    the pool ceiling.
    """

    workloads: WorkloadRepository
    pools: PoolService
    templates: TemplateService
    routes: RouteTable
    environment: Environment
    defaults: SessionDefaults

    async def create_session(
        self, user: User, session_id: str, configuration: SessionConfiguration
    ) -> None:
        """Admit and provision a new session.

        Raises:
            MissingDataError: The pool or the template cannot be resolved.
            UnauthorizedError: The pool has no capacity left.
            FailureError: A platform call failed.
        """
        pool_id = resolve_pool_affinity(
            configuration.pool_affinity, user, self.defaults.pool_affinity
        )
        pool = await self.pools.get_pool(pool_id)
        if pool is None:
            raise MissingDataError("no matching pool")

        # Counts sessions across every pool, not only the target one.
        max_sessions = len(pool.nodes) * self.defaults.max_sessions_per_node
        sessions = await self.list_sessions()
        if len(sessions) >= max_sessions:
            logger.warning(
                "Rejected session %s: %d sessions for a capacity of %d",
                session_id,
                len(sessions),
                max_sessions,
            )
            raise UnauthorizedError(
                f"Reached maximum number of concurrent sessions allowed: {max_sessions}"
            )

        template = await self.templates.get_template(configuration.template)
        if template is None:
            raise MissingDataError("no matching template")

        await self.routes.add_routes({session_id: template})

        duration = resolve_duration(configuration.duration, self.defaults.duration)
        await self.workloads.create_pod(
            build_pod(self.environment.host, session_id, template, duration, pool_id)
        )
        await self.workloads.create_service(build_service(session_id, template))
        logger.info(
            "Created session %s from template %s on pool %s",
            session_id,
            configuration.template,
            pool_id,
        )

    async def update_session(
        self, session_id: str, configuration: SessionUpdateConfiguration
    ) -> None:
        """Change the duration of a running session without restarting it."""
        session = await self.get_session(session_id)
        if session is None:
            raise MissingDataError("no matching session")

        duration = resolve_duration(configuration.duration, self.defaults.duration)
        if duration > self.defaults.max_duration:
            raise UnauthorizedError("requested duration exceeds maximum")
        if duration == session.duration:
            return

        path = "/metadata/annotations/" + json_pointer_escape(
            SESSION_DURATION_ANNOTATION
        )
        await self.workloads.patch_pod(
            pod_name(session_id),
            [{"op": "add", "path": path, "value": duration_to_annotation(duration)}],
        )
        logger.info("Updated session %s duration to %s", session_id, duration)

    async def delete_session(self, session_id: str) -> None:
        """Remove the service, the pod, then the route rule of a session."""
        await self.workloads.delete_service(service_name(session_id))
        await self.workloads.delete_pod(pod_name(session_id))
        await self.routes.remove_route(session_id)
        logger.info("Deleted session %s", session_id)

    async def get_session(self, session_id: str) -> Session | None:
        pod = await self.workloads.get_pod(pod_name(session_id))
        if pod is None:
            return None
        return pod_to_session(pod, self.environment.host)

    async def list_sessions(self) -> list[Session]:
        """Return every session that can be rebuilt from its pod.

        Best effort: pods failing reconstruction are skipped, not reported.
        """
        sessions = []
        for pod in await self.workloads.list_pods(session_selector()):
            try:
                sessions.append(pod_to_session(pod, self.environment.host))
            except EngineError as exc:
                name = pod.metadata.name if pod.metadata else None
                logger.warning("Skipping pod %s: %s", name, exc)
        return sessions
