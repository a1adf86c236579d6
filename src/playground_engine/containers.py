"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from playground_engine.adapters.kubernetes_cluster import KubernetesCluster
from playground_engine.config import Settings, session_defaults
from playground_engine.domain.environment import Environment
from playground_engine.services.pools import PoolService
from playground_engine.services.registry import TemplateService, UserService
from playground_engine.services.routes import RouteTable
from playground_engine.services.sessions import SessionOrchestrator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    environment: Environment
    pool_service: PoolService
    route_table: RouteTable
    template_service: TemplateService
    user_service: UserService
    session_orchestrator: SessionOrchestrator
    open_resources: Callable[[], Awaitable[None]]
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, cluster: KubernetesCluster | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_cluster = cluster or KubernetesCluster(
        namespace=resolved_settings.namespace
    )
    environment = Environment(
        namespace=resolved_settings.namespace,
        host=resolved_settings.host or resolved_settings.default_host,
    )
    pool_service = PoolService(resolved_cluster)
    route_table = RouteTable(repository=resolved_cluster, environment=environment)
    template_service = TemplateService(resolved_cluster)
    user_service = UserService(resolved_cluster)
    session_orchestrator = SessionOrchestrator(
        workloads=resolved_cluster,
        pools=pool_service,
        templates=template_service,
        routes=route_table,
        environment=environment,
        defaults=session_defaults(resolved_settings),
    )

    async def open_resources() -> None:
        await resolved_cluster.connect()
        if resolved_settings.host is None:
            host, secured = await route_table.discover_environment(
                resolved_settings.default_host
            )
            environment.host = host
            environment.secured = secured

    async def close_resources() -> None:
        await resolved_cluster.close()

    return AppContainer(
        settings=resolved_settings,
        environment=environment,
        pool_service=pool_service,
        route_table=route_table,
        template_service=template_service,
        user_service=user_service,
        session_orchestrator=session_orchestrator,
        open_resources=open_resources,
        close_resources=close_resources,
    )
