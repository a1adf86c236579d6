"""Maintenance of the shared ingress route table."""

import logging
from dataclasses import dataclass
from typing import Protocol

from kubernetes_asyncio.client import (
    V1HTTPIngressPath,
    V1HTTPIngressRuleValue,
    V1Ingress,
    V1IngressBackend,
    V1IngressRule,
    V1IngressServiceBackend,
    V1ServiceBackendPort,
)

from playground_engine.domain.environment import Environment
from playground_engine.domain.errors import FailureError, MissingDataError
from playground_engine.domain.templates import Template
from playground_engine.services.naming import (
    INGRESS_NAME,
    WEB_PORT,
    service_name,
    subdomain,
)

logger = logging.getLogger(__name__)


class IngressRepository(Protocol):
    """Access to the singleton routing object."""

    async def get_ingress(self, name: str) -> V1Ingress:
        """Return the ingress with the given name."""

    async def replace_ingress(self, name: str, ingress: V1Ingress) -> None:
        """Replace the whole ingress object."""


def build_ingress_path(path: str, service: str, port: int) -> V1HTTPIngressPath:
    return V1HTTPIngressPath(
        path=path,
        path_type="Prefix",
        backend=V1IngressBackend(
            service=V1IngressServiceBackend(
                name=service,
                port=V1ServiceBackendPort(number=port),
            )
        ),
    )


def build_route_rule(host: str, session_id: str, template: Template) -> V1IngressRule:
    """Route a session subdomain to its service: `/` plus each template port."""
    service = service_name(session_id)
    paths = [build_ingress_path("/", service, WEB_PORT)]
    paths.extend(
        build_ingress_path(port.path, service, port.port) for port in template.ports()
    )
    return V1IngressRule(
        host=subdomain(host, session_id),
        http=V1HTTPIngressRuleValue(paths=paths),
    )


def _rules(ingress: V1Ingress) -> list[V1IngressRule]:
    if ingress.spec is None:
        raise MissingDataError("ingress.spec")
    if ingress.spec.rules is None:
        raise MissingDataError("ingress.spec.rules")
    return list(ingress.spec.rules)


@dataclass
class RouteTable:
    """Read-modify-write access to the shared ingress rules.

    Replacements carry no version guard: concurrent writers race and the last
    replace wins.
    """

    repository: IngressRepository
    environment: Environment

    async def add_routes(self, templates: dict[str, Template]) -> None:
        """Append one rule per session and persist the ingress."""
        ingress = await self.repository.get_ingress(INGRESS_NAME)
        rules = _rules(ingress)
        for session_id, template in templates.items():
            rules.append(build_route_rule(self.environment.host, session_id, template))
        ingress.spec.rules = rules
        await self.repository.replace_ingress(INGRESS_NAME, ingress)

    async def remove_route(self, session_id: str) -> None:
        """Drop the rule routing a session's subdomain and persist the ingress."""
        host = subdomain(self.environment.host, session_id)
        ingress = await self.repository.get_ingress(INGRESS_NAME)
        ingress.spec.rules = [
            rule for rule in _rules(ingress) if (rule.host or "unknown") != host
        ]
        await self.repository.replace_ingress(INGRESS_NAME, ingress)

    async def discover_environment(self, default_host: str) -> tuple[str, bool]:
        """Return the public host and TLS flag declared by the ingress."""
        try:
            ingress = await self.repository.get_ingress(INGRESS_NAME)
        except FailureError:
            logger.warning("Ingress unavailable, using host %s", default_host)
            return default_host, False
        rules = _rules(ingress)
        if not rules:
            raise MissingDataError("ingress.spec.rules[0]")
        if not rules[0].host:
            raise MissingDataError("ingress.spec.rules[0].host")
        return rules[0].host, ingress.spec.tls is not None
