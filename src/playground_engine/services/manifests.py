"""Pod and service manifests for a session."""

from datetime import timedelta

from kubernetes_asyncio.client import (
    V1Affinity,
    V1Container,
    V1EnvVar,
    V1NodeAffinity,
    V1NodeSelectorRequirement,
    V1NodeSelectorTerm,
    V1ObjectMeta,
    V1Pod,
    V1PodSpec,
    V1PreferredSchedulingTerm,
    V1Service,
    V1ServicePort,
    V1ServiceSpec,
)

from playground_engine.domain.templates import Template
from playground_engine.services.codec import encode_annotations
from playground_engine.services.naming import (
    COMPONENT_VALUE,
    NODE_POOL_LABEL,
    OWNER_LABEL,
    WEB_PORT,
    pod_name,
    service_name,
    session_labels,
)

POOL_AFFINITY_WEIGHT = 100


def pod_env_variables(template: Template, host: str, session_id: str) -> list[V1EnvVar]:
    """Session identity variables followed by the template's own."""
    envs = [
        V1EnvVar(name="PLAYGROUND", value=""),
        V1EnvVar(name="PLAYGROUND_SESSION", value=session_id),
        V1EnvVar(name="PLAYGROUND_HOSTNAME", value=host),
    ]
    envs.extend(V1EnvVar(name=env.name, value=env.value) for env in template.env_vars())
    return envs


def _pool_affinity(pool_id: str) -> V1Affinity:
    return V1Affinity(
        node_affinity=V1NodeAffinity(
            preferred_during_scheduling_ignored_during_execution=[
                V1PreferredSchedulingTerm(
                    weight=POOL_AFFINITY_WEIGHT,
                    preference=V1NodeSelectorTerm(
                        match_expressions=[
                            V1NodeSelectorRequirement(
                                key=NODE_POOL_LABEL,
                                operator="In",
                                values=[pool_id],
                            )
                        ]
                    ),
                )
            ]
        )
    )


def build_pod(
    host: str,
    session_id: str,
    template: Template,
    duration: timedelta,
    pool_id: str,
) -> V1Pod:
    """Build the pod running a session, softly pinned to its pool."""
    return V1Pod(
        metadata=V1ObjectMeta(
            name=pod_name(session_id),
            labels=session_labels(session_id),
            annotations=encode_annotations(template, duration),
        ),
        spec=V1PodSpec(
            affinity=_pool_affinity(pool_id),
            containers=[
                V1Container(
                    name=f"{COMPONENT_VALUE}-container",
                    image=template.image,
                    env=pod_env_variables(template, host, session_id),
                )
            ],
            termination_grace_period_seconds=1,
        ),
    )


def build_service(session_id: str, template: Template) -> V1Service:
    """Build the service exposing the web port and the template ports."""
    ports = [V1ServicePort(name="web", protocol="TCP", port=WEB_PORT)]
    ports.extend(
        V1ServicePort(
            name=port.name,
            protocol=port.protocol,
            port=port.port,
            target_port=port.target,
        )
        for port in template.ports()
    )
    return V1Service(
        metadata=V1ObjectMeta(
            name=service_name(session_id),
            labels=session_labels(session_id),
        ),
        spec=V1ServiceSpec(
            type="NodePort",
            selector={OWNER_LABEL: session_id},
            ports=ports,
        ),
    )
