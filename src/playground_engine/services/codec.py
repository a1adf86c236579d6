"""Session state encoded into, and rebuilt from, pod metadata."""

from datetime import timedelta
from typing import TypeVar

import yaml
from kubernetes_asyncio.client import V1ContainerStatus, V1Pod
from pydantic import BaseModel, ValidationError

from playground_engine.domain.errors import FailureError, MissingDataError
from playground_engine.domain.sessions import (
    ContainerPhase,
    ContainerStatus,
    Phase,
    PodDetails,
    Session,
)
from playground_engine.domain.templates import Template
from playground_engine.services.naming import (
    OWNER_LABEL,
    SESSION_DURATION_ANNOTATION,
    TEMPLATE_ANNOTATION,
    session_id_from_pod_name,
    subdomain,
)

UNKNOWN_OWNER = "UNKNOWN OWNER"

ModelT = TypeVar("ModelT", bound=BaseModel)


def dump_yaml(model: BaseModel) -> str:
    """Serialize a payload model to YAML."""
    try:
        return yaml.safe_dump(
            model.model_dump(mode="json", exclude_none=True, by_alias=True),
            sort_keys=False,
        )
    except yaml.YAMLError as exc:
        raise FailureError(exc) from exc


def parse_yaml(model: type[ModelT], text: str) -> ModelT:
    """Parse YAML text into a payload model."""
    try:
        return model.model_validate(yaml.safe_load(text))
    except (yaml.YAMLError, ValidationError) as exc:
        raise FailureError(exc) from exc


def template_to_yaml(template: Template) -> str:
    return dump_yaml(template)


def template_from_yaml(text: str) -> Template:
    return parse_yaml(Template, text)


def duration_to_annotation(duration: timedelta) -> str:
    """Whole minutes as decimal text; sub-minute precision is truncated."""
    return str(duration // timedelta(minutes=1))


def annotation_to_duration(value: str) -> timedelta:
    """Parse a whole-minute duration annotation."""
    if not (value.isascii() and value.isdigit()):
        raise FailureError(f"Invalid session duration {value!r}")
    return timedelta(minutes=int(value))


def encode_annotations(template: Template, duration: timedelta) -> dict[str, str]:
    """Build the pod annotations carrying a session's state."""
    return {
        TEMPLATE_ANNOTATION: template_to_yaml(template),
        SESSION_DURATION_ANNOTATION: duration_to_annotation(duration),
    }


def pod_to_session(pod: V1Pod, host: str) -> Session:
    """Rebuild a session from its pod.

    Raises:
        MissingDataError: A label, annotation, status or node is absent.
        FailureError: The template or duration annotation is malformed.
    """
    metadata = pod.metadata
    if metadata is None or metadata.labels is None:
        raise MissingDataError("metadata.labels")
    if metadata.name is None:
        raise MissingDataError("metadata.name")
    user_id = metadata.labels.get(OWNER_LABEL, UNKNOWN_OWNER)
    annotations = metadata.annotations
    if annotations is None:
        raise MissingDataError("metadata.annotations")

    raw_template = annotations.get(TEMPLATE_ANNOTATION)
    if raw_template is None:
        raise MissingDataError("template")
    template = template_from_yaml(raw_template)

    raw_duration = annotations.get(SESSION_DURATION_ANNOTATION)
    if raw_duration is None:
        raise MissingDataError("session_duration")
    duration = annotation_to_duration(raw_duration)

    details = pod_to_details(pod)
    node = pod.spec.node_name if pod.spec is not None else None
    if not node:
        raise MissingDataError("spec.node_name")

    session_id = session_id_from_pod_name(metadata.name)
    return Session(
        session_id=session_id,
        user_id=user_id,
        template=template,
        url=subdomain(host, session_id),
        duration=duration,
        node=node,
        pod=details,
    )


def pod_to_details(pod: V1Pod) -> PodDetails:
    """Extract the status surfaced with a session."""
    status = pod.status
    if status is None:
        raise MissingDataError("status")
    try:
        phase = Phase(status.phase or Phase.UNKNOWN.value)
    except ValueError as exc:
        raise FailureError(exc) from exc
    container_statuses = status.container_statuses or []
    return PodDetails(
        phase=phase,
        reason=status.reason or "",
        message=status.message or "",
        start_time=status.start_time,
        container=(
            _container_status(container_statuses[0]) if container_statuses else None
        ),
    )


def _container_status(status: V1ContainerStatus) -> ContainerStatus:
    state = status.state
    if state is None:
        return ContainerStatus(phase=ContainerPhase.UNKNOWN)
    if state.running is not None:
        phase = ContainerPhase.RUNNING
    elif state.waiting is not None:
        phase = ContainerPhase.WAITING
    else:
        phase = ContainerPhase.TERMINATED
    waiting = state.waiting
    terminated = state.terminated
    reason = (waiting.reason if waiting else None) or (
        terminated.reason if terminated else None
    )
    message = (waiting.message if waiting else None) or (
        terminated.message if terminated else None
    )
    return ContainerStatus(phase=phase, reason=reason, message=message)
