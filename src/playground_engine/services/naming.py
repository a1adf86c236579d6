"""Deterministic names and labels for session-owned resources."""

NODE_POOL_LABEL = "cloud.google.com/gke-nodepool"
INSTANCE_TYPE_LABEL = "node.kubernetes.io/instance-type"
HOSTNAME_LABEL = "kubernetes.io/hostname"
APP_LABEL = "app.kubernetes.io/part-of"
APP_VALUE = "playground"
COMPONENT_LABEL = "app.kubernetes.io/component"
COMPONENT_VALUE = "session"
OWNER_LABEL = "app.kubernetes.io/owner"
INGRESS_NAME = "ingress"
TEMPLATE_ANNOTATION = "playground.dev/template"
SESSION_DURATION_ANNOTATION = "playground.dev/session_duration"
USERS_CONFIG_MAP = "playground-users"
TEMPLATES_CONFIG_MAP = "playground-templates"
WEB_PORT = 3000

_POD_PREFIX = f"{COMPONENT_VALUE}-"
_SERVICE_PREFIX = f"{COMPONENT_VALUE}-service-"


def pod_name(session_id: str) -> str:
    """Return the pod name owned by a session."""
    return f"{_POD_PREFIX}{session_id}"


def service_name(session_id: str) -> str:
    """Return the service name owned by a session."""
    return f"{_SERVICE_PREFIX}{session_id}"


def session_id_from_pod_name(name: str) -> str:
    """Inverse of `pod_name`; unknown names are returned unchanged."""
    if name.startswith(_POD_PREFIX):
        return name[len(_POD_PREFIX) :]
    return name


def subdomain(host: str, session_id: str) -> str:
    """Return the externally reachable host of a session."""
    return f"{session_id}.{host}"


def session_labels(session_id: str) -> dict[str, str]:
    """Labels applied to every resource owned by a session."""
    return {
        APP_LABEL: APP_VALUE,
        COMPONENT_LABEL: COMPONENT_VALUE,
        OWNER_LABEL: session_id,
    }


def session_selector() -> str:
    return f"{COMPONENT_LABEL}={COMPONENT_VALUE}"


def pool_selector(pool_id: str) -> str:
    return f"{NODE_POOL_LABEL}={pool_id}"


def json_pointer_escape(key: str) -> str:
    """Escape a key for use as a JSON-patch path segment (RFC 6901)."""
    return key.replace("~", "~0").replace("/", "~1")
