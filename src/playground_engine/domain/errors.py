"""Error taxonomy shared by every engine operation."""


class EngineError(Exception):
    """Base class for errors raised by the session engine."""


class MissingDataError(EngineError):
    """Raised when an expected field or referenced entity is absent.

    Attributes:
        field: Name of the missing field, label, annotation or entity.
    """

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing data: {field}")


class FailureError(EngineError):
    """Raised when a platform call fails or a serialized payload is malformed.

    Attributes:
        cause: The underlying exception, or ``None`` for a plain message.
    """

    def __init__(self, cause: Exception | str):
        self.cause = cause if isinstance(cause, Exception) else None
        super().__init__(f"Failure: {cause}")


class UnauthorizedError(EngineError):
    """Raised on a policy violation such as exceeded capacity."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unauthorized: {reason}")
