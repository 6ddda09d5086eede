"""Engine error types."""

from __future__ import annotations

from typing import Any


class EngineError(Exception):
    """Base exception for engine errors."""


class UnknownResourceTypeError(EngineError):
    """Raised when a resource type has no registration."""

    def __init__(self, resource_type: str) -> None:
        super().__init__(f"Unknown resource type: {resource_type}")
        self.resource_type = resource_type


class ValidationError(EngineError):
    """A field value was rejected before any network call was made."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(f"Error validating `{field}` value {value!r}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason


class RemoteError(EngineError):
    """A remote call failed (non-2xx status or transport failure).

    Carries the HTTP verb and endpoint of the failed call, and the remote
    identity when one was already assigned. The underlying exception is
    chained via ``__cause__``.
    """

    def __init__(
        self,
        operation: str,
        endpoint: str,
        message: str,
        *,
        status: int | None = None,
        resource_id: str | None = None,
    ) -> None:
        super().__init__(f"calling {operation} {endpoint}: {message}")
        self.operation = operation
        self.endpoint = endpoint
        self.message = message
        self.status = status
        self.resource_id = resource_id


class NotFoundError(RemoteError):
    """The remote resource does not exist (HTTP 404)."""

    def __init__(self, operation: str, endpoint: str, message: str) -> None:
        super().__init__(operation, endpoint, message, status=404)


class LifecycleError(EngineError):
    """An operation was invoked in a lifecycle state that does not allow it."""


class StateLockError(EngineError):
    """Raised when the state lock cannot be acquired or released."""


class ApplyError(EngineError):
    """Raised when an apply fails mid-way through.

    Carries the partial result (what was applied before the failure) so
    callers can inspect progress.  The original exception is chained via
    ``__cause__``.
    """

    def __init__(self, *, applied: list[Any], address: str, message: str) -> None:
        from iplb_provisioner.engine.types import ApplyResult

        self.result = ApplyResult(applied=applied)
        self.address = address
        super().__init__(f"Apply failed on {address}: {message}")
