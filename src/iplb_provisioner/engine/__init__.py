"""Reconciliation engine for remote resources."""

from iplb_provisioner.engine.errors import (
    ApplyError,
    EngineError,
    LifecycleError,
    NotFoundError,
    RemoteError,
    StateLockError,
    UnknownResourceTypeError,
    ValidationError,
)
from iplb_provisioner.engine.types import Action, ApplyResult, ResourceChange

__all__ = [
    "Action",
    "ApplyError",
    "ApplyResult",
    "EngineError",
    "LifecycleError",
    "NotFoundError",
    "RemoteError",
    "ResourceChange",
    "StateLockError",
    "UnknownResourceTypeError",
    "ValidationError",
]
