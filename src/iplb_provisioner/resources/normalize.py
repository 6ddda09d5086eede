"""Field normalization and input validation helpers."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable
from typing import Any

from iplb_provisioner.engine.errors import ValidationError


def sorted_strings(values: Iterable[Any] | None) -> list[str]:
    """Return the elements of a set-valued field in a deterministic order."""
    if values is None:
        return []
    return sorted({str(v) for v in values})


def optional_value(resource: Any, name: str) -> Any:
    """Explicit value of *name*, or ``None`` when the caller never set it.

    Relies on pydantic's ``model_fields_set`` to tell "left at the default"
    apart from "explicitly set to the default value".
    """
    if name not in resource.model_fields_set:
        return None
    return getattr(resource, name)


def optional_bool(resource: Any, name: str) -> bool | None:
    value = optional_value(resource, name)
    return None if value is None else bool(value)


def optional_int(resource: Any, name: str) -> int | None:
    value = optional_value(resource, name)
    return None if value is None else int(value)


def validate_ip_block(field: str, value: str) -> None:
    """Raise ``ValidationError`` unless *value* is an IP address or CIDR block."""
    try:
        ipaddress.ip_network(value, strict=False)
    except ValueError as exc:
        raise ValidationError(field, value, str(exc)) from exc


def validate_ip_blocks(field: str, values: Iterable[str] | None) -> None:
    for value in values or ():
        validate_ip_block(field, value)
