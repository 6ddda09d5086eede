"""Declarative field markers for resource models.

Markers attach to Pydantic fields via ``Annotated``:

- ``ApiField``  : field maps to a key of the remote JSON payload
- ``PathParam`` : field is interpolated into the collection path
- ``Kind``      : required-immutable / required-mutable / optional-computed
- ``Compare``   : field-level comparison strategy used by the engine
- ``IpBlock``   : list elements must be IP literals or CIDR blocks

Helper functions introspect these markers at runtime to build outgoing
payloads, read remote responses back and drive validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeAlias, TypeVar, get_args

from iplb_provisioner.resources.normalize import (
    optional_bool,
    optional_int,
    optional_value,
    sorted_strings,
)

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo

M = TypeVar("M")
CompareStrategy: TypeAlias = Literal["exact", "set"]
FieldKind: TypeAlias = Literal["required-immutable", "required-mutable", "optional-computed"]


# ── Marker dataclasses ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ApiField:
    """Field maps to ``name`` in the remote payload."""

    name: str


@dataclass(frozen=True, slots=True)
class PathParam:
    """Field value fills the ``{field_name}`` slot of the collection path."""


@dataclass(frozen=True, slots=True)
class Kind:
    """Presence semantics of the field.

    - ``"required-immutable"``: set at creation, changing it means replacement
    - ``"required-mutable"``: set at creation, changeable via update
    - ``"optional-computed"``: may be omitted; the remote assigns a default
    """

    kind: FieldKind


@dataclass(frozen=True, slots=True)
class Compare:
    """How the engine should compare the field.

    - ``"exact"``: strict equality comparison
    - ``"set"``: order-insensitive list comparison
    """

    strategy: CompareStrategy


@dataclass(frozen=True, slots=True)
class IpBlock:
    """Every element must parse as an IP address or CIDR block."""


# ── Shared introspection primitives ─────────────────────────────────


def _find_marker(field_info: FieldInfo, marker_type: type[M]) -> M | None:
    """Return the first marker of *marker_type* on a field, or ``None``."""
    return next((m for m in field_info.metadata if isinstance(m, marker_type)), None)


def _iter_marked_fields(
    model_or_cls: Any,
    marker_type: type[M],
) -> list[tuple[str, FieldInfo, M]]:
    """Return ``(field_name, field_info, marker)`` for every field carrying *marker_type*."""
    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    return [
        (name, fi, marker)
        for name, fi in cls.model_fields.items()
        if (marker := _find_marker(fi, marker_type)) is not None
    ]


def _field_kind(fi: FieldInfo) -> FieldKind:
    marker = _find_marker(fi, Kind)
    return marker.kind if marker is not None else "optional-computed"


def _explicit_scalar(resource: Any, name: str, fi: FieldInfo) -> Any:
    types = get_args(fi.annotation) or (fi.annotation,)
    if bool in types:
        return optional_bool(resource, name)
    if int in types:
        return optional_int(resource, name)
    return optional_value(resource, name)


# ── Public helpers ──────────────────────────────────────────────────


def collect_api_fields(resource_or_cls: Any) -> dict[str, str]:
    """Map model field name → payload key for every ``ApiField`` field."""
    return {name: marker.name for name, _, marker in _iter_marked_fields(resource_or_cls, ApiField)}


def collect_field_kinds(resource_or_cls: Any) -> dict[str, FieldKind]:
    """Map every ``Kind``-annotated field to its kind."""
    return {name: marker.kind for name, _, marker in _iter_marked_fields(resource_or_cls, Kind)}


def immutable_fields(resource_or_cls: Any) -> list[str]:
    """Fields whose change forces the remote resource to be recreated."""
    return [
        name
        for name, kind in collect_field_kinds(resource_or_cls).items()
        if kind == "required-immutable"
    ]


def collect_path_params(resource_or_cls: Any) -> list[str]:
    return [name for name, _, _ in _iter_marked_fields(resource_or_cls, PathParam)]


def collect_ip_block_fields(resource_or_cls: Any) -> list[str]:
    return [name for name, _, _ in _iter_marked_fields(resource_or_cls, IpBlock)]


def collect_compare_strategies(resource_or_cls: Any) -> dict[str, CompareStrategy]:
    """Collect per-field compare strategies from ``Compare`` markers."""
    return {
        name: marker.strategy for name, _, marker in _iter_marked_fields(resource_or_cls, Compare)
    }


def collect_payload_compare_strategies(resource_or_cls: Any) -> dict[str, CompareStrategy]:
    """Compare strategies keyed by payload key instead of field name."""
    api_fields = collect_api_fields(resource_or_cls)
    return {
        api_fields[name]: strategy
        for name, strategy in collect_compare_strategies(resource_or_cls).items()
        if name in api_fields
    }


def build_payload(resource: Any) -> dict[str, Any]:
    """Build the remote payload from ``ApiField`` fields.

    Required fields are always sent. Optional fields are omitted when unset:
    empty strings and empty lists mean "use the server default", and
    bool/int fields are sent only when explicitly set, so ``False`` and ``0``
    survive while ``None`` does not.
    """
    payload: dict[str, Any] = {}
    for name, fi, marker in _iter_marked_fields(resource, ApiField):
        value = getattr(resource, name)
        if _field_kind(fi) != "optional-computed":
            payload[marker.name] = sorted_strings(value) if isinstance(value, list) else value
            continue
        if isinstance(value, list):
            if value:
                payload[marker.name] = sorted_strings(value)
        elif isinstance(value, str):
            if value:
                payload[marker.name] = value
        else:
            explicit = _explicit_scalar(resource, name, fi)
            if explicit is not None:
                payload[marker.name] = explicit
    return payload


def extract_api_attrs(resource_cls: type, raw: dict[str, Any]) -> dict[str, Any]:
    """Extract model attrs from a remote response via ``ApiField`` markers.

    Keys the remote omitted (or returned as ``null``) are left out so the
    caller keeps its local value. Lists come back sorted.
    """
    attrs: dict[str, Any] = {}
    for name, _, marker in _iter_marked_fields(resource_cls, ApiField):
        value = raw.get(marker.name)
        if value is None:
            continue
        attrs[name] = sorted_strings(value) if isinstance(value, list) else value
    return attrs
