"""Change and summary rendering (Terraform-style)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NamedTuple

import typer

from iplb_provisioner.engine.types import Action

if TYPE_CHECKING:
    from collections.abc import Callable

    from iplb_provisioner.engine.types import ResourceChange


class _ActionStyle(NamedTuple):
    color: str
    symbol: str
    progress_verb: str
    done_verb: str
    description: str


_ACTION_STYLES: dict[str, _ActionStyle] = {
    "create": _ActionStyle("green", "+", "Creating", "Creation complete", "will be created"),
    "update": _ActionStyle(
        "yellow", "~", "Updating", "Update complete", "will be updated in-place"
    ),
    "replace": _ActionStyle(
        "magenta", "-/+", "Replacing", "Replacement complete", "must be replaced"
    ),
    "delete": _ActionStyle("red", "-", "Destroying", "Destroy complete", "will be destroyed"),
    "no-op": _ActionStyle("bright_black", " ", "", "", "is up-to-date"),
}


def styler(color: bool) -> Callable[..., str]:
    """Return ``typer.style`` when *color* is True, otherwise a passthrough."""
    if color:
        return typer.style
    return lambda text, **_kw: text


def has_actionable_changes(changes: list[ResourceChange]) -> bool:
    return any(c.action != Action.NOOP for c in changes)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _change_attrs(change: ResourceChange) -> dict[str, str]:
    """Extract displayable ``key → formatted value`` pairs from a change."""
    if change.action == Action.CREATE and change.planned:
        return {k: _format_value(v) for k, v in change.planned.items()}
    if change.diff:
        return {
            k: f"{_format_value(d['from'])} -> {_format_value(d['to'])}"
            for k, d in change.diff.items()
        }
    return {}


def format_change(change: ResourceChange, *, color: bool = True) -> str:
    """Render a single change as a Terraform-style block."""
    style = styler(color)
    s = _ACTION_STYLES[change.action.value]
    name = change.address.split(".", 1)[1] if "." in change.address else change.address

    attrs = _change_attrs(change)
    width = max((len(k) for k in attrs), default=0)
    lines = [
        style(f"  # {change.address} {s.description}", bold=True, fg=s.color),
        style(f'  {s.symbol} resource "{change.resource_type}" "{name}" {{', fg=s.color),
        *[style(f"      {s.symbol} {k.ljust(width)} = {v}", fg=s.color) for k, v in attrs.items()],
        style("    }", fg=s.color),
    ]
    return "\n".join(lines)


def format_changes(changes: list[ResourceChange], *, color: bool = True) -> str:
    blocks = [format_change(c, color=color) for c in changes if c.action != Action.NOOP]
    if not blocks:
        return "No changes. Resources are up-to-date."
    return "\n\n".join(blocks)


_SUMMARY_ORDER = (
    ("create", "to add", "added", "green"),
    ("update", "to change", "changed", "yellow"),
    ("replace", "to replace", "replaced", "magenta"),
    ("delete", "to destroy", "destroyed", "red"),
)


def _format_summary(summary: dict[str, int], *, applied: bool, color: bool) -> str:
    style = styler(color)
    parts = []
    for action, plan_verb, apply_verb, fg in _SUMMARY_ORDER:
        n = summary.get(action, 0)
        text = f"{n} {apply_verb if applied else plan_verb}"
        parts.append(style(text, fg=fg) if n else text)
    return ", ".join(parts)


def format_plan_summary(
    summary: dict[str, int], *, color: bool = True, header: str = "Plan"
) -> str:
    """Render ``Plan: 1 to add, 0 to change, 0 to replace, 0 to destroy.``"""
    return f"{header}: {_format_summary(summary, applied=False, color=color)}."


def format_apply_summary(summary: dict[str, int], *, color: bool = True) -> str:
    """Render ``Apply complete! Resources: 1 added, 0 changed, 0 replaced, 0 destroyed.``"""
    header = styler(color)("Apply complete!", fg="green", bold=True)
    return f"{header} Resources: {_format_summary(summary, applied=True, color=color)}."
