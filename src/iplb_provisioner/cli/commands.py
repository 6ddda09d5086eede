"""CLI command implementations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Literal

import typer

from iplb_provisioner.cli import app
from iplb_provisioner.cli.errors import handle_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from iplb_provisioner.config.schema import Config
    from iplb_provisioner.engine.types import ApplyResult, ResourceChange

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the configuration file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

AutoApprove = Annotated[
    bool,
    typer.Option("--auto-approve", help="Skip interactive approval."),
]

_DEFAULT_CONFIG = Path("iplb-provisioner.yaml")


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _run_with_progress(
    run: Callable[..., ApplyResult],
    cfg: Config,
    changes: list[ResourceChange],
    *,
    color: bool,
) -> ApplyResult:
    """Run an apply/destroy with a Rich progress bar and per-resource status lines."""
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from iplb_provisioner.cli.formatting import _ACTION_STYLES
    from iplb_provisioner.engine.types import Action

    console = Console(no_color=not color)
    actionable = [c for c in changes if c.action != Action.NOOP]

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Applying", total=len(actionable))

        def on_progress(change: ResourceChange, event: Literal["start", "done"]) -> None:
            s = _ACTION_STYLES[change.action.value]
            if event == "start":
                progress.update(task, description=f"{change.address}: {s.progress_verb}...")
            elif event == "done":
                progress.console.print(f"  {change.address}: {s.done_verb}")
                progress.advance(task)

        return run(cfg, progress=on_progress)


def _confirm_and_run(
    run: Callable[..., ApplyResult],
    changes: list[ResourceChange],
    cfg: Config,
    *,
    color: bool,
    auto_approve: bool,
    confirm_msg: str,
    empty_msg: str,
) -> None:
    """Shared flow: show changes -> confirm -> run with progress -> print summary."""
    from iplb_provisioner.cli.formatting import (
        format_apply_summary,
        format_changes,
        format_plan_summary,
        has_actionable_changes,
    )
    from iplb_provisioner.engine.types import summarize

    if not has_actionable_changes(changes):
        typer.echo(empty_msg)
        raise typer.Exit(0)

    typer.echo(format_changes(changes, color=color))
    typer.echo()
    typer.echo(format_plan_summary(summarize(changes), color=color))
    typer.echo()

    if not auto_approve:
        try:
            typer.confirm(confirm_msg, abort=True)
        except typer.Abort as e:
            typer.echo("Apply canceled.", err=True)
            raise typer.Exit(1) from e

    try:
        result = _run_with_progress(run, cfg, changes, color=color)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo()
    typer.echo(format_apply_summary(result.summary(), color=color))


@app.command()
def plan(config: ConfigPath = _DEFAULT_CONFIG, no_color: NoColor = False) -> None:
    """Show changes required by the current configuration."""
    from iplb_provisioner.cli.formatting import (
        format_changes,
        format_plan_summary,
        has_actionable_changes,
    )
    from iplb_provisioner.config import load
    from iplb_provisioner.config import plan as plan_fn
    from iplb_provisioner.engine.types import summarize

    color = _use_color(no_color)
    try:
        changes = plan_fn(load(config))
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(format_changes(changes, color=color))
    typer.echo()
    typer.echo(format_plan_summary(summarize(changes), color=color))

    if has_actionable_changes(changes):
        raise typer.Exit(2)


@app.command(name="apply")
def apply_cmd(
    config: ConfigPath = _DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Apply the changes required by the current configuration."""
    from iplb_provisioner.config import apply, load
    from iplb_provisioner.config import plan as plan_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        changes = plan_fn(cfg)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    _confirm_and_run(
        apply,
        changes,
        cfg,
        color=color,
        auto_approve=auto_approve,
        confirm_msg="Do you want to apply these changes?",
        empty_msg="No changes. Resources are up-to-date.",
    )


@app.command()
def destroy(
    config: ConfigPath = _DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Destroy all managed resources."""
    from iplb_provisioner.config import destroy as destroy_fn
    from iplb_provisioner.config import load
    from iplb_provisioner.config import plan as plan_fn

    color = _use_color(no_color)
    try:
        cfg = load(config)
        changes = plan_fn(cfg, destroy=True)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    _confirm_and_run(
        destroy_fn,
        changes,
        cfg,
        color=color,
        auto_approve=auto_approve,
        confirm_msg="Do you really want to destroy all resources?",
        empty_msg="No resources to destroy.",
    )


@app.command(name="refresh")
def refresh_cmd(
    config: ConfigPath = _DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    no_color: NoColor = False,
) -> None:
    """Refresh state from the live OVH API."""
    from iplb_provisioner.cli.formatting import format_changes, format_plan_summary
    from iplb_provisioner.config import load, save_state
    from iplb_provisioner.config import refresh as refresh_fn
    from iplb_provisioner.engine.types import summarize

    color = _use_color(no_color)
    try:
        cfg = load(config)
        changes, state = refresh_fn(cfg)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not changes:
        typer.echo("No changes. State is up-to-date with the API.")
        raise typer.Exit(0)

    typer.echo(format_changes(changes, color=color))
    typer.echo()
    typer.echo(format_plan_summary(summarize(changes), color=color, header="Refresh"))
    typer.echo()

    if not auto_approve:
        try:
            typer.confirm("Do you want to update the state file?", abort=True)
        except typer.Abort as e:
            typer.echo("Refresh canceled.", err=True)
            raise typer.Exit(1) from e

    try:
        save_state(cfg, state)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc
    count = len(state.resources)
    typer.echo(f"State refreshed. {count} resource{'s' if count != 1 else ''} tracked.")


@app.command()
def drift(config: ConfigPath = _DEFAULT_CONFIG, no_color: NoColor = False) -> None:
    """Show drift between state and the live OVH API."""
    from iplb_provisioner.cli.formatting import format_changes
    from iplb_provisioner.config import drift as drift_fn
    from iplb_provisioner.config import load

    color = _use_color(no_color)
    try:
        changes = drift_fn(load(config))
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    if not changes:
        typer.echo("No drift detected. State is up-to-date with the API.")
        raise typer.Exit(0)

    typer.echo("Drift detected:\n")
    typer.echo(format_changes(changes, color=color))


@app.command()
def validate(config: ConfigPath = _DEFAULT_CONFIG, no_color: NoColor = False) -> None:
    """Validate the configuration file without calling the API."""
    from iplb_provisioner.cli.formatting import styler
    from iplb_provisioner.config import load
    from iplb_provisioner.engine.reconciler import Reconciler

    color = _use_color(no_color)
    try:
        cfg = load(config)
        for resource in cfg.resources:
            Reconciler.validate(resource)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo(styler(color)("Configuration is valid.", fg="green"))
