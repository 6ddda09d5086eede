"""Command-line entry point.

Verbosity maps onto two loggers: the package logger (planning, state I/O,
run summaries) and the wire logger of :mod:`iplb_provisioner.core.client`,
which records every OVH API call. ``-v`` and ``-vv`` raise the package
logger; ``-vvv`` also turns on the wire logger. ``IPLB_LOG=<level>`` sets
both at once and overrides the flags.
"""

from __future__ import annotations

import logging
import os
from importlib import metadata

import typer

from iplb_provisioner import __version__

app = typer.Typer(
    name="iplb-provisioner",
    help="Plan and apply OVH IP load balancer TCP frontends from a YAML file.",
    no_args_is_help=True,
    add_completion=False,
)

PACKAGE_LOGGER = "iplb_provisioner"
WIRE_LOGGER = "iplb_provisioner.core.client"

# verbosity -> (package level, wire level)
_VERBOSITY: dict[int, tuple[int, int]] = {
    1: (logging.INFO, logging.WARNING),
    2: (logging.DEBUG, logging.WARNING),
    3: (logging.DEBUG, logging.DEBUG),
}


def _levels_from_env(raw: str) -> tuple[int, int] | None:
    level = logging.getLevelNamesMapping().get(raw.upper())
    if level is None:
        typer.echo(
            f"WARNING: ignoring IPLB_LOG={raw!r}; expected a level such as DEBUG or INFO",
            err=True,
        )
        return None
    return level, level


def _configure_logging(verbose: int) -> None:
    """Attach a stderr handler and set package/wire levels.

    Without ``-v`` or ``IPLB_LOG`` logging is left untouched.
    """
    env = os.environ.get("IPLB_LOG", "")
    levels = _levels_from_env(env) if env else None
    if levels is None and verbose:
        levels = _VERBOSITY[min(verbose, max(_VERBOSITY))]
    if levels is None:
        return

    package_level, wire_level = levels
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(package_level)
    logging.getLogger(WIRE_LOGGER).setLevel(wire_level)


def _show_version(value: bool) -> None:
    if not value:
        return
    try:
        ovh_version = metadata.version("ovh")
    except metadata.PackageNotFoundError:
        typer.echo(f"iplb-provisioner {__version__}")
    else:
        typer.echo(f"iplb-provisioner {__version__} (python-ovh {ovh_version})")
    raise typer.Exit


@app.callback()
def main(
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="-v progress, -vv engine details, -vvv every OVH API call.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_show_version,
        is_eager=True,
        help="Print the version and exit.",
    ),
) -> None:
    """Terraform-style provisioning for OVH IP load balancer frontends."""
    del version
    _configure_logging(verbose)


# Commands attach themselves to ``app`` on import.
from iplb_provisioner.cli import commands as _commands  # noqa: E402, F401
