"""YAML configuration loading and convenience apply/refresh/destroy API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import SecretStr

from iplb_provisioner.config.loader import ConfigError, load_config
from iplb_provisioner.config.schema import Config, ProviderConfig
from iplb_provisioner.core.provider import OVHProvider
from iplb_provisioner.engine.engine import ProgressCallback, ProvisioningEngine
from iplb_provisioner.engine.registry import default_registry

if TYPE_CHECKING:
    from pathlib import Path

    from iplb_provisioner.core.state import State
    from iplb_provisioner.engine.types import ApplyResult, ResourceChange

__all__ = [
    "Config",
    "ConfigError",
    "ProviderConfig",
    "apply",
    "destroy",
    "drift",
    "load",
    "load_config",
    "plan",
    "refresh",
    "save_state",
]


def load(path: Path | str) -> Config:
    """Load a YAML configuration file."""
    return load_config(path)


def _engine_from_config(config: Config) -> ProvisioningEngine:
    """Build a ``ProvisioningEngine`` from a ``Config`` instance."""
    p = config.provider
    missing = [
        env
        for env, value in (
            ("OVH_APPLICATION_KEY", p.application_key),
            ("OVH_APPLICATION_SECRET", p.application_secret),
            ("OVH_CONSUMER_KEY", p.consumer_key),
        )
        if not value
    ]
    if missing:
        raise ConfigError(f"Missing OVH credentials: set {', '.join(missing)}")
    assert p.application_secret is not None
    assert p.consumer_key is not None
    provider = OVHProvider(
        endpoint=p.endpoint,
        application_key=p.application_key,
        application_secret=SecretStr(p.application_secret),
        consumer_key=SecretStr(p.consumer_key),
    )
    return ProvisioningEngine(
        client=provider.client,
        state_path=config.state_path,
        registry=default_registry(),
    )


def plan(config: Config, *, destroy: bool = False) -> list[ResourceChange]:
    """Compute pending changes for the given configuration (no remote calls)."""
    return _engine_from_config(config).plan(config.resources, destroy=destroy)


def apply(config: Config, *, progress: ProgressCallback | None = None) -> ApplyResult:
    """Create, update, replace or delete resources to match the configuration."""
    return _engine_from_config(config).apply(config.resources, progress=progress)


def destroy(config: Config, *, progress: ProgressCallback | None = None) -> ApplyResult:
    """Delete every resource tracked in state."""
    return _engine_from_config(config).destroy(progress=progress)


def refresh(config: Config) -> tuple[list[ResourceChange], State]:
    """Read tracked resources back from the API (not persisted).

    Returns the drift changes and the refreshed state. Call :func:`save_state`
    to persist the returned state to disk.
    """
    return _engine_from_config(config).refresh()


def save_state(config: Config, state: State) -> None:
    """Persist a refreshed state to disk."""
    from iplb_provisioner.engine.lock import StateLock

    with StateLock(config.state_path):
        state.serial += 1
        state.save(config.state_path)


def drift(config: Config) -> list[ResourceChange]:
    """Detect drift between the state file and the live API."""
    changes, _ = refresh(config)
    return changes
