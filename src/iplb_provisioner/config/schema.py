"""Configuration models for YAML-based provisioning."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from iplb_provisioner.resources.base import Resource  # noqa: TC001 - Pydantic needs this at runtime
from iplb_provisioner.resources.frontend import (
    TcpFrontendResource,  # noqa: TC001 - Pydantic needs this at runtime
)


class ProviderConfig(BaseSettings):
    """OVH API connection settings.

    Fields can be set via YAML (constructor kwargs) or environment variables
    with the ``OVH_`` prefix.  Constructor kwargs take precedence.

    Secrets are typically provided via ``OVH_APPLICATION_SECRET`` and
    ``OVH_CONSUMER_KEY`` rather than YAML to keep them out of version control.
    """

    model_config = SettingsConfigDict(env_prefix="OVH_")

    endpoint: str = "ovh-eu"
    application_key: str | None = None
    application_secret: str | None = None
    consumer_key: str | None = None


def _none_to_list(v: Any) -> Any:
    return v if v is not None else []


class Config(BaseModel):
    """Provisioning configuration, validated straight from the YAML structure."""

    provider: ProviderConfig
    state_path: Path = Path(".iplb-state.json")
    tcp_frontends: Annotated[list[TcpFrontendResource], BeforeValidator(_none_to_list)] = []
    config_dir: Path = Path()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def resources(self) -> list[Resource]:
        """All declared resources, in declaration order."""
        return [*self.tcp_frontends]
