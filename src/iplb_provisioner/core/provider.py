"""OVH Provider - Connection configuration for the OVH API."""

from functools import cached_property
from typing import Any, Self

import ovh
from pydantic import BaseModel, ConfigDict, SecretStr

from iplb_provisioner.core.client import RemoteResourceClient


class OVHProvider(BaseModel):
    """Connection configuration for the OVH API.

    Provide an endpoint and credentials, or use the `from_client` classmethod
    to inject an already configured transport.

    Examples:
        # Application credentials
        provider = OVHProvider(
            endpoint="ovh-eu",
            application_key="ak",
            application_secret=SecretStr("as"),
            consumer_key=SecretStr("ck"),
        )

        # Existing python-ovh client
        provider = OVHProvider.from_client(ovh.Client())
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    endpoint: str | None = None
    application_key: str | None = None
    application_secret: SecretStr | None = None
    consumer_key: SecretStr | None = None

    # Injected transport (for pre-built clients / testing)
    _injected_transport: Any = None

    @classmethod
    def from_client(cls, transport: Any) -> Self:
        """Create a provider around an existing ``ovh.Client``-like transport."""
        provider = cls.model_construct()
        provider._injected_transport = transport
        return provider

    @cached_property
    def client(self) -> RemoteResourceClient:
        """Get the remote resource client."""
        if self._injected_transport is not None:
            return RemoteResourceClient(self._injected_transport)

        missing = [
            name
            for name in ("endpoint", "application_key", "application_secret", "consumer_key")
            if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(
                f"Missing OVH credentials ({', '.join(missing)}); provide them, "
                "or use OVHProvider.from_client() to inject a client"
            )

        assert self.application_secret is not None
        assert self.consumer_key is not None
        transport = ovh.Client(
            endpoint=self.endpoint,
            application_key=self.application_key,
            application_secret=self.application_secret.get_secret_value(),
            consumer_key=self.consumer_key.get_secret_value(),
        )
        return RemoteResourceClient(transport)
