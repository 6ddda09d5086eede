"""Resource type registry for rehydrating tracked records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from iplb_provisioner.engine.errors import UnknownResourceTypeError

if TYPE_CHECKING:
    from iplb_provisioner.resources.base import Resource


class ResourceTypeRegistry:
    """Registry mapping resource_type -> resource model."""

    def __init__(self) -> None:
        self._models: dict[str, type[Resource]] = {}

    def register(self, model: type[Resource]) -> None:
        resource_type = getattr(model, "resource_type", None)
        if not isinstance(resource_type, str) or not resource_type:
            raise ValueError("Resource model must define a non-empty classvar `resource_type`")

        if resource_type in self._models:
            raise ValueError(f"Resource type already registered: {resource_type}")

        self._models[resource_type] = model

    def get(self, resource_type: str) -> type[Resource]:
        try:
            return self._models[resource_type]
        except KeyError as e:
            raise UnknownResourceTypeError(resource_type) from e

    def __contains__(self, resource_type: object) -> bool:
        return resource_type in self._models


def default_registry() -> ResourceTypeRegistry:
    """Create a fresh registry with all built-in resource types."""
    from iplb_provisioner.resources.frontend import TcpFrontendResource

    registry = ResourceTypeRegistry()
    registry.register(TcpFrontendResource)
    return registry
