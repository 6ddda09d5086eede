"""Base resource class for remote API resources."""

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, computed_field

from iplb_provisioner.engine.errors import LifecycleError
from iplb_provisioner.resources.markers import collect_path_params


class ResourceStatus(str, Enum):
    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"
    UPDATING = "updating"
    DELETING = "deleting"


class Resource(BaseModel):
    """Base class for all remote resources.

    A resource is the caller-held record of one remote instance: the desired
    configuration plus the identity assigned by the remote system. Reconcilers
    mutate it in place.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    resource_type: ClassVar[str]
    collection_path: ClassVar[str]
    id_field: ClassVar[str] = "id"

    name: str = Field(pattern=r"^[a-zA-Z0-9_]+$")
    resource_id: str | None = Field(default=None, exclude=True)

    _transition: ResourceStatus | None = PrivateAttr(default=None)

    @computed_field
    @property
    def address(self) -> str:
        """Unique address for this resource (e.g., 'ovh_iploadbalancing_tcp_frontend.web')."""
        return f"{self.resource_type}.{self.name}"

    @property
    def status(self) -> ResourceStatus:
        if self._transition is not None:
            return self._transition
        return ResourceStatus.ABSENT if self.resource_id is None else ResourceStatus.PRESENT

    def collection_endpoint(self) -> str:
        """Path of the collection this resource is created in."""
        params: dict[str, Any] = {name: getattr(self, name) for name in collect_path_params(self)}
        return self.collection_path.format(**params)

    def resource_endpoint(self) -> str:
        """Path of this resource instance (collection path + identity)."""
        if self.resource_id is None:
            raise LifecycleError(f"{self.address} has no remote identity")
        return f"{self.collection_endpoint()}/{self.resource_id}"

    def attributes(self) -> dict[str, Any]:
        """JSON-compatible dump of the configuration, as stored in state."""
        return self.model_dump(mode="json", exclude={"address"})
