"""CRUD reconciler for a single remote resource instance."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import pydantic

from iplb_provisioner.engine.errors import LifecycleError, NotFoundError, RemoteError
from iplb_provisioner.resources.base import Resource, ResourceStatus
from iplb_provisioner.resources.markers import (
    build_payload,
    collect_ip_block_fields,
    extract_api_attrs,
)
from iplb_provisioner.resources.normalize import validate_ip_blocks

if TYPE_CHECKING:
    from collections.abc import Iterator

    from iplb_provisioner.core.client import RemoteResourceClient

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


class Reconciler(Generic[R]):
    """Synchronize one resource record with its remote counterpart.

    Each operation performs exactly one remote call and mutates the record in
    place. Errors propagate to the caller unchanged; nothing is retried.

    Lifecycle::

        absent -> creating -> present -> deleting -> absent
                              present -> updating -> present
    """

    def __init__(self, client: RemoteResourceClient) -> None:
        self._client = client

    @property
    def client(self) -> RemoteResourceClient:
        return self._client

    @staticmethod
    def validate(resource: Resource) -> None:
        """Check address-block fields. Raises ``ValidationError`` on the first bad value."""
        for name in collect_ip_block_fields(resource):
            validate_ip_blocks(name, getattr(resource, name))

    def create(self, resource: R) -> str:
        """Create the remote resource, adopt its identity and read its fields back."""
        self._require(resource, ResourceStatus.ABSENT, "create")
        self.validate(resource)
        payload = build_payload(resource)
        endpoint = resource.collection_endpoint()

        with self._transition(resource, ResourceStatus.CREATING):
            raw = self._client.post(endpoint, payload)
            if not isinstance(raw, dict) or raw.get(resource.id_field) is None:
                raise RemoteError(
                    "POST", endpoint, f"response does not carry `{resource.id_field}`"
                )
            resource.resource_id = str(raw[resource.id_field])
            self._populate(resource, raw, "POST", endpoint)

        logger.debug("Created %s with id %s", resource.address, resource.resource_id)
        return resource.resource_id

    def read(self, resource: R) -> bool:
        """Refresh the record from the remote resource.

        Returns ``False`` when the resource no longer exists remotely. The
        identity is left in place; clearing it is up to the caller.
        """
        self._require(resource, ResourceStatus.PRESENT, "read")
        endpoint = resource.resource_endpoint()
        try:
            raw = self._client.get(endpoint)
        except NotFoundError:
            logger.debug("%s not found at %s", resource.address, endpoint)
            return False
        if not isinstance(raw, dict):
            raise RemoteError("GET", endpoint, "response is not a JSON object")
        self._populate(resource, raw, "GET", endpoint)
        return True

    def update(self, resource: R) -> None:
        """Send the full desired configuration. No read-back is performed."""
        self._require(resource, ResourceStatus.PRESENT, "update")
        self.validate(resource)
        payload = build_payload(resource)
        endpoint = resource.resource_endpoint()

        with self._transition(resource, ResourceStatus.UPDATING):
            self._client.put(endpoint, payload)

    def delete(self, resource: R) -> None:
        """Delete the remote resource and clear the identity.

        A resource that is already gone counts as deleted.
        """
        self._require(resource, ResourceStatus.PRESENT, "delete")
        endpoint = resource.resource_endpoint()

        with self._transition(resource, ResourceStatus.DELETING):
            try:
                self._client.delete(endpoint)
            except NotFoundError:
                logger.debug("%s already deleted", resource.address)
            resource.resource_id = None

    @staticmethod
    def _populate(resource: R, raw: dict[str, Any], operation: str, endpoint: str) -> None:
        """Copy response fields onto the record.

        A value the model rejects surfaces as ``RemoteError`` carrying the
        identity already adopted, so the caller can still track the instance.
        """
        try:
            for name, value in extract_api_attrs(type(resource), raw).items():
                setattr(resource, name, value)
        except pydantic.ValidationError as exc:
            err = exc.errors()[0]
            field = ".".join(str(part) for part in err["loc"]) or "?"
            raise RemoteError(
                operation,
                endpoint,
                f"response for id {resource.resource_id} has invalid `{field}`: {err['msg']}",
                resource_id=resource.resource_id,
            ) from exc

    @staticmethod
    def _require(resource: R, expected: ResourceStatus, action: str) -> None:
        if resource.status != expected:
            raise LifecycleError(
                f"Cannot {action} {resource.address}: status is {resource.status.value}, "
                f"expected {expected.value}"
            )

    @staticmethod
    @contextlib.contextmanager
    def _transition(resource: R, status: ResourceStatus) -> Iterator[None]:
        resource._transition = status
        try:
            yield
        finally:
            resource._transition = None
