"""IP load balancer TCP frontend resource model."""

from __future__ import annotations

from typing import Annotated, ClassVar

from pydantic import ConfigDict, Field

from iplb_provisioner.resources.base import Resource
from iplb_provisioner.resources.markers import ApiField, Compare, IpBlock, Kind, PathParam


class TcpFrontendResource(Resource):
    """A TCP frontend of an OVH IP load balancer service.

    ``service_name`` selects the load balancer and cannot change once the
    frontend exists. Optional fields left unset are filled in from the API
    after create/read.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    resource_type: ClassVar[str] = "ovh_iploadbalancing_tcp_frontend"
    collection_path: ClassVar[str] = "/ipLoadbalancing/{service_name}/tcp/frontend"
    id_field: ClassVar[str] = "frontendId"

    service_name: Annotated[str, PathParam(), Kind("required-immutable")] = Field(min_length=1)
    port: Annotated[str, ApiField("port"), Kind("required-mutable")] = Field(min_length=1)
    zone: Annotated[str, ApiField("zone"), Kind("required-mutable")] = Field(min_length=1)
    allowed_source: Annotated[
        list[str],
        ApiField("allowedSource"),
        Kind("optional-computed"),
        Compare("set"),
        IpBlock(),
    ] = Field(default_factory=list)
    dedicated_ipfo: Annotated[
        list[str],
        ApiField("dedicatedIpfo"),
        Kind("optional-computed"),
        Compare("set"),
        IpBlock(),
    ] = Field(default_factory=list)
    default_farm_id: Annotated[
        int | None, ApiField("defaultFarmId"), Kind("optional-computed")
    ] = None
    default_ssl_id: Annotated[
        int | None, ApiField("defaultSslId"), Kind("optional-computed")
    ] = None
    disabled: Annotated[bool | None, ApiField("disabled"), Kind("optional-computed")] = None
    ssl: Annotated[bool | None, ApiField("ssl"), Kind("optional-computed")] = None
    display_name: Annotated[
        str | None, ApiField("displayName"), Kind("optional-computed")
    ] = None
