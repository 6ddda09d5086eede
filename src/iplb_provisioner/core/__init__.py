"""Core infrastructure components for the IP load balancer provisioner."""

from iplb_provisioner.core.client import RemoteResourceClient
from iplb_provisioner.core.provider import OVHProvider
from iplb_provisioner.core.state import ResourceInstance, State

__all__ = ["OVHProvider", "RemoteResourceClient", "ResourceInstance", "State"]
