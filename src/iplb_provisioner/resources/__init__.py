"""Remote resource definitions."""

from iplb_provisioner.resources.base import Resource, ResourceStatus
from iplb_provisioner.resources.frontend import TcpFrontendResource

__all__ = ["Resource", "ResourceStatus", "TcpFrontendResource"]
