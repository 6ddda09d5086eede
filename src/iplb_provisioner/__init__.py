"""Terraform-style provisioning for OVH IP load balancer resources."""

__version__ = "0.1.0"
