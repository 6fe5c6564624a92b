"""Capability ports — Abstract classes for backend connectors."""

from querysvc.adapters.base.adapter import (
    AccessChecker,
    Adapter,
    Authenticator,
    OrganizationSearcher,
    ResourceSearcher,
)
from querysvc.adapters.base.exceptions import ConfigurationError
from querysvc.adapters.base.registry import AdapterRegistry

__all__ = [
    "AccessChecker",
    "Adapter",
    "AdapterRegistry",
    "Authenticator",
    "ConfigurationError",
    "OrganizationSearcher",
    "ResourceSearcher",
]
