"""In-memory adapters for local development and tests."""

from querysvc.adapters.mock.access import MockAccessChecker
from querysvc.adapters.mock.auth import MockAuthenticator
from querysvc.adapters.mock.organizations import MockOrganizationSearcher
from querysvc.adapters.mock.resources import MockResourceSearcher

__all__ = [
    "MockAccessChecker",
    "MockAuthenticator",
    "MockOrganizationSearcher",
    "MockResourceSearcher",
]
