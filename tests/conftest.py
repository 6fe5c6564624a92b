"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from querysvc.adapters.mock import (
    MockAccessChecker,
    MockAuthenticator,
    MockOrganizationSearcher,
    MockResourceSearcher,
)
from querysvc.config.settings import Settings
from querysvc.core.service import QueryService
from querysvc.paging.codec import PageTokenSecret

TEST_SECRET = "test-page-token-secret-0123456789abcdef"


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance wired to the mock adapters."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        paging={"page_token_secret": TEST_SECRET},
        search={"source": "mock"},
        access_control={"source": "mock"},
        organizations={"source": "mock"},
        auth={"mock_local_principal": "alice"},
    )


@pytest.fixture
def secret() -> PageTokenSecret:
    return PageTokenSecret.from_string(TEST_SECRET)


@pytest.fixture
def other_secret() -> PageTokenSecret:
    return PageTokenSecret.from_string("a-completely-different-secret")


@pytest.fixture
def resource_searcher(secret: PageTokenSecret) -> MockResourceSearcher:
    return MockResourceSearcher(secret=secret)


@pytest.fixture
def access_checker() -> MockAccessChecker:
    return MockAccessChecker()


@pytest.fixture
def organization_searcher() -> MockOrganizationSearcher:
    return MockOrganizationSearcher()


@pytest.fixture
def authenticator() -> MockAuthenticator:
    return MockAuthenticator(principal="alice")


@pytest.fixture
def service(
    resource_searcher: MockResourceSearcher,
    access_checker: MockAccessChecker,
    organization_searcher: MockOrganizationSearcher,
    authenticator: MockAuthenticator,
    secret: PageTokenSecret,
) -> QueryService:
    """A query service over the in-memory adapters."""
    return QueryService(
        resource_searcher=resource_searcher,
        access_checker=access_checker,
        organization_searcher=organization_searcher,
        authenticator=authenticator,
        secret=secret,
    )
