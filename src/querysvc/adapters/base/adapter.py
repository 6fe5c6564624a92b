"""Capability ports — Abstract interfaces for every backend querysvc talks to.

Each backend connector implements one of these ports:
  - ResourceSearcher: executes resource queries and counts against an index
  - AccessChecker: answers access-control questions for a principal
  - OrganizationSearcher: looks up and suggests organization records
  - Authenticator: turns a caller credential into a principal

Adapters raise ``querysvc.errors.QueryError`` for request-time failures,
tagged with the kind that fits: connection problems are SERVICE_UNAVAILABLE,
missing entities are NOT_FOUND and everything else is UNEXPECTED.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from querysvc.models.criteria import (
    OrganizationSearchCriteria,
    OrganizationSuggestionCriteria,
    SearchCriteria,
)
from querysvc.models.organization import Organization, OrganizationSuggestionsResult
from querysvc.models.resource import CountResult, SearchResult


class Adapter(ABC):
    """Lifecycle shared by all adapters.

    ``initialize`` is called once at startup and ``shutdown`` once at
    application shutdown. ``is_ready`` backs the readiness probe and raises
    a SERVICE_UNAVAILABLE ``QueryError`` when the backend cannot serve.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'opensearch', 'mock')."""

    async def initialize(self) -> None:
        """Open connections. No-op by default."""

    async def shutdown(self) -> None:
        """Release connections. No-op by default."""

    @abstractmethod
    async def is_ready(self) -> None:
        """Raise if the backend is not ready to serve requests."""


class ResourceSearcher(Adapter):
    """Searches the resource index."""

    @abstractmethod
    async def query_resources(self, criteria: SearchCriteria) -> SearchResult:
        """Return one page of resources matching ``criteria``.

        The returned ``page_token`` is the sealed position of the last hit,
        present only when another page exists.
        """

    @abstractmethod
    async def query_resources_count(
        self,
        count_criteria: SearchCriteria,
        aggregation_criteria: SearchCriteria,
        public_only: bool,
    ) -> CountResult:
        """Count public resources and aggregate private ones.

        Args:
            count_criteria: Filters for the public count.
            aggregation_criteria: Filters for the private-resource buckets;
                ``page_size`` caps the number of buckets.
            public_only: Skip the private aggregation entirely.

        Returns:
            A ``CountResult`` whose ``count`` holds the public count and whose
            ``aggregation`` holds buckets keyed ``object#relation``.
        """


class AccessChecker(Adapter):
    """Answers access-control questions."""

    @abstractmethod
    async def check_access(self, subject: str, message: str, timeout: float) -> dict[str, str]:
        """Send a check request and return ``{request line: result}``.

        Args:
            subject: Messaging subject the request is sent on.
            message: Newline-separated ``object#relation@user:principal`` lines.
            timeout: Seconds to wait for the reply.
        """

    async def close(self) -> None:
        await self.shutdown()


class OrganizationSearcher(Adapter):
    """Looks up organization records."""

    @abstractmethod
    async def query_organizations(self, criteria: OrganizationSearchCriteria) -> Organization:
        """Return the single organization matching name or domain.

        Raises:
            QueryError: VALIDATION when neither name nor domain is given,
                NOT_FOUND when no organization matches.
        """

    @abstractmethod
    async def suggest_organizations(self, criteria: OrganizationSuggestionCriteria) -> OrganizationSuggestionsResult:
        """Return typeahead suggestions for ``criteria.query``."""


class Authenticator(Adapter):
    """Resolves caller credentials."""

    @abstractmethod
    async def parse_principal(self, token: str) -> str:
        """Return the principal for a bearer token.

        Raises:
            QueryError: VALIDATION when the token is not acceptable.
        """

    async def is_ready(self) -> None:
        return None
