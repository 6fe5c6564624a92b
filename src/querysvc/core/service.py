"""Query Service — Orchestrates every query path through the injected ports.

Resource query lifecycle:
  1. Compile: raw filters → SearchCriteria (opens the page token)
  2. Scope: anonymous callers are restricted to public resources
  3. Search: ResourceSearcher returns one page
  4. Authorize: private resources go through the AccessChecker
  5. Assemble: port models → response models

Errors raised here are ``QueryError``s. They propagate untouched to the API
boundary, where they are classified and logged once. Cancellation is never
caught.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from querysvc import errors
from querysvc.adapters.base import AccessChecker, Adapter, Authenticator, OrganizationSearcher, ResourceSearcher
from querysvc.constants import (
    ACCESS_CHECK_SUBJECT,
    ACCESS_CHECK_TIMEOUT_SECONDS,
    ANONYMOUS_CACHE_CONTROL,
    ANONYMOUS_PRINCIPAL,
)
from querysvc.core import access
from querysvc.core.assembler import (
    assemble_count,
    assemble_organization,
    assemble_resources,
    assemble_suggestions,
)
from querysvc.core.compiler import (
    compile_count_criteria,
    compile_organization_criteria,
    compile_search_criteria,
    compile_suggestion_criteria,
)
from querysvc.models.resource import SearchResult
from querysvc.models.response import (
    OrganizationResponse,
    OrganizationSuggestionsResponse,
    QueryResourcesCountResponse,
    QueryResourcesResponse,
)
from querysvc.paging.codec import PageTokenSecret

logger = logging.getLogger(__name__)


class QueryService:
    """Core orchestrator for resource and organization queries.

    Attributes:
        resource_searcher: Resource index port.
        access_checker: Access-control port.
        organization_searcher: Organization lookup port.
        authenticator: Credential resolution port.
        secret: Page token secret shared with the resource searcher.
    """

    def __init__(
        self,
        *,
        resource_searcher: ResourceSearcher,
        access_checker: AccessChecker,
        organization_searcher: OrganizationSearcher,
        authenticator: Authenticator,
        secret: PageTokenSecret,
    ) -> None:
        self.resource_searcher = resource_searcher
        self.access_checker = access_checker
        self.organization_searcher = organization_searcher
        self.authenticator = authenticator
        self.secret = secret

    # ──────────────────────────────────────────────────────────────────────
    # Authentication
    # ──────────────────────────────────────────────────────────────────────

    async def authenticate(self, token: str) -> str:
        """Resolve a bearer token to a principal."""
        return await self.authenticator.parse_principal(token)

    # ──────────────────────────────────────────────────────────────────────
    # Resources
    # ──────────────────────────────────────────────────────────────────────

    async def query_resources(
        self,
        principal: str,
        *,
        name: str | None = None,
        parent: str | None = None,
        resource_type: str | None = None,
        tags: Iterable[str] | None = None,
        sort: str | None = None,
        page_token: str | None = None,
        page_size: int | None = None,
    ) -> QueryResourcesResponse:
        """Return one page of resources the principal may see.

        Raises:
            QueryError: VALIDATION for a bad page token or when no filter at
                all is given; otherwise whatever the ports raise.
        """
        criteria = compile_search_criteria(
            self.secret,
            name=name,
            parent=parent,
            resource_type=resource_type,
            tags=tags,
            sort=sort,
            page_token=page_token,
            page_size=page_size,
        )
        if criteria.name is None and criteria.parent is None and criteria.resource_type is None and not criteria.tags:
            raise errors.validation("invalid search criteria: at least one search parameter must be provided")

        anonymous = principal == ANONYMOUS_PRINCIPAL
        if anonymous:
            logger.debug("anonymous principal, restricting search to public resources")
            criteria = criteria.model_copy(update={"public_only": True})

        logger.debug(
            "searching resources: name=%s type=%s parent=%s tags=%s",
            criteria.name,
            criteria.resource_type,
            criteria.parent,
            criteria.tags,
        )
        try:
            result = await self.resource_searcher.query_resources(criteria)
        except Exception as e:
            raise errors.wrap("search operation failed", e) from e

        message = access.build_access_message(principal, result.resources)
        responses = await self._check_access(message)
        allowed = access.filter_allowed(principal, result.resources, responses)
        logger.debug("resource search completed: found=%d allowed=%d", len(result.resources), len(allowed))

        return assemble_resources(
            SearchResult(
                resources=allowed,
                page_token=result.page_token,
                cache_control=ANONYMOUS_CACHE_CONTROL if anonymous else None,
                total=result.total,
            )
        )

    async def query_resources_count(
        self,
        principal: str,
        *,
        name: str | None = None,
        parent: str | None = None,
        resource_type: str | None = None,
        tags: Iterable[str] | None = None,
    ) -> QueryResourcesCountResponse:
        """Count the resources the principal may see.

        Public resources are counted directly. Private resources are grouped
        by access-check query and each allowed group adds its size. When the
        groups overflow the bucket limit the count is a lower bound and
        ``has_more`` is set.
        """
        count_criteria, aggregation_criteria = compile_count_criteria(
            name=name,
            parent=parent,
            resource_type=resource_type,
            tags=tags,
        )
        anonymous = principal == ANONYMOUS_PRINCIPAL
        try:
            result = await self.resource_searcher.query_resources_count(
                count_criteria, aggregation_criteria, anonymous
            )
        except Exception as e:
            raise errors.wrap("search operation failed", e) from e

        if anonymous:
            logger.debug("returning anonymous count result: %d", result.count)
            return assemble_count(result.model_copy(update={"cache_control": ANONYMOUS_CACHE_CONTROL}))

        message = access.build_count_message(principal, result.aggregation)
        responses = await self._check_access(message)
        private_count = access.count_allowed(principal, result.aggregation, responses)

        return assemble_count(
            result.model_copy(
                update={
                    "count": result.count + private_count,
                    "has_more": result.has_more or result.aggregation.sum_other_doc_count > 0,
                }
            )
        )

    async def _check_access(self, message: str) -> dict[str, str]:
        if not message:
            return {}
        logger.debug("performing access control checks: %s", message)
        try:
            return await self.access_checker.check_access(
                ACCESS_CHECK_SUBJECT, message, ACCESS_CHECK_TIMEOUT_SECONDS
            )
        except TimeoutError as e:
            raise errors.service_unavailable("access control check failed", e) from e
        except Exception as e:
            raise errors.wrap("access control check failed", e) from e

    # ──────────────────────────────────────────────────────────────────────
    # Organizations
    # ──────────────────────────────────────────────────────────────────────

    async def query_orgs(self, *, name: str | None = None, domain: str | None = None) -> OrganizationResponse:
        criteria = compile_organization_criteria(name=name, domain=domain)
        logger.debug("searching organizations: name=%s domain=%s", criteria.name, criteria.domain)
        org = await self.organization_searcher.query_organizations(criteria)
        logger.debug("organization search completed: %s (%s)", org.name, org.domain)
        return assemble_organization(org)

    async def suggest_orgs(self, query: str) -> OrganizationSuggestionsResponse:
        criteria = compile_suggestion_criteria(query)
        result = await self.organization_searcher.suggest_organizations(criteria)
        logger.debug("organization suggestions completed: %d found", len(result.suggestions))
        return assemble_suggestions(result)

    # ──────────────────────────────────────────────────────────────────────
    # Health
    # ──────────────────────────────────────────────────────────────────────

    async def livez(self) -> None:
        """Liveness never touches the backends."""
        return None

    async def readyz(self) -> None:
        """Raise SERVICE_UNAVAILABLE for the first port that is not ready."""
        ports: list[tuple[str, Adapter]] = [
            ("resource searcher", self.resource_searcher),
            ("access checker", self.access_checker),
            ("organization searcher", self.organization_searcher),
        ]
        for label, port in ports:
            try:
                await port.is_ready()
            except errors.QueryError as e:
                if e.kind is errors.ErrorKind.SERVICE_UNAVAILABLE:
                    raise
                raise errors.service_unavailable(f"{label} not ready", e) from e
            except Exception as e:
                raise errors.service_unavailable(f"{label} not ready", e) from e
