"""Clearbit adapter — Organization lookup and typeahead via Clearbit.

Lookup order:
  1. By domain (Company API), when a domain is given.
  2. Otherwise, or when the domain lookup fails, by name (Name-to-Domain
     API), then enriched through the Company API using the found domain.
     A failed enrichment keeps the name lookup's record.

Field mapping:
  industry  ← category.industry, else category.sector
  sector    ← category.subIndustry, else category.industryGroup
  employees ← metrics.employeesRange, else str(metrics.employees)
"""

from __future__ import annotations

import logging

from querysvc import errors
from querysvc.adapters.base.adapter import OrganizationSearcher
from querysvc.adapters.clearbit.client import ClearbitClient
from querysvc.adapters.clearbit.models import ClearbitCompany
from querysvc.models.criteria import OrganizationSearchCriteria, OrganizationSuggestionCriteria
from querysvc.models.organization import Organization, OrganizationSuggestion, OrganizationSuggestionsResult

logger = logging.getLogger(__name__)


def company_to_organization(company: ClearbitCompany) -> Organization:
    org = Organization(name=company.name or "", domain=company.domain or "")

    if company.category is not None:
        org.industry = company.category.industry or company.category.sector or ""
        org.sector = company.category.sub_industry or company.category.industry_group or ""

    if company.metrics is not None:
        if company.metrics.employees_range:
            org.employees = company.metrics.employees_range
        elif company.metrics.employees is not None:
            org.employees = str(company.metrics.employees)

    return org


class ClearbitOrganizationSearcher(OrganizationSearcher):
    """Organization searcher backed by the Clearbit APIs.

    Args:
        client: Configured ``ClearbitClient``; opened by ``initialize``.
    """

    def __init__(self, client: ClearbitClient) -> None:
        self._client = client

    @property
    def name(self) -> str:
        return "clearbit"

    async def initialize(self) -> None:
        await self._client.open()
        logger.info("Clearbit organization searcher initialized")

    async def shutdown(self) -> None:
        await self._client.close()

    async def query_organizations(self, criteria: OrganizationSearchCriteria) -> Organization:
        if criteria.name is None and criteria.domain is None:
            raise errors.validation("no search criteria provided")

        company: ClearbitCompany | None = None
        error: errors.QueryError | None = None

        if criteria.domain is not None:
            try:
                company = await self._client.find_company_by_domain(criteria.domain)
                logger.debug("found organization by domain %s: %s", criteria.domain, company.name)
            except errors.QueryError as e:
                error = e

        if company is None and criteria.name is not None:
            try:
                company = await self._client.find_company_by_name(criteria.name)
                error = None
                logger.debug("found organization by name %s: %s", criteria.name, company.name)
            except errors.QueryError as e:
                error = e

            if company is not None and company.domain:
                try:
                    company = await self._client.find_company_by_domain(company.domain)
                except errors.QueryError as e:
                    logger.debug("enrichment by domain %s failed, keeping name match: %s", company.domain, e)

        if company is None:
            raise error or errors.not_found("organization not found")

        org = company_to_organization(company)
        logger.debug("organization found: %s (%s) industry=%s", org.name, org.domain, org.industry)
        return org

    async def suggest_organizations(self, criteria: OrganizationSuggestionCriteria) -> OrganizationSuggestionsResult:
        suggestions = await self._client.suggest_companies(criteria.query)
        logger.debug("Clearbit suggestions for %r: %d found", criteria.query, len(suggestions))
        return OrganizationSuggestionsResult(
            suggestions=[OrganizationSuggestion(name=s.name, domain=s.domain, logo=s.logo) for s in suggestions]
        )

    async def is_ready(self) -> None:
        return None
