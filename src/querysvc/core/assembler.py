"""Result Assembler — Converts port results into client response models."""

from __future__ import annotations

from querysvc.models.organization import Organization, OrganizationSuggestionsResult
from querysvc.models.resource import CountResult, SearchResult
from querysvc.models.response import (
    OrganizationResponse,
    OrganizationSuggestionResponse,
    OrganizationSuggestionsResponse,
    QueryResourcesCountResponse,
    QueryResourcesResponse,
    ResourceResponse,
)


def assemble_resources(result: SearchResult) -> QueryResourcesResponse:
    """Map resources 1:1 in order; page token and cache hint pass through."""
    return QueryResourcesResponse(
        resources=[ResourceResponse(type=r.type, id=r.id, data=r.data) for r in result.resources],
        page_token=result.page_token,
        cache_control=result.cache_control,
    )


def assemble_count(result: CountResult) -> QueryResourcesCountResponse:
    return QueryResourcesCountResponse(
        count=result.count,
        has_more=result.has_more,
        cache_control=result.cache_control,
    )


def assemble_organization(org: Organization) -> OrganizationResponse:
    """Every field is set, so empty upstream values come out as ``""``."""
    return OrganizationResponse(
        name=org.name,
        domain=org.domain,
        industry=org.industry,
        sector=org.sector,
        employees=org.employees,
    )


def assemble_suggestions(result: OrganizationSuggestionsResult) -> OrganizationSuggestionsResponse:
    """A missing logo stays ``None``."""
    return OrganizationSuggestionsResponse(
        suggestions=[
            OrganizationSuggestionResponse(name=s.name, domain=s.domain, logo=s.logo) for s in result.suggestions
        ]
    )
