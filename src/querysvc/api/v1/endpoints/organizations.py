"""Organization endpoints — Lookup and typeahead suggestions."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from querysvc.api.deps import get_principal, get_service
from querysvc.core.service import QueryService
from querysvc.models.response import ErrorResponse, OrganizationResponse, OrganizationSuggestionsResponse

router = APIRouter(tags=["organizations"])


@router.get(
    "/query/orgs",
    response_model=OrganizationResponse,
    summary="Query Organization",
    description="Locate a single organization by name or domain.",
    responses={
        400: {"model": ErrorResponse, "description": "Bad request — neither name nor domain given"},
        404: {"model": ErrorResponse, "description": "Organization not found"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Service unavailable"},
    },
)
async def query_orgs(
    name: str | None = Query(default=None, min_length=1, description="Organization name"),
    domain: str | None = Query(default=None, min_length=1, description="Organization domain or website URL"),
    v: str = Query(default="1", pattern="^1$", description="API version"),
    principal: str = Depends(get_principal),
    service: QueryService = Depends(get_service),
) -> OrganizationResponse:
    return await service.query_orgs(name=name, domain=domain)


@router.get(
    "/query/orgs/suggest",
    response_model=OrganizationSuggestionsResponse,
    response_model_exclude_none=True,
    summary="Suggest Organizations",
    description="Typeahead organization suggestions. An empty query matches broadly.",
    responses={
        400: {"model": ErrorResponse, "description": "Bad request"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        503: {"model": ErrorResponse, "description": "Service unavailable"},
    },
)
async def suggest_orgs(
    query: str = Query(default="", description="Search query for organization suggestions"),
    v: str = Query(default="1", pattern="^1$", description="API version"),
    principal: str = Depends(get_principal),
    service: QueryService = Depends(get_service),
) -> OrganizationSuggestionsResponse:
    return await service.suggest_orgs(query)
