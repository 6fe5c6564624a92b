"""Resource endpoints — Authorized resource discovery and counting."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from querysvc.api.deps import get_principal, get_service
from querysvc.core.service import QueryService
from querysvc.models.response import ErrorResponse, QueryResourcesCountResponse, QueryResourcesResponse

router = APIRouter(tags=["resources"])

PARENT_PATTERN = r"^[a-zA-Z]+:[a-zA-Z0-9_-]+$"

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Bad request — invalid filters, page token or credentials"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
    503: {"model": ErrorResponse, "description": "Service unavailable — a backend is not reachable"},
}


@router.get(
    "/query/resources",
    response_model=QueryResourcesResponse,
    response_model_exclude_none=True,
    summary="Query Resources",
    description=(
        "Locate resources by their type or parent, or use typeahead search to query "
        "resources by a display name or similar alias. Only resources the caller may "
        "see are returned. Pass the returned `page_token` to fetch the next page."
    ),
    responses=_ERROR_RESPONSES,
)
async def query_resources(
    response: Response,
    name: str | None = Query(default=None, min_length=1, description="Resource name or alias; supports typeahead"),
    parent: str | None = Query(default=None, pattern=PARENT_PATTERN, description="Parent reference, e.g. project:123"),
    resource_type: str | None = Query(default=None, alias="type", description="Resource type to search"),
    tags: list[str] | None = Query(default=None, description="Tags to search (any match)"),
    sort: str = Query(default="name_asc", description="name_asc, name_desc, updated_asc or updated_desc"),
    page_token: str | None = Query(default=None, description="Opaque token for pagination"),
    v: str = Query(default="1", pattern="^1$", description="API version"),
    principal: str = Depends(get_principal),
    service: QueryService = Depends(get_service),
) -> QueryResourcesResponse:
    result = await service.query_resources(
        principal,
        name=name,
        parent=parent,
        resource_type=resource_type,
        tags=tags,
        sort=sort,
        page_token=page_token,
    )
    if result.cache_control:
        response.headers["Cache-Control"] = result.cache_control
    return result


@router.get(
    "/query/resources/count",
    response_model=QueryResourcesCountResponse,
    summary="Count Resources",
    description=(
        "Count the resources the caller may see. When `has_more` is true the count is "
        "a lower bound because private resources span more access groups than were checked."
    ),
    responses=_ERROR_RESPONSES,
)
async def query_resources_count(
    response: Response,
    name: str | None = Query(default=None, min_length=1, description="Resource name or alias; supports typeahead"),
    parent: str | None = Query(default=None, pattern=PARENT_PATTERN, description="Parent reference, e.g. project:123"),
    resource_type: str | None = Query(default=None, alias="type", description="Resource type to search"),
    tags: list[str] | None = Query(default=None, description="Tags to search (any match)"),
    v: str = Query(default="1", pattern="^1$", description="API version"),
    principal: str = Depends(get_principal),
    service: QueryService = Depends(get_service),
) -> QueryResourcesCountResponse:
    result = await service.query_resources_count(
        principal,
        name=name,
        parent=parent,
        resource_type=resource_type,
        tags=tags,
    )
    if result.cache_control:
        response.headers["Cache-Control"] = result.cache_control
    return result
