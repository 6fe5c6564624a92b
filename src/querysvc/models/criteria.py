"""Criteria models — Validated, internal search parameters.

Criteria are produced by ``querysvc.core.compiler`` from raw request filters
and handed to the searcher ports. They are built fresh for every request.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from querysvc.constants import DEFAULT_PAGE_SIZE


class SearchCriteria(BaseModel):
    """Resource search parameters.

    ``sort_by`` and ``sort_order`` are either both set from the sort table or
    ``sort_order`` is empty and ``sort_by`` holds the raw keyword.
    ``search_after`` is present exactly when ``page_token`` decoded.
    """

    name: str | None = Field(default=None, description="Resource name or alias; supports typeahead")
    parent: str | None = Field(default=None, description="Parent reference, e.g. 'project:123'")
    resource_type: str | None = Field(default=None, description="Resource type to search")
    tags: list[str] = Field(default_factory=list, description="Tags to filter resources (any match)")
    sort_by: str = Field(default="", description="Index field to sort on")
    sort_order: str = Field(default="", description="Sort direction: asc, desc or empty")
    page_token: str | None = Field(default=None, description="Raw opaque page token from the client")
    search_after: str | None = Field(default=None, description="Decoded search-after position (JSON text)")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, description="Maximum results per page")
    public_only: bool = Field(default=False, description="Restrict the search to public resources")


class OrganizationSearchCriteria(BaseModel):
    """Organization lookup parameters (pass-through, no defaulting)."""

    name: str | None = Field(default=None, description="Organization name")
    domain: str | None = Field(default=None, description="Organization domain")


class OrganizationSuggestionCriteria(BaseModel):
    """Organization typeahead parameters; an empty query is legal."""

    query: str = Field(default="", description="Free-text typeahead query")
