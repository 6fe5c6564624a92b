"""Client-facing response models.

These are the shapes serialized by the HTTP layer. ``cache_control`` is
carried on the models for the endpoint to turn into a ``Cache-Control``
header and is excluded from the JSON body.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# ═══════════════════════════════════════════════════════════════════════════════
# Resources
# ═══════════════════════════════════════════════════════════════════════════════


class ResourceResponse(BaseModel):
    """A universal representation of an indexed resource."""

    type: str = Field(description="Resource type", examples=["committee"])
    id: str = Field(description="Resource ID (within its resource collection)", examples=["123"])
    data: Any = Field(default=None, description="Resource data snapshot")


class QueryResourcesResponse(BaseModel):
    """One page of authorized resources."""

    resources: list[ResourceResponse] = Field(default_factory=list, description="Resources found")
    page_token: str | None = Field(default=None, description="Opaque token for the next page")
    cache_control: str | None = Field(default=None, exclude=True)


class QueryResourcesCountResponse(BaseModel):
    """Number of resources the caller is allowed to see."""

    count: int = Field(ge=0, description="Count of authorized resources")
    has_more: bool = Field(description="True if the count is a lower bound")
    cache_control: str | None = Field(default=None, exclude=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Organizations
# ═══════════════════════════════════════════════════════════════════════════════


class OrganizationResponse(BaseModel):
    name: str | None = Field(default=None, description="Organization name")
    domain: str | None = Field(default=None, description="Organization domain")
    industry: str | None = Field(default=None, description="Industry classification")
    sector: str | None = Field(default=None, description="Business sector classification")
    employees: str | None = Field(default=None, description="Employee count or range")


class OrganizationSuggestionResponse(BaseModel):
    name: str = Field(description="Organization name")
    domain: str = Field(description="Organization domain")
    logo: str | None = Field(default=None, description="Logo URL")


class OrganizationSuggestionsResponse(BaseModel):
    suggestions: list[OrganizationSuggestionResponse] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """Body of every classified error response."""

    name: str = Field(description="Error category, e.g. 'BadRequest'")
    message: str = Field(description="Error message")
