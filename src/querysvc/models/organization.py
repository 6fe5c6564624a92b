"""Organization models — What the organization searcher port returns.

Unset and empty string are different things here. ``Organization`` fields
default to ``""`` when the source record lacks them, while a suggestion's
``logo`` stays ``None`` when the source has no logo.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Organization(BaseModel):
    """An organization record."""

    name: str = Field(default="", description="Organization name")
    domain: str = Field(default="", description="Organization domain")
    industry: str = Field(default="", description="Industry classification")
    sector: str = Field(default="", description="Business sector classification")
    employees: str = Field(default="", description="Employee count or range")


class OrganizationSuggestion(BaseModel):
    """A typeahead suggestion."""

    name: str = Field(description="Organization name")
    domain: str = Field(description="Organization domain")
    logo: str | None = Field(default=None, description="Logo URL, if the source has one")


class OrganizationSuggestionsResult(BaseModel):
    suggestions: list[OrganizationSuggestion] = Field(default_factory=list)
