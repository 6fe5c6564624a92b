"""Resource models — What the resource searcher port returns."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Resource(BaseModel):
    """A typed resource snapshot found by the searcher.

    ``data`` is opaque and forwarded to clients verbatim. The access-control
    fields mirror the indexed transaction body and never leave the service.
    """

    type: str = Field(description="Resource type, e.g. 'committee'")
    id: str = Field(description="Resource ID within its resource collection")
    data: Any = Field(default=None, description="Resource data snapshot")

    object_ref: str = Field(default="", description="Canonical reference, e.g. 'committee:123'")
    public: bool = Field(default=False, description="Whether the resource is publicly visible")
    access_check_object: str = Field(default="", description="Object to check access against")
    access_check_relation: str = Field(default="", description="Relation required for access")


class SearchResult(BaseModel):
    """A page of resources plus pagination and caching hints."""

    resources: list[Resource] = Field(default_factory=list, description="Resources found, in order")
    page_token: str | None = Field(default=None, description="Opaque token for the next page, if any")
    cache_control: str | None = Field(default=None, description="Cache-Control hint for the response")
    total: int = Field(default=0, description="Total number of matching resources")


class AggregationBucket(BaseModel):
    """A single terms-aggregation bucket."""

    key: str = Field(description="Bucket key, e.g. 'committee:123#member'")
    doc_count: int = Field(default=0, ge=0, description="Documents in this bucket")


class TermsAggregation(BaseModel):
    """A terms aggregation over private resources' access-check queries."""

    doc_count_error_upper_bound: int = Field(default=0, ge=0)
    sum_other_doc_count: int = Field(default=0, ge=0, description="Documents outside the returned buckets")
    buckets: list[AggregationBucket] = Field(default_factory=list)


class CountResult(BaseModel):
    """Resource count as seen by the caller."""

    count: int = Field(default=0, ge=0, description="Number of resources the caller may see")
    has_more: bool = Field(default=False, description="True when the count is a lower bound")
    cache_control: str | None = Field(default=None, description="Cache-Control hint for the response")
    aggregation: TermsAggregation = Field(
        default_factory=TermsAggregation,
        description="Private resources grouped by access-check query",
    )
