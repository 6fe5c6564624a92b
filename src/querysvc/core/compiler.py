"""Criteria Compiler — Turns raw request filters into search criteria.

Sort keywords map through a closed table:

  name_asc      → (sort_name, asc)
  name_desc     → (sort_name, desc)
  updated_asc   → (updated_at, asc)
  updated_desc  → (updated_at, desc)
  anything else → (raw keyword, "")

Unknown keywords are passed through rather than rejected; the searcher
decides what to do with them.

A page token, when present, is opened with the process-wide secret. A token
that does not open aborts compilation with a VALIDATION error; no partial
criteria are ever returned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from querysvc.constants import DEFAULT_BUCKET_SIZE, DEFAULT_PAGE_SIZE
from querysvc.models.criteria import (
    OrganizationSearchCriteria,
    OrganizationSuggestionCriteria,
    SearchCriteria,
)
from querysvc.paging.codec import PageTokenSecret, decode_page_token

logger = logging.getLogger(__name__)

SORT_TABLE: dict[str, tuple[str, str]] = {
    "name_asc": ("sort_name", "asc"),
    "name_desc": ("sort_name", "desc"),
    "updated_asc": ("updated_at", "asc"),
    "updated_desc": ("updated_at", "desc"),
}


def normalize_sort(sort: str | None) -> tuple[str, str]:
    """Map a sort keyword to ``(sort_by, sort_order)``."""
    if sort in SORT_TABLE:
        return SORT_TABLE[sort]
    return sort or "", ""


def compile_search_criteria(
    secret: PageTokenSecret,
    *,
    name: str | None = None,
    parent: str | None = None,
    resource_type: str | None = None,
    tags: Iterable[str] | None = None,
    sort: str | None = None,
    page_token: str | None = None,
    page_size: int | None = None,
) -> SearchCriteria:
    """Compile resource query filters into ``SearchCriteria``.

    Args:
        secret: Page token secret used to open ``page_token``.
        name: Name or alias typeahead filter.
        parent: Parent reference filter.
        resource_type: Resource type filter.
        tags: Tags, matched with OR semantics; duplicates are dropped.
        sort: Sort keyword (see module docstring).
        page_token: Opaque token from a previous page.
        page_size: Page size; ``DEFAULT_PAGE_SIZE`` when omitted.

    Returns:
        The compiled criteria.

    Raises:
        QueryError: VALIDATION if ``page_token`` cannot be opened.
    """
    sort_by, sort_order = normalize_sort(sort)

    search_after = None
    if page_token is not None:
        search_after = decode_page_token(page_token, secret)
        logger.debug("decoded page token %s into search_after %s", page_token, search_after)

    return SearchCriteria(
        name=name,
        parent=parent,
        resource_type=resource_type,
        tags=_ordered_unique(tags),
        sort_by=sort_by,
        sort_order=sort_order,
        page_token=page_token,
        search_after=search_after,
        page_size=DEFAULT_PAGE_SIZE if page_size is None else page_size,
    )


def compile_count_criteria(
    *,
    name: str | None = None,
    parent: str | None = None,
    resource_type: str | None = None,
    tags: Iterable[str] | None = None,
) -> tuple[SearchCriteria, SearchCriteria]:
    """Compile resource count filters.

    Returns:
        ``(count_criteria, aggregation_criteria)``. The first counts public
        resources; the second groups private resources by access-check query
        into at most ``DEFAULT_BUCKET_SIZE`` buckets.
    """
    filters = {
        "name": name,
        "parent": parent,
        "resource_type": resource_type,
        "tags": _ordered_unique(tags),
    }
    count_criteria = SearchCriteria(**filters, public_only=True)
    aggregation_criteria = SearchCriteria(**filters, page_size=DEFAULT_BUCKET_SIZE)
    return count_criteria, aggregation_criteria


def compile_organization_criteria(
    *,
    name: str | None = None,
    domain: str | None = None,
) -> OrganizationSearchCriteria:
    """Pass name and domain through unchanged.

    Requiring at least one of them is the organization searcher's job.
    """
    return OrganizationSearchCriteria(name=name, domain=domain)


def compile_suggestion_criteria(query: str) -> OrganizationSuggestionCriteria:
    """Pass the typeahead query through unchanged; ``""`` matches broadly."""
    return OrganizationSuggestionCriteria(query=query)


def _ordered_unique(values: Iterable[str] | None) -> list[str]:
    if not values:
        return []
    return list(dict.fromkeys(values))
