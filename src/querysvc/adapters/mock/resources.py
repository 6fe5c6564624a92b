"""Mock resource searcher — In-memory resources for local development and tests.

Filters mirror the production index loosely:
  - ``resource_type`` matches the resource type exactly
  - ``name`` is a case-insensitive substring of the name (or a project slug)
  - ``parent`` must appear in ``data["parent_refs"]``
  - ``tags`` match when any requested tag is present

Pagination uses the list offset as the search-after position, sealed into
a page token when a secret is given.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from typing import Any

from querysvc import errors
from querysvc.adapters.base.adapter import ResourceSearcher
from querysvc.models.criteria import SearchCriteria
from querysvc.models.resource import (
    AggregationBucket,
    CountResult,
    Resource,
    SearchResult,
    TermsAggregation,
)
from querysvc.paging.codec import PageTokenSecret, encode_page_token

logger = logging.getLogger(__name__)


def _resource(type_: str, id_: str, data: dict[str, Any], *, public: bool, relation: str = "") -> Resource:
    ref = f"{type_}:{id_}"
    return Resource(
        type=type_,
        id=id_,
        data=data,
        object_ref=ref,
        public=public,
        access_check_object=ref if relation else "",
        access_check_relation=relation,
    )


def default_resources() -> list[Resource]:
    """Seed data: a mix of public, private and uncheckable resources."""
    return [
        _resource(
            "committee",
            "123",
            {
                "name": "Technical Advisory Committee",
                "description": "Main technical governance body",
                "status": "active",
                "tags": ["active", "governance"],
                "parent_refs": ["project:456"],
            },
            public=False,
            relation="member",
        ),
        _resource(
            "project",
            "456",
            {
                "name": "LFX Platform Project",
                "slug": "lfx-platform-project",
                "description": "Core platform development project",
                "status": "active",
                "tags": ["active", "platform"],
            },
            public=True,
            relation="viewer",
        ),
        _resource(
            "committee",
            "567",
            {
                "name": "Security Committee",
                "description": "Handles security-related matters",
                "status": "active",
                "tags": ["active", "security"],
                "parent_refs": ["project:789"],
            },
            public=False,
            relation="member",
        ),
        # No access-check fields: never visible to authenticated callers.
        _resource(
            "meeting",
            "101",
            {
                "name": "Monthly Board Meeting",
                "description": "Regular board meeting for project governance",
                "status": "active",
                "tags": ["active", "governance"],
                "parent_refs": ["project:456"],
            },
            public=False,
        ),
        _resource(
            "project",
            "789",
            {
                "name": "Internal Security Project",
                "slug": "internal-security-project",
                "description": "Private security-focused project",
                "status": "active",
                "tags": ["active", "security", "private"],
            },
            public=False,
            relation="contributor",
        ),
    ]


class MockResourceSearcher(ResourceSearcher):
    """In-memory ``ResourceSearcher``.

    Args:
        resources: Resources to serve; defaults to ``default_resources()``.
        secret: Page token secret; without it results are never paginated.
    """

    def __init__(self, resources: list[Resource] | None = None, secret: PageTokenSecret | None = None) -> None:
        self._resources = list(resources) if resources is not None else default_resources()
        self._secret = secret

    @property
    def name(self) -> str:
        return "mock"

    def add_resource(self, resource: Resource) -> None:
        self._resources.append(resource)

    async def query_resources(self, criteria: SearchCriteria) -> SearchResult:
        logger.debug("executing mock search: %s", criteria.model_dump(exclude={"page_token"}))
        matches = self._sorted(self._filter(criteria, public_only=criteria.public_only), criteria)

        offset = _offset(criteria.search_after)

        if self._secret is None:
            page, next_token = matches[offset:], None
        else:
            end = offset + criteria.page_size
            page = matches[offset:end]
            next_token = encode_page_token([end], self._secret) if end < len(matches) else None

        logger.debug("mock search completed: %d results", len(page))
        return SearchResult(resources=page, page_token=next_token, total=len(matches))

    async def query_resources_count(
        self,
        count_criteria: SearchCriteria,
        aggregation_criteria: SearchCriteria,
        public_only: bool,
    ) -> CountResult:
        public_count = len(self._filter(count_criteria, public_only=True))
        if public_only:
            return CountResult(count=public_count)

        private = [r for r in self._filter(aggregation_criteria, public_only=False) if not r.public]
        counts = Counter(
            f"{r.access_check_object}#{r.access_check_relation}"
            for r in private
            if r.access_check_object and r.access_check_relation
        )
        ranked = counts.most_common()
        kept = ranked[: aggregation_criteria.page_size]
        aggregation = TermsAggregation(
            sum_other_doc_count=sum(n for _, n in ranked[aggregation_criteria.page_size :]),
            buckets=[AggregationBucket(key=key, doc_count=n) for key, n in kept],
        )
        logger.debug("mock count completed: public=%d buckets=%d", public_count, len(kept))
        return CountResult(count=public_count, aggregation=aggregation)

    async def is_ready(self) -> None:
        return None

    # ── Helpers ──────────────────────────────────────────────────────────

    def _filter(self, criteria: SearchCriteria, *, public_only: bool) -> list[Resource]:
        return [r for r in self._resources if (r.public or not public_only) and _matches(r, criteria)]

    @staticmethod
    def _sorted(resources: list[Resource], criteria: SearchCriteria) -> list[Resource]:
        if criteria.sort_by not in ("sort_name", "updated_at"):
            return resources
        field = "name" if criteria.sort_by == "sort_name" else "updated_at"
        return sorted(
            resources,
            key=lambda r: str(_data(r).get(field, "")).lower(),
            reverse=criteria.sort_order == "desc",
        )


def _offset(search_after: str | None) -> int:
    """Read the list offset from a decoded position; it must be ``[offset]``."""
    if search_after is None:
        return 0
    position = json.loads(search_after)
    if (
        not isinstance(position, list)
        or len(position) != 1
        or isinstance(position[0], bool)
        or not isinstance(position[0], int)
        or position[0] < 0
    ):
        raise errors.validation("invalid page token")
    return position[0]


def _data(resource: Resource) -> dict[str, Any]:
    return resource.data if isinstance(resource.data, dict) else {}


def _matches(resource: Resource, criteria: SearchCriteria) -> bool:
    data = _data(resource)
    if criteria.resource_type is not None and resource.type != criteria.resource_type:
        return False
    if criteria.parent is not None and criteria.parent not in data.get("parent_refs", []):
        return False
    if criteria.name is not None:
        needle = criteria.name.lower()
        candidates = [data.get("name", "")]
        if resource.type == "project":
            candidates.append(data.get("slug", ""))
        if not any(needle in str(c).lower() for c in candidates):
            return False
    return not criteria.tags or any(tag in data.get("tags", []) for tag in criteria.tags)
