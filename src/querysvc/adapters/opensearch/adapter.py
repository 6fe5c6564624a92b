"""OpenSearch adapter — Resource search and counting over an OpenSearch index.

Each indexed document is a resource transaction body::

    {
      "object_type": "committee", "object_id": "123",
      "object_ref": "committee:123", "public": false,
      "access_check_object": "committee:123", "access_check_relation": "member",
      "access_check_query": "committee:123#member",
      "latest": true, "parent_refs": [...], "tags": [...],
      "name_and_aliases": [...], "sort_name": "...", "updated_at": "...",
      "data": {...}
    }

Pagination fetches one extra hit to learn whether another page exists and
seals the last returned hit's ``sort`` values into the next page token.

Install the optional dependency::

    pip install querysvc[opensearch]
    # or: pip install opensearch-py
"""

from __future__ import annotations

import json
import logging
from typing import Any

from querysvc import errors
from querysvc.adapters.base.adapter import ResourceSearcher
from querysvc.adapters.base.exceptions import ConfigurationError
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

NAME_FIELDS = [
    "name_and_aliases",
    "name_and_aliases._2gram",
    "name_and_aliases._3gram",
]
AGGREGATION_NAME = "group_by"
AGGREGATION_FIELD = "access_check_query"


def build_query(criteria: SearchCriteria, *, public: bool | None = None) -> dict[str, Any]:
    """Render the ``bool`` query for ``criteria``.

    Args:
        criteria: Compiled search criteria.
        public: Force a ``public`` term; defaults to ``True`` only when
            ``criteria.public_only`` is set.
    """
    if public is None and criteria.public_only:
        public = True

    must: list[dict[str, Any]] = [{"term": {"latest": True}}]
    if public is not None:
        must.append({"term": {"public": public}})
    if criteria.resource_type:
        must.append({"term": {"object_type": criteria.resource_type}})
    if criteria.parent:
        must.append({"term": {"parent_refs": criteria.parent}})
    if criteria.name:
        must.append({"multi_match": {"query": criteria.name, "type": "bool_prefix", "fields": NAME_FIELDS}})

    query: dict[str, Any] = {"bool": {"must": must}}
    if criteria.tags:
        query["bool"]["should"] = [{"term": {"tags": tag}} for tag in criteria.tags]
        query["bool"]["minimum_should_match"] = 1
    return query


def build_search_body(criteria: SearchCriteria) -> dict[str, Any]:
    """Render the full search request body.

    One hit beyond ``page_size`` is requested so the caller can tell
    whether a next page exists. ``_id`` breaks sort ties.
    """
    sort: list[Any] = []
    if criteria.sort_by and criteria.sort_order:
        sort.append({criteria.sort_by: {"order": criteria.sort_order}})
    elif criteria.sort_by:
        sort.append(criteria.sort_by)
    sort.append({"_id": "asc"})

    body: dict[str, Any] = {
        "size": criteria.page_size + 1,
        "query": build_query(criteria),
        "sort": sort,
    }
    if criteria.search_after is not None:
        body["search_after"] = json.loads(criteria.search_after)
    return body


def build_aggregation_body(criteria: SearchCriteria) -> dict[str, Any]:
    """Group private resources by access-check query."""
    return {
        "size": 0,
        "query": build_query(criteria, public=False),
        "aggs": {AGGREGATION_NAME: {"terms": {"field": AGGREGATION_FIELD, "size": criteria.page_size}}},
    }


def hit_to_resource(hit: dict[str, Any]) -> Resource:
    """Map an OpenSearch hit to ``Resource``; ``data`` falls back to the whole source."""
    source = hit.get("_source") or {}
    return Resource(
        type=source.get("object_type", ""),
        id=source.get("object_id") or hit.get("_id", ""),
        data=source.get("data", source),
        object_ref=source.get("object_ref", ""),
        public=bool(source.get("public", False)),
        access_check_object=source.get("access_check_object", ""),
        access_check_relation=source.get("access_check_relation", ""),
    )


class OpenSearchResourceSearcher(ResourceSearcher):
    """Resource searcher backed by OpenSearch (v2+).

    Args:
        url: OpenSearch node URL.
        index: Index holding resource documents.
        secret: Page token secret used to seal next-page positions.
        verify_certs: Whether to verify TLS certificates.
        **kwargs: Additional keyword arguments forwarded to ``AsyncOpenSearch``.
    """

    def __init__(
        self,
        url: str,
        index: str,
        secret: PageTokenSecret,
        verify_certs: bool = True,
        **kwargs: Any,
    ) -> None:
        if not url:
            raise ConfigurationError("opensearch URL is required")
        if not index:
            raise ConfigurationError("opensearch index is required")
        self._url = url
        self._index = index
        self._secret = secret
        self._verify_certs = verify_certs
        self._extra_kwargs = kwargs
        self._client: Any = None

    @property
    def name(self) -> str:
        return "opensearch"

    async def initialize(self) -> None:
        """Create the ``AsyncOpenSearch`` client."""
        try:
            from opensearchpy import AsyncOpenSearch
        except ImportError as e:
            raise ConfigurationError(
                "opensearch-py package is required.  Install with: pip install querysvc[opensearch]"
            ) from e

        client_kwargs: dict[str, Any] = {
            "hosts": [self._url],
            "verify_certs": self._verify_certs,
            "ssl_show_warn": False,
        }
        client_kwargs.update(self._extra_kwargs)
        self._client = AsyncOpenSearch(**client_kwargs)
        logger.info("OpenSearch client created for %s (index %s)", self._url, self._index)

    async def shutdown(self) -> None:
        """Close the OpenSearch client."""
        if self._client:
            await self._client.close()
            self._client = None

    # ── Search ───────────────────────────────────────────────────────────

    async def query_resources(self, criteria: SearchCriteria) -> SearchResult:
        client = self._require_client()
        body = build_search_body(criteria)
        logger.debug("executing opensearch query: %s", body)

        try:
            response = await client.search(index=self._index, body=body)
        except Exception as e:
            raise self._map_error("opensearch search failed", e) from e

        hits = response.get("hits", {})
        raw_hits = list(hits.get("hits", []))
        page_hits = raw_hits[: criteria.page_size]

        next_token = None
        if len(raw_hits) > criteria.page_size and page_hits:
            next_token = encode_page_token(page_hits[-1].get("sort", []), self._secret)

        resources = [hit_to_resource(hit) for hit in page_hits]
        logger.debug("opensearch search completed: %d results", len(resources))
        return SearchResult(
            resources=resources,
            page_token=next_token,
            total=hits.get("total", {}).get("value", 0),
        )

    async def query_resources_count(
        self,
        count_criteria: SearchCriteria,
        aggregation_criteria: SearchCriteria,
        public_only: bool,
    ) -> CountResult:
        client = self._require_client()
        try:
            count_response = await client.count(index=self._index, body={"query": build_query(count_criteria)})
        except Exception as e:
            raise self._map_error("opensearch count failed", e) from e
        count = count_response.get("count", 0)

        if public_only:
            return CountResult(count=count)

        try:
            response = await client.search(index=self._index, body=build_aggregation_body(aggregation_criteria))
        except Exception as e:
            raise self._map_error("opensearch aggregation failed", e) from e

        group_by = response.get("aggregations", {}).get(AGGREGATION_NAME, {})
        aggregation = TermsAggregation(
            doc_count_error_upper_bound=group_by.get("doc_count_error_upper_bound", 0),
            sum_other_doc_count=group_by.get("sum_other_doc_count", 0),
            buckets=[
                AggregationBucket(key=b["key"], doc_count=b.get("doc_count", 0)) for b in group_by.get("buckets", [])
            ],
        )
        logger.debug("opensearch count completed: public=%d buckets=%d", count, len(aggregation.buckets))
        return CountResult(count=count, aggregation=aggregation)

    # ── Health ───────────────────────────────────────────────────────────

    async def is_ready(self) -> None:
        client = self._require_client()
        try:
            reachable = await client.ping()
        except Exception as e:
            raise errors.service_unavailable("opensearch is not reachable", e) from e
        if not reachable:
            raise errors.service_unavailable("opensearch is not reachable")

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require_client(self) -> Any:
        if not self._client:
            raise errors.service_unavailable("OpenSearch client not initialized.")
        return self._client

    @staticmethod
    def _map_error(message: str, err: Exception) -> errors.QueryError:
        from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
        from opensearchpy.exceptions import NotFoundError

        if isinstance(err, OpenSearchConnectionError):
            return errors.service_unavailable(message, err)
        if isinstance(err, NotFoundError):
            return errors.not_found(message, err)
        return errors.unexpected(message, err)
