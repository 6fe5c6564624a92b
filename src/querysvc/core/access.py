"""Access-control filtering — Builds check requests and applies the replies.

A check request is newline-separated lines of the form
``object#relation@user:principal``. The checker answers with a mapping from
each line to ``"true"`` or anything else; only ``"true"`` grants access.

Resource rules:
  - public resources never need a check and are always kept;
  - private resources need a check and are kept only when allowed;
  - private resources without an access-check object or relation cannot be
    checked, so they are dropped.
"""

from __future__ import annotations

import logging

from querysvc.models.resource import Resource, TermsAggregation

logger = logging.getLogger(__name__)


def relation_key(access_check_query: str, principal: str) -> str:
    """Build one request line from ``object#relation`` and a principal."""
    return f"{access_check_query}@user:{principal}"


def _resource_key(resource: Resource, principal: str) -> str | None:
    if not resource.access_check_object or not resource.access_check_relation:
        return None
    return relation_key(f"{resource.access_check_object}#{resource.access_check_relation}", principal)


def needs_check(resource: Resource) -> bool:
    return not resource.public


def build_access_message(principal: str, resources: list[Resource]) -> str:
    """Build the check request for a page of resources.

    One line is emitted per distinct ``object_ref`` that needs a check.

    Returns:
        The request text without a trailing newline, or ``""`` when nothing
        needs checking.
    """
    seen: set[str] = set()
    lines: list[str] = []
    for resource in resources:
        if resource.object_ref in seen:
            continue
        seen.add(resource.object_ref)

        if not needs_check(resource):
            continue

        key = _resource_key(resource, principal)
        if key is None:
            logger.warning(
                "resource %s (%s/%s) has no access control information, dropping it",
                resource.object_ref,
                resource.type,
                resource.id,
            )
            continue
        lines.append(key)
    return "\n".join(lines)


def filter_allowed(principal: str, resources: list[Resource], responses: dict[str, str]) -> list[Resource]:
    """Keep public resources and the private ones the checker allowed, in order."""
    allowed: list[Resource] = []
    for resource in resources:
        if not needs_check(resource):
            allowed.append(resource)
            continue
        key = _resource_key(resource, principal)
        if key is not None and responses.get(key) == "true":
            allowed.append(resource)
    return allowed


def build_count_message(principal: str, aggregation: TermsAggregation) -> str:
    """Build the check request for count buckets; bucket keys are ``object#relation``."""
    return "\n".join(relation_key(bucket.key, principal) for bucket in aggregation.buckets)


def count_allowed(principal: str, aggregation: TermsAggregation, responses: dict[str, str]) -> int:
    """Sum the document counts of the buckets the checker allowed."""
    count = 0
    for bucket in aggregation.buckets:
        if responses.get(relation_key(bucket.key, principal)) == "true":
            count += bucket.doc_count
    return count
