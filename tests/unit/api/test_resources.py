"""Tests for the resource query and count endpoints."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from querysvc import errors
from querysvc.adapters.mock import MockAuthenticator
from querysvc.api.app import create_app
from querysvc.api.deps import set_service
from querysvc.config.settings import Settings
from querysvc.constants import ANONYMOUS_CACHE_CONTROL, ANONYMOUS_PRINCIPAL, REQUEST_ID_HEADER
from querysvc.core.service import QueryService
from querysvc.paging.codec import PageTokenSecret, encode_page_token

AUTH = {"Authorization": "Bearer test-token"}

# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def app(settings: Settings, service: QueryService) -> Iterator[FastAPI]:
    """Create a test app with the mock-backed service injected."""
    application = create_app(settings)
    set_service(service)
    yield application
    set_service(None)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# ── /query/resources ─────────────────────────────────────────────────────────


class TestQueryResources:
    def test_returns_authorized_resources(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee", "sort": "name_asc"}, headers=AUTH)
        assert resp.status_code == 200
        data = resp.json()
        assert [r["id"] for r in data["resources"]] == ["567", "123"]
        assert data["resources"][0]["type"] == "committee"
        assert data["resources"][0]["data"]["name"] == "Security Committee"
        assert "page_token" not in data
        assert "cache_control" not in data
        assert "Cache-Control" not in resp.headers

    def test_access_fields_are_not_exposed(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee"}, headers=AUTH)
        for resource in resp.json()["resources"]:
            assert set(resource) == {"type", "id", "data"}

    def test_multiple_tags(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params=[("tags", "platform"), ("tags", "security")], headers=AUTH)
        assert resp.status_code == 200
        ids = {r["id"] for r in resp.json()["resources"]}
        assert ids == {"456", "567", "789"}

    def test_parent_filter(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"parent": "project:456"}, headers=AUTH)
        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()["resources"]] == ["123"]

    def test_pagination(self, client: TestClient, service: QueryService) -> None:
        page_size = 2
        original = service.query_resources

        async def small_pages(*args, **kwargs):  # type: ignore[no-untyped-def]
            return await original(*args, page_size=page_size, **kwargs)

        service.query_resources = small_pages  # type: ignore[method-assign]

        first = client.get("/query/resources", params={"tags": "active", "sort": "name_asc"}, headers=AUTH).json()
        assert first["page_token"]
        second = client.get(
            "/query/resources",
            params={"tags": "active", "sort": "name_asc", "page_token": first["page_token"]},
            headers=AUTH,
        ).json()
        first_ids = [r["id"] for r in first["resources"]]
        second_ids = [r["id"] for r in second["resources"]]
        assert not set(first_ids) & set(second_ids)

    def test_anonymous_gets_cache_header(self, client: TestClient, service: QueryService) -> None:
        service.authenticator = MockAuthenticator(principal=ANONYMOUS_PRINCIPAL)
        resp = client.get("/query/resources", params={"tags": "active"}, headers=AUTH)
        assert resp.status_code == 200
        assert resp.headers["Cache-Control"] == ANONYMOUS_CACHE_CONTROL
        assert [r["id"] for r in resp.json()["resources"]] == ["456"]

    def test_invalid_page_token(self, client: TestClient) -> None:
        resp = client.get(
            "/query/resources",
            params={"type": "committee", "page_token": "invalid-token"},
            headers=AUTH,
        )
        assert resp.status_code == 400
        assert resp.json()["name"] == "BadRequest"

    def test_token_from_another_backend(self, client: TestClient, secret: PageTokenSecret) -> None:
        token = encode_page_token(["lfx", "committee:1"], secret)
        resp = client.get("/query/resources", params={"type": "committee", "page_token": token}, headers=AUTH)
        assert resp.status_code == 400
        assert resp.json() == {"name": "BadRequest", "message": "search operation failed: invalid page token"}

    def test_no_filters(self, client: TestClient) -> None:
        resp = client.get("/query/resources", headers=AUTH)
        assert resp.status_code == 400
        assert "at least one search parameter" in resp.json()["message"]

    def test_bad_parent_format(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"parent": "not a ref"}, headers=AUTH)
        assert resp.status_code == 400
        body = resp.json()
        assert body["name"] == "BadRequest"
        assert body["message"].startswith("invalid request parameters: parent")

    def test_unsupported_version(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee", "v": "2"}, headers=AUTH)
        assert resp.status_code == 400

    def test_missing_authorization(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee"})
        assert resp.status_code == 400
        assert resp.json() == {"name": "BadRequest", "message": "missing required header 'Authorization'"}

    def test_rejected_token(self, client: TestClient, service: QueryService) -> None:
        service.authenticator = MockAuthenticator(principal="")
        resp = client.get("/query/resources", params={"type": "committee"}, headers=AUTH)
        assert resp.status_code == 400

    def test_backend_unavailable(self, client: TestClient, service: QueryService) -> None:
        service.resource_searcher.query_resources = AsyncMock(  # type: ignore[method-assign]
            side_effect=errors.service_unavailable("opensearch search failed")
        )
        resp = client.get("/query/resources", params={"type": "committee"}, headers=AUTH)
        assert resp.status_code == 503
        assert resp.json() == {
            "name": "ServiceUnavailable",
            "message": "search operation failed: opensearch search failed",
        }


# ── /query/resources/count ───────────────────────────────────────────────────


class TestQueryResourcesCount:
    def test_count(self, client: TestClient) -> None:
        resp = client.get("/query/resources/count", params={"tags": "active"}, headers=AUTH)
        assert resp.status_code == 200
        assert resp.json() == {"count": 4, "has_more": False}

    def test_anonymous_count(self, client: TestClient, service: QueryService) -> None:
        service.authenticator = MockAuthenticator(principal=ANONYMOUS_PRINCIPAL)
        resp = client.get("/query/resources/count", params={"type": "project"}, headers=AUTH)
        assert resp.status_code == 200
        assert resp.json() == {"count": 1, "has_more": False}
        assert resp.headers["Cache-Control"] == ANONYMOUS_CACHE_CONTROL


# ── Request id ───────────────────────────────────────────────────────────────


class TestRequestId:
    def test_echoed(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee"}, headers={**AUTH, REQUEST_ID_HEADER: "abc"})
        assert resp.headers[REQUEST_ID_HEADER] == "abc"

    def test_generated(self, client: TestClient) -> None:
        resp = client.get("/query/resources", params={"type": "committee"}, headers=AUTH)
        assert len(resp.headers[REQUEST_ID_HEADER]) == 36

    def test_present_on_errors(self, client: TestClient) -> None:
        resp = client.get("/query/resources", headers={REQUEST_ID_HEADER: "err-1"})
        assert resp.status_code == 400
        assert resp.headers[REQUEST_ID_HEADER] == "err-1"
