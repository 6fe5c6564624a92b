"""Tests for the NATS access checker."""

from __future__ import annotations

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from querysvc.adapters.base.exceptions import ConfigurationError
from querysvc.adapters.nats.adapter import NatsAccessChecker, parse_reply
from querysvc.constants import ACCESS_CHECK_SUBJECT
from querysvc.errors import ErrorKind, QueryError


@pytest.fixture
def checker() -> NatsAccessChecker:
    return NatsAccessChecker(url="nats://localhost:4222")


def _connected(reply: bytes = b"") -> MagicMock:
    conn = MagicMock()
    conn.is_connected = True
    conn.request = AsyncMock(return_value=SimpleNamespace(data=reply))
    conn.close = AsyncMock()
    return conn


class TestParseReply:
    def test_pairs(self) -> None:
        data = b"committee:1#member@user:alice\ttrue\nproject:2#viewer@user:alice\tfalse\n"
        assert parse_reply(data) == {
            "committee:1#member@user:alice": "true",
            "project:2#viewer@user:alice": "false",
        }

    def test_blank_lines_ignored(self) -> None:
        assert parse_reply(b"\n\na#b@user:c\ttrue\n\n") == {"a#b@user:c": "true"}

    def test_empty_reply(self) -> None:
        assert parse_reply(b"") == {}

    def test_line_without_tab(self) -> None:
        with pytest.raises(QueryError) as exc_info:
            parse_reply(b"a#b@user:c true")
        assert exc_info.value.kind is ErrorKind.UNEXPECTED
        assert str(exc_info.value) == "failed to process access check"

    def test_bad_line_logged_below_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="querysvc.adapters.nats"), pytest.raises(QueryError):
            parse_reply(b"a#b@user:c true")
        records = [r for r in caplog.records if r.name.startswith("querysvc.adapters.nats")]
        assert [r.levelno for r in records] == [logging.DEBUG]


class TestNatsAccessChecker:
    def test_url_required(self) -> None:
        with pytest.raises(ConfigurationError):
            NatsAccessChecker(url="")

    def test_name(self, checker: NatsAccessChecker) -> None:
        assert checker.name == "nats"

    async def test_initialize_connects(self, checker: NatsAccessChecker) -> None:
        conn = _connected()
        with patch("nats.connect", new=AsyncMock(return_value=conn)) as connect:
            await checker.initialize()
        assert connect.call_args.kwargs["servers"] == ["nats://localhost:4222"]
        assert connect.call_args.kwargs["max_reconnect_attempts"] == 3
        await checker.is_ready()

    async def test_connect_failure_is_unavailable(self, checker: NatsAccessChecker) -> None:
        with patch("nats.connect", new=AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(QueryError) as exc_info:
                await checker.initialize()
        assert exc_info.value.kind is ErrorKind.SERVICE_UNAVAILABLE

    async def test_check_access(self, checker: NatsAccessChecker) -> None:
        checker._conn = _connected(b"committee:1#member@user:alice\ttrue")
        result = await checker.check_access(ACCESS_CHECK_SUBJECT, "committee:1#member@user:alice", 15.0)
        assert result == {"committee:1#member@user:alice": "true"}
        checker._conn.request.assert_awaited_once_with(
            ACCESS_CHECK_SUBJECT, b"committee:1#member@user:alice", timeout=15.0
        )

    async def test_empty_message_rejected(self, checker: NatsAccessChecker) -> None:
        checker._conn = _connected()
        with pytest.raises(QueryError) as exc_info:
            await checker.check_access(ACCESS_CHECK_SUBJECT, "", 15.0)
        assert exc_info.value.kind is ErrorKind.UNEXPECTED
        checker._conn.request.assert_not_called()

    async def test_request_failure_is_unavailable(self, checker: NatsAccessChecker) -> None:
        checker._conn = _connected()
        checker._conn.request = AsyncMock(side_effect=TimeoutError())
        with pytest.raises(QueryError) as exc_info:
            await checker.check_access(ACCESS_CHECK_SUBJECT, "a#b@user:c", 1.0)
        assert exc_info.value.kind is ErrorKind.SERVICE_UNAVAILABLE

    async def test_not_initialized(self, checker: NatsAccessChecker) -> None:
        with pytest.raises(QueryError) as exc_info:
            await checker.check_access(ACCESS_CHECK_SUBJECT, "a#b@user:c", 1.0)
        assert exc_info.value.kind is ErrorKind.SERVICE_UNAVAILABLE

    async def test_not_ready_when_disconnected(self, checker: NatsAccessChecker) -> None:
        checker._conn = _connected()
        checker._conn.is_connected = False
        with pytest.raises(QueryError) as exc_info:
            await checker.is_ready()
        assert exc_info.value.kind is ErrorKind.SERVICE_UNAVAILABLE

    async def test_close_shuts_down(self, checker: NatsAccessChecker) -> None:
        conn = _connected()
        checker._conn = conn
        await checker.close()
        conn.close.assert_awaited_once()
        assert checker._conn is None
