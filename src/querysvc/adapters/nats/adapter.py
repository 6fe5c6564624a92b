"""NATS adapter — Access checks as request/reply over NATS.

The request payload is the newline-separated check message. The reply is
one ``<request line>\\t<result>`` pair per line, e.g.::

    committee:123#member@user:alice\ttrue
    project:789#contributor@user:alice\tfalse

Install the optional dependency::

    pip install querysvc[nats]
    # or: pip install nats-py
"""

from __future__ import annotations

import logging
from typing import Any

from querysvc import errors
from querysvc.adapters.base.adapter import AccessChecker
from querysvc.adapters.base.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CLIENT_NAME = "querysvc"


def parse_reply(data: bytes) -> dict[str, str]:
    """Parse a tab-separated access check reply; blank lines are ignored.

    Raises:
        QueryError: UNEXPECTED when a line has no tab separator.
    """
    result: dict[str, str] = {}
    for line in data.decode("utf-8").splitlines():
        if not line.strip():
            continue
        relation, sep, allowed = line.partition("\t")
        if not sep:
            logger.debug("invalid NATS response line: %r", line)
            raise errors.unexpected("failed to process access check")
        result[relation] = allowed
    return result


class NatsAccessChecker(AccessChecker):
    """Access checker speaking NATS request/reply.

    Args:
        url: NATS server URL.
        timeout: Connection timeout in seconds.
        max_reconnect: Maximum reconnect attempts.
        reconnect_wait: Seconds between reconnect attempts.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_reconnect: int = 3,
        reconnect_wait: float = 2.0,
    ) -> None:
        if not url:
            raise ConfigurationError("NATS URL is required")
        self._url = url
        self._timeout = timeout
        self._max_reconnect = max_reconnect
        self._reconnect_wait = reconnect_wait
        self._conn: Any = None

    @property
    def name(self) -> str:
        return "nats"

    async def initialize(self) -> None:
        """Connect to the NATS server."""
        try:
            import nats
        except ImportError as e:
            raise ConfigurationError("nats-py package is required.  Install with: pip install querysvc[nats]") from e

        async def on_disconnect() -> None:
            logger.warning("NATS disconnected")

        async def on_reconnect() -> None:
            logger.info("NATS reconnected: %s", self._conn.connected_url if self._conn else "")

        async def on_close() -> None:
            logger.info("NATS connection closed")

        try:
            self._conn = await nats.connect(
                servers=[self._url],
                name=CLIENT_NAME,
                connect_timeout=self._timeout,
                max_reconnect_attempts=self._max_reconnect,
                reconnect_time_wait=self._reconnect_wait,
                disconnected_cb=on_disconnect,
                reconnected_cb=on_reconnect,
                closed_cb=on_close,
            )
        except Exception as e:
            raise errors.service_unavailable("failed to connect to NATS", e) from e
        logger.info("Connected to NATS at %s", self._url)

    async def shutdown(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def check_access(self, subject: str, message: str, timeout: float) -> dict[str, str]:
        if not subject or not message:
            raise errors.unexpected("invalid NATS access check request: subject and message must be set")
        if self._conn is None:
            raise errors.service_unavailable("NATS client not initialized.")

        try:
            reply = await self._conn.request(subject, message.encode("utf-8"), timeout=timeout)
        except Exception as e:
            raise errors.service_unavailable("NATS request failed", e) from e

        logger.debug("received NATS response on %s: %s", subject, reply.data)
        return parse_reply(reply.data)

    async def is_ready(self) -> None:
        if self._conn is None or not self._conn.is_connected:
            raise errors.service_unavailable("NATS is not connected")
