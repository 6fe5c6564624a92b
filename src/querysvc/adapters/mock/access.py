"""Mock access checker — Answers every request line from simple rules."""

from __future__ import annotations

import logging

from querysvc.adapters.base.adapter import AccessChecker

logger = logging.getLogger(__name__)


class MockAccessChecker(AccessChecker):
    """In-memory ``AccessChecker``.

    A line is denied when it contains any of ``denied``; otherwise it gets
    ``"true"`` when ``allow_all`` is set, or when it contains one of
    ``allowed``.

    Args:
        allow_all: Grant every request that is not explicitly denied.
        allowed: Substrings (principals, objects) that grant access.
        denied: Substrings that always deny access.
    """

    def __init__(
        self,
        allow_all: bool = True,
        allowed: list[str] | None = None,
        denied: list[str] | None = None,
    ) -> None:
        self._allow_all = allow_all
        self._allowed = allowed or []
        self._denied = denied or []
        self.requests: list[str] = []

    @property
    def name(self) -> str:
        return "mock"

    async def check_access(self, subject: str, message: str, timeout: float) -> dict[str, str]:
        logger.debug("executing mock access check on %s (timeout %.1fs)", subject, timeout)
        self.requests.append(message)

        result: dict[str, str] = {}
        for line in message.splitlines():
            line = line.strip()
            if line:
                result[line] = "true" if self._grants(line) else "false"
        return result

    async def is_ready(self) -> None:
        return None

    def _grants(self, line: str) -> bool:
        if any(d in line for d in self._denied):
            return False
        return self._allow_all or any(a in line for a in self._allowed)
