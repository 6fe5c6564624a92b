"""Mock authenticator — Returns a fixed local principal for any token."""

from __future__ import annotations

import logging

from querysvc import errors
from querysvc.adapters.base.adapter import Authenticator

logger = logging.getLogger(__name__)


class MockAuthenticator(Authenticator):
    def __init__(self, principal: str = "") -> None:
        self._principal = principal

    @property
    def name(self) -> str:
        return "mock"

    async def parse_principal(self, token: str) -> str:
        if not self._principal:
            raise errors.validation("mock principal not configured")
        logger.debug("parsed mock principal: %s", self._principal)
        return self._principal
