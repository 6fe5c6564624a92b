"""JWT authenticator — Validates Heimdall-issued bearer tokens with PyJWT.

Tokens are PS256-signed, issued by ``heimdall`` for the configured audience
and carry the caller identity in a custom ``principal`` claim. Signing keys
are fetched from the JWKS endpoint and cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import jwt
from jwt import PyJWKClient

from querysvc import errors
from querysvc.adapters.base.adapter import Authenticator

logger = logging.getLogger(__name__)

SIGNATURE_ALGORITHM = "PS256"
DEFAULT_ISSUER = "heimdall"
DEFAULT_AUDIENCE = "lfx-v2-query-service"
DEFAULT_JWKS_URL = "http://heimdall:4457/.well-known/jwks"
JWKS_CACHE_SECONDS = 300
CLOCK_SKEW_SECONDS = 5


def shorten_error(message: str) -> str:
    """Drop nested detail after the second colon of an error message."""
    first = message.find(":")
    if first == -1 or first + 1 >= len(message):
        return message
    second = message.find(":", first + 1)
    return message[:second] if second != -1 else message


class JwtAuthenticator(Authenticator):
    """``Authenticator`` backed by a JWKS endpoint.

    Args:
        jwks_url: JWKS endpoint; defaults to Heimdall's.
        audience: Expected ``aud`` claim.
        issuer: Expected ``iss`` claim.
        jwks_client: Pre-built ``PyJWKClient`` (used by tests).
    """

    def __init__(
        self,
        jwks_url: str = "",
        audience: str = "",
        issuer: str = DEFAULT_ISSUER,
        jwks_client: PyJWKClient | None = None,
    ) -> None:
        self._jwks_url = jwks_url or DEFAULT_JWKS_URL
        self._audience = audience or DEFAULT_AUDIENCE
        self._issuer = issuer
        self._jwks_client = jwks_client or PyJWKClient(
            self._jwks_url,
            cache_keys=True,
            lifespan=JWKS_CACHE_SECONDS,
        )

    @property
    def name(self) -> str:
        return "jwt"

    async def parse_principal(self, token: str) -> str:
        try:
            claims = await asyncio.to_thread(self._decode, token)
        except jwt.PyJWKClientConnectionError as e:
            logger.debug("failed to fetch JWKS from %s: %s", self._jwks_url, e)
            raise errors.service_unavailable("unable to fetch token signing keys") from e
        except (jwt.InvalidTokenError, jwt.PyJWKClientError) as e:
            logger.debug("failed to validate JWT token: %s", e)
            raise errors.validation(shorten_error(str(e))) from e

        principal = claims.get("principal")
        if not isinstance(principal, str) or not principal:
            raise errors.validation("principal must be provided")
        logger.debug("parsed principal: %s", principal)
        return principal

    def _decode(self, token: str) -> dict[str, Any]:
        signing_key = self._jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=[SIGNATURE_ALGORITHM],
            audience=self._audience,
            issuer=self._issuer,
            leeway=CLOCK_SKEW_SECONDS,
        )
