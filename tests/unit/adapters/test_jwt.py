"""Tests for the JWT authenticator."""

from __future__ import annotations

import logging
import time
from typing import Any
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from querysvc.adapters.jwt.adapter import DEFAULT_AUDIENCE, JwtAuthenticator, shorten_error
from querysvc.errors import ErrorKind, QueryError


@pytest.fixture(scope="module")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def authenticator(private_key: rsa.RSAPrivateKey) -> JwtAuthenticator:
    jwks_client = MagicMock()
    jwks_client.get_signing_key_from_jwt.return_value = MagicMock(key=private_key.public_key())
    return JwtAuthenticator(jwks_client=jwks_client)


def _token(private_key: rsa.RSAPrivateKey, algorithm: str = "PS256", **overrides: Any) -> str:
    now = int(time.time())
    claims: dict[str, Any] = {
        "iss": "heimdall",
        "aud": DEFAULT_AUDIENCE,
        "sub": "user-1",
        "principal": "alice",
        "iat": now,
        "exp": now + 300,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, private_key, algorithm=algorithm)


class TestShortenError:
    @pytest.mark.parametrize(
        ("message", "expected"),
        [
            ("Signature has expired", "Signature has expired"),
            ("invalid token: bad", "invalid token: bad"),
            ("a: b: c: d", "a: b"),
            ("trailing:", "trailing:"),
        ],
    )
    def test_truncates_at_second_colon(self, message: str, expected: str) -> None:
        assert shorten_error(message) == expected


class TestJwtAuthenticator:
    def test_name(self, authenticator: JwtAuthenticator) -> None:
        assert authenticator.name == "jwt"

    async def test_valid_token(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        assert await authenticator.parse_principal(_token(private_key)) == "alice"

    async def test_expired_within_leeway(
        self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey
    ) -> None:
        token = _token(private_key, exp=int(time.time()) - 2)
        assert await authenticator.parse_principal(token) == "alice"

    async def test_expired(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        token = _token(private_key, exp=int(time.time()) - 60)
        with pytest.raises(QueryError) as exc_info:
            await authenticator.parse_principal(token)
        assert exc_info.value.kind is ErrorKind.VALIDATION

    async def test_wrong_issuer(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(QueryError) as exc_info:
            await authenticator.parse_principal(_token(private_key, iss="someone-else"))
        assert exc_info.value.kind is ErrorKind.VALIDATION

    async def test_wrong_audience(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(QueryError):
            await authenticator.parse_principal(_token(private_key, aud="other-service"))

    async def test_wrong_algorithm(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(QueryError):
            await authenticator.parse_principal(_token(private_key, algorithm="RS256"))

    async def test_missing_principal(self, authenticator: JwtAuthenticator, private_key: rsa.RSAPrivateKey) -> None:
        with pytest.raises(QueryError) as exc_info:
            await authenticator.parse_principal(_token(private_key, principal=None))
        assert str(exc_info.value) == "principal must be provided"

    async def test_garbage_token(self) -> None:
        jwks_client = MagicMock()
        jwks_client.get_signing_key_from_jwt.side_effect = jwt.DecodeError("Not enough segments")
        authenticator = JwtAuthenticator(jwks_client=jwks_client)
        with pytest.raises(QueryError) as exc_info:
            await authenticator.parse_principal("not-a-jwt")
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert str(exc_info.value) == "Not enough segments"

    async def test_jwks_unreachable(self) -> None:
        jwks_client = MagicMock()
        jwks_client.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientConnectionError("Fail to fetch data")
        authenticator = JwtAuthenticator(jwks_client=jwks_client)
        with pytest.raises(QueryError) as exc_info:
            await authenticator.parse_principal("header.payload.signature")
        assert exc_info.value.kind is ErrorKind.SERVICE_UNAVAILABLE

    async def test_jwks_failure_logged_below_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        jwks_client = MagicMock()
        jwks_client.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientConnectionError("Fail to fetch data")
        authenticator = JwtAuthenticator(jwks_client=jwks_client)
        with caplog.at_level(logging.DEBUG, logger="querysvc.adapters.jwt"), pytest.raises(QueryError):
            await authenticator.parse_principal("header.payload.signature")
        records = [r for r in caplog.records if r.name.startswith("querysvc.adapters.jwt")]
        assert records
        assert all(r.levelno < logging.WARNING for r in records)

    async def test_always_ready(self, authenticator: JwtAuthenticator) -> None:
        await authenticator.is_ready()
