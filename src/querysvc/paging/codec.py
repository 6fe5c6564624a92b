"""Page token codec — authenticated, opaque pagination cursors.

A page token hides the backend "search-after" position of the last item of a
page. The position is serialized to JSON, sealed with XSalsa20-Poly1305
(``nacl.secret.SecretBox``) under a process-wide 32-byte secret and a fresh
random nonce, and published as unpadded base64url::

    token = base64url_nopad(nonce[24] || secretbox(json(position)))

Decoding authenticates the token before anything else is trusted: a wrong
key, a flipped bit and a truncated token are all reported the same way.
Rotating the secret therefore expires every token issued before it.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from typing import Any

import nacl.exceptions
import nacl.secret
import nacl.utils
from pydantic import BaseModel, ConfigDict, Field, field_validator

from querysvc import errors

logger = logging.getLogger(__name__)

NONCE_SIZE = nacl.secret.SecretBox.NONCE_SIZE
KEY_SIZE = nacl.secret.SecretBox.KEY_SIZE
OVERHEAD = nacl.secret.SecretBox.MACBYTES

_TOKEN_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


class PageTokenSecret(BaseModel):
    """Immutable 32-byte key used to seal and open page tokens.

    Built once at startup and passed by reference to every component that
    encodes or decodes tokens.
    """

    model_config = ConfigDict(frozen=True)

    key: bytes = Field(repr=False, description="Raw 32-byte secretbox key")

    @field_validator("key")
    @classmethod
    def _check_length(cls, v: bytes) -> bytes:
        if len(v) != KEY_SIZE:
            raise ValueError(f"page token secret must be exactly {KEY_SIZE} bytes, got {len(v)}")
        return v

    @classmethod
    def from_string(cls, value: str) -> PageTokenSecret:
        """Derive the key from a configured secret string.

        The UTF-8 bytes of ``value`` are copied into a zeroed 32-byte buffer;
        anything past 32 bytes is ignored.

        Raises:
            ValueError: If ``value`` is empty.
        """
        if not value:
            raise ValueError("page token secret is not set")
        raw = value.encode("utf-8")[:KEY_SIZE]
        return cls(key=raw.ljust(KEY_SIZE, b"\x00"))


def encode_page_token(position: Any, secret: PageTokenSecret) -> str:
    """Seal a JSON-representable search-after position into a page token.

    Args:
        position: Any JSON-serializable value (list, dict, str, number, ...).
        secret: The process-wide page token secret.

    Returns:
        The unpadded base64url token.

    Raises:
        QueryError: UNEXPECTED if the position cannot be serialized or the
            nonce cannot be generated.
    """
    try:
        plaintext = json.dumps(position, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise errors.unexpected("unrecoverable pagination error: failed to encode", e) from e

    try:
        nonce = nacl.utils.random(NONCE_SIZE)
    except Exception as e:
        raise errors.unexpected("unrecoverable pagination error: failed to generate nonce", e) from e

    sealed = nacl.secret.SecretBox(secret.key).encrypt(plaintext, nonce)
    return base64.urlsafe_b64encode(bytes(sealed)).rstrip(b"=").decode("ascii")


def decode_page_token(token: str, secret: PageTokenSecret) -> str:
    """Open a page token and return its search-after position as JSON text.

    The returned string is a compact re-serialization of the sealed JSON; it
    is handed to the searcher untouched.

    Args:
        token: The token string supplied by the client.
        secret: The process-wide page token secret.

    Returns:
        The normalized JSON search-after string.

    Raises:
        QueryError: VALIDATION when the token is malformed, too short, fails
            authentication or does not hold JSON.
    """
    logger.debug("decoding page token: %s", token)

    blob = _b64url_decode(token)
    if blob is None:
        raise errors.validation("corrupted page token")

    if len(blob) < NONCE_SIZE + OVERHEAD:
        raise errors.validation("invalid page token length")

    nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
    try:
        plaintext = nacl.secret.SecretBox(secret.key).decrypt(ciphertext, nonce)
    except nacl.exceptions.CryptoError:
        raise errors.validation("invalid page token signature") from None

    try:
        search_after = json.dumps(
            json.loads(plaintext.decode("utf-8")),
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except (UnicodeDecodeError, ValueError):
        raise errors.validation("malformed page token") from None

    logger.debug("decoded page token, search_after=%s", search_after)
    return search_after


def _b64url_decode(token: str) -> bytes | None:
    """Strict unpadded base64url decoding; ``None`` on any malformation.

    Only the canonical encoding of a byte string is accepted, so a token
    whose unused trailing bits were altered does not decode.
    """
    if not _TOKEN_ALPHABET.fullmatch(token):
        return None
    try:
        blob = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
    except (binascii.Error, ValueError):
        return None
    if base64.urlsafe_b64encode(blob).rstrip(b"=").decode("ascii") != token:
        return None
    return blob
