"""Tests for the page token codec."""

from __future__ import annotations

import base64
import json

import pytest

from querysvc.errors import ErrorKind, QueryError
from querysvc.paging.codec import (
    KEY_SIZE,
    NONCE_SIZE,
    OVERHEAD,
    PageTokenSecret,
    decode_page_token,
    encode_page_token,
)


def _b64(blob: bytes) -> str:
    return base64.urlsafe_b64encode(blob).rstrip(b"=").decode("ascii")


def _unb64(token: str) -> bytes:
    return base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))


# ── Secret ───────────────────────────────────────────────────────────────────


class TestPageTokenSecret:
    def test_short_secret_is_zero_padded(self) -> None:
        secret = PageTokenSecret.from_string("abc")
        assert secret.key == b"abc" + b"\x00" * (KEY_SIZE - 3)

    def test_long_secret_is_truncated(self) -> None:
        secret = PageTokenSecret.from_string("x" * 40)
        assert secret.key == b"x" * KEY_SIZE

    def test_secrets_sharing_first_32_bytes_are_equal(self) -> None:
        a = PageTokenSecret.from_string("k" * 32 + "one")
        b = PageTokenSecret.from_string("k" * 32 + "two")
        assert a == b

    def test_empty_secret_rejected(self) -> None:
        with pytest.raises(ValueError, match="not set"):
            PageTokenSecret.from_string("")

    def test_wrong_key_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            PageTokenSecret(key=b"too-short")

    def test_repr_hides_key(self) -> None:
        secret = PageTokenSecret.from_string("super-secret-value")
        assert "super-secret" not in repr(secret)

    def test_immutable(self, secret: PageTokenSecret) -> None:
        with pytest.raises(Exception):
            secret.key = b"\x00" * KEY_SIZE  # type: ignore[misc]


# ── Round trip ───────────────────────────────────────────────────────────────


class TestRoundTrip:
    def test_object_position(self, secret: PageTokenSecret) -> None:
        token = encode_page_token({"id": "abc", "ts": 12345}, secret)
        assert json.loads(decode_page_token(token, secret)) == {"id": "abc", "ts": 12345}

    @pytest.mark.parametrize(
        "position",
        [
            ["lfx platform", "committee:123"],
            [1700000000000, "doc-1"],
            "plain-string",
            42,
            None,
            {"nested": {"list": [1, 2.5, True, None]}},
            ["ünïcödé ✓"],
        ],
    )
    def test_json_values(self, secret: PageTokenSecret, position: object) -> None:
        token = encode_page_token(position, secret)
        assert json.loads(decode_page_token(token, secret)) == position

    def test_token_is_unpadded_base64url(self, secret: PageTokenSecret) -> None:
        token = encode_page_token(["a" * 50], secret)
        assert "=" not in token
        assert "+" not in token and "/" not in token

    def test_token_length(self, secret: PageTokenSecret) -> None:
        plaintext = json.dumps([1, 2], separators=(",", ":")).encode()
        token = encode_page_token([1, 2], secret)
        assert len(_unb64(token)) == NONCE_SIZE + OVERHEAD + len(plaintext)

    def test_fresh_nonce_per_encode(self, secret: PageTokenSecret) -> None:
        first = encode_page_token(["same"], secret)
        second = encode_page_token(["same"], secret)
        assert first != second
        assert decode_page_token(first, secret) == decode_page_token(second, secret)

    def test_decode_returns_compact_json(self, secret: PageTokenSecret) -> None:
        token = encode_page_token({"a": [1, 2]}, secret)
        assert decode_page_token(token, secret) == '{"a":[1,2]}'

    def test_unserializable_position(self, secret: PageTokenSecret) -> None:
        with pytest.raises(QueryError) as exc_info:
            encode_page_token({"bad": object()}, secret)
        assert exc_info.value.kind is ErrorKind.UNEXPECTED
        assert "failed to encode" in str(exc_info.value)

    def test_entropy_failure(self, secret: PageTokenSecret, monkeypatch: pytest.MonkeyPatch) -> None:
        def no_entropy(size: int) -> bytes:
            raise OSError("entropy source unavailable")

        monkeypatch.setattr("nacl.utils.random", no_entropy)
        with pytest.raises(QueryError) as exc_info:
            encode_page_token([1], secret)
        assert exc_info.value.kind is ErrorKind.UNEXPECTED
        assert "failed to generate nonce" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)


# ── Rejection ────────────────────────────────────────────────────────────────


class TestRejection:
    def _assert_validation(self, token: str, secret: PageTokenSecret) -> QueryError:
        with pytest.raises(QueryError) as exc_info:
            decode_page_token(token, secret)
        assert exc_info.value.kind is ErrorKind.VALIDATION
        return exc_info.value

    def test_wrong_key(self, secret: PageTokenSecret, other_secret: PageTokenSecret) -> None:
        token = encode_page_token(["x"], secret)
        err = self._assert_validation(token, other_secret)
        assert str(err) == "invalid page token signature"

    def test_literal_invalid_token(self, secret: PageTokenSecret) -> None:
        self._assert_validation("invalid-token", secret)

    @pytest.mark.parametrize("token", ["not base64!", "abc+def/", "====", "a"])
    def test_malformed_base64(self, secret: PageTokenSecret, token: str) -> None:
        err = self._assert_validation(token, secret)
        assert str(err) == "corrupted page token"

    def test_padded_token_rejected(self, secret: PageTokenSecret) -> None:
        token = encode_page_token(["x"], secret)
        self._assert_validation(token + "=" * (-len(token) % 4 or 4), secret)

    def test_too_short(self, secret: PageTokenSecret) -> None:
        err = self._assert_validation(_b64(b"\x01" * (NONCE_SIZE + OVERHEAD - 1)), secret)
        assert str(err) == "invalid page token length"

    def test_empty_token(self, secret: PageTokenSecret) -> None:
        err = self._assert_validation("", secret)
        assert str(err) == "invalid page token length"

    def test_flipped_ciphertext_byte(self, secret: PageTokenSecret) -> None:
        blob = bytearray(_unb64(encode_page_token(["position"], secret)))
        blob[-1] ^= 0x01
        err = self._assert_validation(_b64(bytes(blob)), secret)
        assert str(err) == "invalid page token signature"

    def test_flipped_nonce_byte(self, secret: PageTokenSecret) -> None:
        blob = bytearray(_unb64(encode_page_token(["position"], secret)))
        blob[0] ^= 0x80
        self._assert_validation(_b64(bytes(blob)), secret)

    def test_truncated_token(self, secret: PageTokenSecret) -> None:
        blob = _unb64(encode_page_token(["position"], secret))
        self._assert_validation(_b64(blob[:-1]), secret)

    def test_every_single_character_change_is_rejected(self, secret: PageTokenSecret) -> None:
        token = encode_page_token({"id": "abc"}, secret)
        for i in range(len(token)):
            replacement = "A" if token[i] != "A" else "B"
            mutated = token[:i] + replacement + token[i + 1 :]
            self._assert_validation(mutated, secret)

    def test_non_json_plaintext(self, secret: PageTokenSecret) -> None:
        import nacl.secret
        import nacl.utils

        nonce = nacl.utils.random(NONCE_SIZE)
        sealed = nacl.secret.SecretBox(secret.key).encrypt(b"not json", nonce)
        err = self._assert_validation(_b64(bytes(sealed)), secret)
        assert str(err) == "malformed page token"

    def test_messages_never_leak_secret(self, secret: PageTokenSecret, other_secret: PageTokenSecret) -> None:
        token = encode_page_token(["x"], secret)
        err = self._assert_validation(token, other_secret)
        assert "secret" not in str(err).lower()
        assert other_secret.key.rstrip(b"\x00").decode() not in str(err)
