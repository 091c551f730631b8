"""Unit tests for the refresh-token wire format and salted hasher."""

from __future__ import annotations

import base64
from uuid import UUID

import pytest

from tokenauth.core.security import (
    MalformedTokenError,
    RefreshTokenHasher,
    decode_refresh_token,
    encode_refresh_token,
    parse_user_id,
)

UID = UUID("11111111-1111-1111-1111-111111111111")


def test_parse_user_id_accepts_canonical_and_padded() -> None:
    assert parse_user_id("11111111-1111-1111-1111-111111111111") == UID
    assert parse_user_id("  11111111-1111-1111-1111-111111111111\n") == UID
    assert parse_user_id(UID) is UID


@pytest.mark.parametrize("raw", [None, "", "   ", "not-a-uuid", "11111111-1111"])
def test_parse_user_id_rejects_invalid(raw) -> None:
    with pytest.raises(ValueError):
        parse_user_id(raw)


def test_encode_is_url_safe_and_unpadded() -> None:
    token = encode_refresh_token(UID, b"\xff" * 32)

    assert "=" not in token
    assert "+" not in token and "/" not in token
    assert decode_refresh_token(token) == (UID, b"\xff" * 32)


def test_encode_rejects_short_secret() -> None:
    with pytest.raises(ValueError):
        encode_refresh_token(UID, b"\x00" * 31)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "a",
        base64.urlsafe_b64encode(UID.bytes + b"\x00" * 8).decode().rstrip("="),
        base64.urlsafe_b64encode(UID.bytes + b"\x00" * 200).decode().rstrip("="),
        "ééééééééééééééééééééééééééééééééééééééééééééééééééééééééééééééé",
    ],
)
def test_decode_rejects_malformed(token) -> None:
    with pytest.raises(MalformedTokenError):
        decode_refresh_token(token)


def test_malformed_token_is_a_value_error() -> None:
    assert issubclass(MalformedTokenError, ValueError)


def test_hasher_salts_every_hash() -> None:
    hasher = RefreshTokenHasher(method="pbkdf2:sha256:1000")

    first = hasher.hash("token")
    second = hasher.hash("token")

    assert first != second
    assert first.startswith("pbkdf2:sha256:1000$")
    assert hasher.verify(first, "token")
    assert hasher.verify(second, "token")
    assert not hasher.verify(first, "other")


@pytest.mark.parametrize("stored", [None, ""])
def test_hasher_verify_without_hash_is_false(stored) -> None:
    hasher = RefreshTokenHasher(method="pbkdf2:sha256:1000")
    assert hasher.verify(stored, "token") is False
