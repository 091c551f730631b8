"""Refresh-token wire format and salted hashing helpers.

A refresh token is the unpadded URL-safe base64 of::

    user_id (16 bytes, UUID binary form) || secret (>= 32 random bytes)

The leading identity is a lookup selector: it lets a store fetch the one
record the caller claims, then verify the whole token against the stored
hash. The token stays opaque to clients.
"""

from __future__ import annotations

import base64
import binascii
import secrets
import threading
from dataclasses import dataclass, field
from typing import Final
from uuid import UUID

from werkzeug.security import check_password_hash, generate_password_hash

SELECTOR_BYTES: Final[int] = 16
MIN_SECRET_BYTES: Final[int] = 32
# Werkzeug hashes work on the text form; keep tokens short enough for any method.
MAX_SECRET_BYTES: Final[int] = 128


class MalformedTokenError(ValueError):
    """The string is not a refresh token produced by :func:`encode_refresh_token`."""


def parse_user_id(raw: str | UUID | None) -> UUID:
    """
    Parse a user identifier in canonical UUID form.

    :raises ValueError: When empty or not a UUID.
    """
    if isinstance(raw, UUID):
        return raw
    if raw is None or not str(raw).strip():
        raise ValueError("user id is empty")
    return UUID(str(raw).strip())


def encode_refresh_token(user_id: UUID, secret: bytes) -> str:
    """Pack ``user_id`` and ``secret`` into the transport string."""
    if len(secret) < MIN_SECRET_BYTES:
        raise ValueError(f"refresh secret must be at least {MIN_SECRET_BYTES} bytes")
    raw = user_id.bytes + secret
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_refresh_token(token: str) -> tuple[UUID, bytes]:
    """
    Split a transport string back into ``(user_id, secret)``.

    :raises MalformedTokenError: When the token cannot be decoded or has the wrong size.
    """
    if not token or not isinstance(token, str):
        raise MalformedTokenError("refresh token is empty")
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
        raise MalformedTokenError("refresh token is not valid base64") from exc

    secret_len = len(raw) - SELECTOR_BYTES
    if not MIN_SECRET_BYTES <= secret_len <= MAX_SECRET_BYTES:
        raise MalformedTokenError("refresh token has an unexpected length")
    return UUID(bytes=raw[:SELECTOR_BYTES]), raw[SELECTOR_BYTES:]


@dataclass(slots=True)
class RefreshTokenHasher:
    """
    Salted, slow one-way hashing of refresh tokens (Werkzeug password hashing).

    A new random salt is drawn on every :meth:`hash` call, so two hashes of the
    same token never match each other.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or ``"pbkdf2:sha256:600000"``.
    :param salt_length: Salt size in characters.
    """

    method: str = "scrypt"
    salt_length: int = 16
    _dummy: str | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def hash(self, token: str) -> str:
        return generate_password_hash(token, method=self.method, salt_length=self.salt_length)

    def verify(self, stored_hash: str | None, token: str) -> bool:
        """
        Compare ``token`` with ``stored_hash``.

        When there is no stored hash the token is still checked against a
        throwaway hash of the same method, so a missing record costs as much
        as a mismatch.
        """
        if not stored_hash:
            check_password_hash(self._dummy_hash(), token)
            return False
        return bool(check_password_hash(stored_hash, token))

    def _dummy_hash(self) -> str:
        with self._lock:
            if self._dummy is None:
                self._dummy = self.hash(secrets.token_urlsafe(MIN_SECRET_BYTES))
            return self._dummy
