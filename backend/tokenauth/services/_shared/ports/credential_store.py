from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from tokenauth.core.security import RefreshTokenHasher
from tokenauth.services._shared.errors import NotFoundError


@dataclass(frozen=True, slots=True)
class AuthRecord:
    """
    Persisted per-user credential state.

    :ivar user_id: Canonical UUID string of the owner.
    :ivar refresh_token_hash: Salted hash of the current refresh token.
    :ivar updated_at: Time of the last write (UTC).
    """

    user_id: str
    refresh_token_hash: str
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class CredentialStore(Protocol):
    """
    Keyed store of :class:`AuthRecord` values, one per ``user_id``.

    Every call is bounded by ``timeout`` (seconds). Implementations report a
    timeout or any backend failure as
    :class:`~tokenauth.services._shared.errors.PersistenceError`.
    """

    def save(self, record: AuthRecord, *, timeout: float) -> None:
        """
        Upsert ``record``, replacing any hash already held for the user.

        Must be a single backend write.
        """

    def verify_and_fetch(self, user_id: str, presented_token: str, *, timeout: float) -> AuthRecord:
        """
        Load the record of ``user_id`` and verify ``presented_token`` against it.

        :raises NotFoundError: No record, or the token does not match the hash.
        """

    def ping(self, *, timeout: float) -> bool:
        """Return True when the backend answers."""


def record_from_fields(user_id: str, fields: Mapping[str | bytes, str | bytes]) -> AuthRecord:
    """Build an :class:`AuthRecord` from a raw field mapping (bytes or str)."""

    def _s(v: str | bytes | None) -> str:
        return v.decode() if isinstance(v, bytes | bytearray) else (v or "")

    decoded = {_s(k): _s(v) for k, v in fields.items()}
    updated = decoded.get("updated_at")
    return AuthRecord(
        user_id=user_id,
        refresh_token_hash=decoded.get("refresh_token_hash", ""),
        updated_at=datetime.fromisoformat(updated) if updated else datetime.now(UTC),
    )


def verified(
    record: AuthRecord | None,
    presented_token: str,
    hasher: RefreshTokenHasher,
    *,
    op: str,
) -> AuthRecord:
    """
    Shared tail of ``verify_and_fetch``: hash-compare or raise.

    Missing records and mismatches raise the same error after the same work.
    """
    if record is None:
        # dummy comparison so a missing user costs the same as a mismatch
        hasher.verify(None, presented_token)
        raise NotFoundError(op=op)
    if not hasher.verify(record.refresh_token_hash, presented_token):
        raise NotFoundError(op=op)
    return record


class InMemoryCredentialStore(CredentialStore):
    """
    In-memory credential store.

    .. note::
       Uses a threading lock so concurrent requests see single writes.
    """

    def __init__(self, hasher: RefreshTokenHasher | None = None) -> None:
        self._hasher = hasher or RefreshTokenHasher()
        self._records: dict[str, AuthRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: AuthRecord, *, timeout: float) -> None:
        with self._lock:
            self._records[record.user_id] = record

    def verify_and_fetch(self, user_id: str, presented_token: str, *, timeout: float) -> AuthRecord:
        with self._lock:
            record = self._records.get(user_id)
        return verified(record, presented_token, self._hasher, op="store.memory.verify_and_fetch")

    def ping(self, *, timeout: float) -> bool:
        return True

    def get(self, user_id: str) -> AuthRecord | None:
        """Fetch a record snapshot (if present) without verification."""
        with self._lock:
            return self._records.get(user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
