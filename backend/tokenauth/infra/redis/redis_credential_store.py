# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass, field
from typing import cast

import redis  # type: ignore[import-untyped]

from tokenauth.core.security import RefreshTokenHasher
from tokenauth.core.timeouts import call_with_timeout
from tokenauth.services._shared.errors import PersistenceError
from tokenauth.services._shared.ports import AuthRecord, CredentialStore, verified
from tokenauth.services._shared.ports.credential_store import record_from_fields


@dataclass(slots=True)
class RedisCredentialStore(CredentialStore):
    """
    Redis-backed credential store.

    One hash per user at ``auth:<user_id>`` with the fields
    ``refresh_token_hash`` and ``updated_at``. Saving is a single ``HSET``,
    so a concurrent reader sees either the old or the new hash.

    :param r: A Redis client (already connected).
    :param hasher: Verifier matching the hashes written by the generator.
    """

    r: redis.Redis
    hasher: RefreshTokenHasher = field(default_factory=RefreshTokenHasher)

    # -------------------- helpers --------------------

    @staticmethod
    def _k(user_id: str) -> str:
        return f"auth:{user_id}"

    # -------------------- API ------------------------

    def save(self, record: AuthRecord, *, timeout: float) -> None:
        op = "store.redis.save"
        mapping = {
            "refresh_token_hash": record.refresh_token_hash,
            "updated_at": record.updated_at.isoformat(),
        }
        try:
            call_with_timeout(self.r.hset, self._k(record.user_id), mapping=mapping, timeout=timeout)
        except (TimeoutError, redis.RedisError) as exc:
            raise PersistenceError(op=op) from exc

    def verify_and_fetch(self, user_id: str, presented_token: str, *, timeout: float) -> AuthRecord:
        op = "store.redis.verify_and_fetch"
        try:
            h = cast(
                dict[bytes, bytes],
                call_with_timeout(self.r.hgetall, self._k(user_id), timeout=timeout),
            )
        except (TimeoutError, redis.RedisError) as exc:
            raise PersistenceError(op=op) from exc

        record = record_from_fields(user_id, h) if h else None
        return verified(record, presented_token, self.hasher, op=op)

    def ping(self, *, timeout: float) -> bool:
        try:
            return bool(call_with_timeout(self.r.ping, timeout=timeout))
        except (TimeoutError, redis.RedisError):
            return False
