# tokenauth/infra/jwt/jwt_credential_generator.py
from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from tokenauth.core.security import (
    MIN_SECRET_BYTES,
    RefreshTokenHasher,
    encode_refresh_token,
    parse_user_id,
)
from tokenauth.core.timeouts import ENTROPY_POOL, call_with_timeout
from tokenauth.services._shared.errors import (
    CryptoError,
    EntropyError,
    InputValidationError,
    SigningError,
)
from tokenauth.services._shared.ports import AccessClaims, CredentialGenerator, IssuedRefreshToken

ACCESS_TOKEN_TYPE = "access"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class JWTCredentialGenerator(CredentialGenerator):
    """
    PyJWT-based generator.

    Everything it needs is injected at construction; it never reads process
    environment or Flask config.

    :param secret_key: Symmetric signing key (HMAC).
    :param access_ttl: Access token lifetime.
    :param hasher: Salted hasher for refresh tokens.
    :param algorithm: JWS algorithm; must be an HMAC one.
    :param refresh_token_bytes: Size of the random refresh secret.
    :param entropy_timeout: Bound, in seconds, for the randomness draw.
    :param random_bytes: Secure randomness source, called with a byte count.
    :param clock: Source of "now" (UTC).
    """

    secret_key: str
    access_ttl: timedelta
    hasher: RefreshTokenHasher = field(default_factory=RefreshTokenHasher)
    algorithm: str = "HS512"
    refresh_token_bytes: int = MIN_SECRET_BYTES
    entropy_timeout: float = 1.0
    random_bytes: Callable[[int], bytes] = secrets.token_bytes
    clock: Callable[[], datetime] = _utcnow

    def __post_init__(self) -> None:
        if not self.algorithm.startswith("HS"):
            raise ValueError(f"Unsupported signing algorithm {self.algorithm!r}")
        if self.refresh_token_bytes < MIN_SECRET_BYTES:
            raise ValueError(f"refresh_token_bytes must be >= {MIN_SECRET_BYTES}")

    # ------------------------------------------------------------------ #
    # Access tokens
    # ------------------------------------------------------------------ #

    def issue_access_token(self, user_id: str) -> str:
        op = "generator.issue_access_token"
        if not self.secret_key:
            raise SigningError("Signing key unavailable", op=op)

        now = self.clock()
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.access_ttl).timestamp()),
            "type": ACCESS_TOKEN_TYPE,
        }
        try:
            return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError(op=op) from exc

    def decode_access_token(self, token: str) -> AccessClaims:
        """
        Verify signature and expiry of ``token``.

        :raises jwt.ExpiredSignatureError: Token is past its ``exp``.
        :raises jwt.InvalidTokenError: Any other verification failure.
        """
        data = jwt.decode(
            token,
            self.secret_key,
            algorithms=[self.algorithm],
            options={"require": ["sub", "exp", "iat"]},
        )
        if data.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
            raise jwt.InvalidTokenError("Wrong token type: access token required.")
        return AccessClaims(
            user_id=str(data["sub"]),
            issued_at=datetime.fromtimestamp(int(data["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(data["exp"]), tz=UTC),
        )

    # ------------------------------------------------------------------ #
    # Refresh tokens
    # ------------------------------------------------------------------ #

    def issue_refresh_token(self, user_id: str) -> IssuedRefreshToken:
        op = "generator.issue_refresh_token"
        try:
            uid = parse_user_id(user_id)
        except ValueError as exc:
            raise InputValidationError("Invalid user id", op=op) from exc

        try:
            secret = call_with_timeout(
                self.random_bytes,
                self.refresh_token_bytes,
                timeout=self.entropy_timeout,
                pool=ENTROPY_POOL,
            )
        except (TimeoutError, OSError, NotImplementedError) as exc:
            raise EntropyError(op=op) from exc

        token = encode_refresh_token(uid, secret)
        try:
            token_hash = self.hasher.hash(token)
        except (ValueError, MemoryError) as exc:
            raise CryptoError("Failed to hash refresh token", op=op) from exc
        return IssuedRefreshToken(token=token, token_hash=token_hash)
