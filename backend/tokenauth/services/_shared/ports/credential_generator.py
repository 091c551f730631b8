from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class IssuedRefreshToken:
    """
    A freshly minted refresh token.

    :ivar token: Plaintext handed to the client exactly once.
    :ivar token_hash: Salted hash to persist instead of the plaintext.
    """

    token: str
    token_hash: str

    def __repr__(self) -> str:
        return "IssuedRefreshToken(token=***, token_hash=***)"


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """Verified content of an access token."""

    user_id: str
    issued_at: datetime
    expires_at: datetime


class CredentialGenerator(Protocol):
    """Port for minting access tokens and refresh tokens."""

    def issue_access_token(self, user_id: str) -> str:
        """
        Sign ``{sub: user_id, exp: now + ttl}``.

        :raises SigningError: Key unavailable or primitive failure.
        """
        ...

    def issue_refresh_token(self, user_id: str) -> IssuedRefreshToken:
        """
        Draw a random secret bound to ``user_id`` and hash it.

        :raises EntropyError: Randomness source failed or timed out.
        """
        ...

    def decode_access_token(self, token: str) -> AccessClaims:
        """Verify signature and expiry, returning the claims."""
        ...
