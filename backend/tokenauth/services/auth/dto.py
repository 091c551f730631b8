# tokenauth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class IssueIn:
    """
    Input DTO for initial issuance.

    :param user_id: User GUID (canonical UUID string expected).
    :type user_id: str
    """

    user_id: str


@dataclass(frozen=True, slots=True)
class RotateIn:
    """
    Input DTO for token rotation.

    :param refresh_token: Plaintext refresh token presented by the client.
    :type refresh_token: str
    """

    refresh_token: str

    def __repr__(self) -> str:
        return "RotateIn(refresh_token=***)"


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        return "TokenPairOut(access_token=***, refresh_token=***)"


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class RotationConfig:
    """
    Bounds applied by the rotation service.

    :param store_timeout: Upper bound for every credential store call.
    :type store_timeout: timedelta
    """

    store_timeout: timedelta = timedelta(seconds=5)
