"""Row model for persisted refresh-token hashes."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class AuthRecordRow(TimestampMixin, Base):
    """
    One row per user holding the hash of the current refresh token.

    Fields
    ------
    user_id : str
        Canonical UUID string; primary key, so a user never has two rows.
    refresh_token_hash : str
        Salted hash of the refresh token (never the plaintext).
    updated_at : datetime
        Time of the last issuance or rotation (from mixin).
    """

    __tablename__ = "auth_records"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    refresh_token_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<AuthRecordRow user_id={self.user_id}>"
