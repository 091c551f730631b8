"""SQLAlchemy models used by the SQL credential store."""

from __future__ import annotations

from .auth_record import AuthRecordRow
from .base import Base

__all__ = ["AuthRecordRow", "Base"]
