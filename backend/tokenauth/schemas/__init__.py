"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import IssuePathSchema, RefreshSchema, TokenPairSchema, WhoAmISchema

__all__ = [
    "IssuePathSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "WhoAmISchema",
]
