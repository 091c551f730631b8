"""Token issuance and refresh-token rotation."""

from __future__ import annotations

from .dto import IssueIn, RotateIn, RotationConfig, TokenPairOut
from .service import TokenRotationService

__all__ = ["IssueIn", "RotateIn", "RotationConfig", "TokenPairOut", "TokenRotationService"]
