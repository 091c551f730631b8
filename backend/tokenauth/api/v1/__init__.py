"""Version 1 of the HTTP API.

``ROUTES`` lists ``(blueprint, mount_point)`` pairs relative to ``/api/v1``.
"""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp

VERSION = "v1"

ROUTES: tuple[tuple[Blueprint, str], ...] = (
    (health_bp, ""),  # /api/v1/health
    (auth_bp, "auth"),  # /api/v1/auth/...
)
