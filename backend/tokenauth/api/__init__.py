"""HTTP API: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def mount_prefix(*segments: str) -> str:
    """Join path segments into ``/a/b``, skipping empty ones."""
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def mount_version(app: Flask, version: str, routes: Iterable[tuple[Blueprint, str]]) -> None:
    """Register every blueprint of ``version`` below the API base prefix.

    A blank mount point places the blueprint at the version root.
    """
    base = app.config.get("API_BASE_PREFIX", "/api")
    for bp, mount_point in routes:
        app.register_blueprint(bp, url_prefix=mount_prefix(base, version, mount_point))


def init_app(app: Flask) -> None:
    from tokenauth.api import v1

    mount_version(app, v1.VERSION, v1.ROUTES)


__all__ = ["init_app", "mount_prefix", "mount_version"]
