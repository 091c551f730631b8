"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app

from tokenauth.api.deps import json_response, timing
from tokenauth.core.extensions import get_credential_store

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and credential store health information."""

    timeout = float(current_app.config["STORE_TIMEOUT_SECONDS"])
    store_ok = get_credential_store().ping(timeout=timeout)
    if not store_ok:
        current_app.logger.error("healthcheck.store_error")
    payload = {
        "status": "ok" if store_ok else "degraded",
        "store": "ok" if store_ok else "fail",
        "backend": current_app.config["CREDENTIAL_STORE"],
    }
    return json_response(payload, status=200 if store_ok else 503)
