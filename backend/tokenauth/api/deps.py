"""Shared API helpers for request wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from tokenauth.core.extensions import get_credential_generator, get_credential_store
from tokenauth.core.logger import ensure_request_id
from tokenauth.services._shared.base import ServiceContext
from tokenauth.services.auth import RotationConfig, TokenRotationService

F = TypeVar("F", bound=Callable[..., Any])


def get_token_service() -> TokenRotationService:
    """Build a request-scoped rotation service from the app-wide generator and store."""

    cfg = RotationConfig(
        store_timeout=timedelta(seconds=float(current_app.config["STORE_TIMEOUT_SECONDS"]))
    )
    return TokenRotationService(
        generator=get_credential_generator(),
        store=get_credential_store(),
        cfg=cfg,
        ctx=ServiceContext(request_id=ensure_request_id()),
    )


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_store(response: Response) -> Response:
    """Mark a response carrying credentials as non-cacheable."""

    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
