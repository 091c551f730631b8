"""JSON logging for the token service.

Every record is emitted as one JSON object on stdout. Inside a request the
record carries the request id taken from ``X-Request-ID`` (or
``X-Correlation-ID``), generated when the client sends none, and echoed back
on the response.

Token material must never reach the logs: :class:`TokenRedactionFilter`
masks anything shaped like a JWT, a refresh token or a bearer credential
before formatting.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import IO, Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` attributes copied into the JSON payload when present.
EXTRA_KEYS = ("op", "user_id", "error", "endpoint", "elapsed_ms")

REDACTED = "[redacted]"
_JWT_RE = re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+")
_BEARER_RE = re.compile(r"(?i)(bearer\s+)\S+")
# Refresh tokens: unpadded base64url of a 16-byte selector plus a 32+ byte secret
_OPAQUE_RE = re.compile(r"(?<![A-Za-z0-9_-])[A-Za-z0-9_-]{64,}(?![A-Za-z0-9_-])")


def ensure_request_id() -> str:
    """Return the request id bound to the current request.

    Outside a request context a fresh id is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())

    rid = g.get("request_id")
    if rid:
        return rid
    rid = next((request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None)
    g.request_id = rid or str(uuid4())
    return g.request_id


def redact(text: str) -> str:
    """Mask JWTs, opaque refresh tokens and bearer credentials inside ``text``."""
    text = _JWT_RE.sub(REDACTED, text)
    text = _OPAQUE_RE.sub(REDACTED, text)
    return _BEARER_RE.sub(rf"\g<1>{REDACTED}", text)


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` on every record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class TokenRedactionFilter(logging.Filter):
    """Rewrite the rendered message and ``error`` extra with tokens masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg, record.args = cleaned, None
        error = getattr(record, "error", None)
        if isinstance(error, str):
            record.error = redact(error)
        return True


class JSONFormatter(logging.Formatter):
    """Serialize a record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO", *, stream: IO[str] | None = None) -> None:
    """Route the root logger to a single JSON handler.

    :param level: Level name (case-insensitive) or numeric level.
    :param stream: Output stream; defaults to ``sys.stdout``.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())
    handler.addFilter(TokenRedactionFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Bind request ids to each request and echo them on responses."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _bind_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "JSONFormatter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "redact",
]
