# tokenauth/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from tokenauth.core import errors as api_errors
from tokenauth.services._shared.errors import (
    CryptoError,
    InputValidationError,
    NotFoundError,
    PersistenceError,
    ServiceError,
    UnauthorizedError,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param request_id: Correlation id for logging/tracing.
    """

    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the request-scoped context and a module logger.
    * Centralize the mapping from service errors to API errors.

    Notes
    -----
    Services stay thin, orchestration-only, with no web leakage: they raise
    :class:`ServiceError` subclasses and the API layer translates them.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()
        self.log = logging.getLogger(type(self).__module__)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        Only the client-safe message crosses the boundary; the operation name
        and the chained cause stay in the logs.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, InputValidationError):
            # → 400 Bad Request
            return api_errors.BadRequest(exc.message)

        if isinstance(exc, UnauthorizedError | NotFoundError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(exc.message)

        if isinstance(exc, PersistenceError | CryptoError):
            # → 500
            return api_errors.InternalError(exc.message)

        if isinstance(exc, ServiceError):
            return api_errors.InternalError("Unable to process request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
