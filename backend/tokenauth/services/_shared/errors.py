"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between the credential generator, the
credential stores and the rotation service.

Each error carries ``op``, the name of the operation that failed, and a short
message safe to hand to a network caller. The underlying cause is chained
with ``raise ... from exc`` so the logs keep the full detail.

The translation to HTTP responses is handled by
``BaseService.translate_exceptions()``.
"""

from __future__ import annotations


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Client-safe summary.
    :param op: Name of the failing operation (e.g. ``"store.save"``).
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None, *, op: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.op = op

    def __str__(self) -> str:
        return f"{self.op}: {self.message}" if self.op else self.message


# --------------------------------------------------------------------------- #
# Caller errors
# --------------------------------------------------------------------------- #


class InputValidationError(ServiceError):
    """Malformed or missing input (empty GUID, malformed token). Never retried."""

    default_message = "Invalid input"


class UnauthorizedError(ServiceError):
    """The presented refresh token does not match the claimed identity's hash."""

    default_message = "Invalid refresh token"


class NotFoundError(ServiceError):
    """
    Raised by credential stores when no record verifies for a user.

    Covers both "no record" and "hash mismatch"; the rotation service turns it
    into :class:`UnauthorizedError`.
    """

    default_message = "Credential record not found"


# --------------------------------------------------------------------------- #
# Internal errors
# --------------------------------------------------------------------------- #


class PersistenceError(ServiceError):
    """Backing store failed or timed out. The caller may retry the whole operation."""

    default_message = "Credential store unavailable"


class CryptoError(ServiceError):
    """A cryptographic primitive was unavailable. Fatal for the request."""

    default_message = "Cryptographic failure"


class SigningError(CryptoError):
    """The access token could not be signed."""

    default_message = "Failed to sign access token"


class EntropyError(CryptoError):
    """The secure randomness source failed or did not answer in time."""

    default_message = "Failed to generate refresh token"
