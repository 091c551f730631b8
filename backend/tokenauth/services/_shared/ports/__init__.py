"""
tokenauth.services._shared.ports
================================

*Ports* (hexagonal interfaces) for the token lifecycle engine.

Modules
-------
- :mod:`credential_generator`:
    Defines :class:`~.CredentialGenerator`: minting of signed access tokens
    and hashed refresh tokens.

- :mod:`credential_store`:
    Defines :class:`~.CredentialStore` and :class:`~.AuthRecord`: one
    refresh-token hash per user, bounded-time save and verified lookup.

Design Notes
------------
Concrete adapters (PyJWT generator, Redis and SQL stores) live under
``tokenauth.infra``. The in-memory store stays here for tests and local runs.
"""

from __future__ import annotations

from .credential_generator import AccessClaims, CredentialGenerator, IssuedRefreshToken
from .credential_store import AuthRecord, CredentialStore, InMemoryCredentialStore, verified

__all__ = [
    "AccessClaims",
    "AuthRecord",
    "CredentialGenerator",
    "CredentialStore",
    "InMemoryCredentialStore",
    "IssuedRefreshToken",
    "verified",
]
