"""Pytest fixtures for the token lifecycle engine and its Flask surface.

Unit fixtures wire the rotation service to the in-memory store with a cheap
hashing work factor; integration fixtures build the Flask app with the same
backend so every test starts from an empty store.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from tokenauth.core.config import TestingConfig
from tokenauth.core.security import RefreshTokenHasher
from tokenauth.factory import create_app
from tokenauth.infra.jwt.jwt_credential_generator import JWTCredentialGenerator
from tokenauth.services._shared.ports import InMemoryCredentialStore
from tokenauth.services.auth import RotationConfig, TokenRotationService

USER_ID = "11111111-1111-1111-1111-111111111111"
SECRET = "unit-test-signing-secret-" + "x" * 64
ACCESS_TTL = timedelta(minutes=15)


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Keeps refresh-token hashes in memory.
    - Uses a low PBKDF2 iteration count for speed.
    """

    JWT_SECRET_KEY = SECRET
    ACCESS_TOKEN_TTL_SECONDS = int(ACCESS_TTL.total_seconds())
    STORE_TIMEOUT_SECONDS = 2.0
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def hasher() -> RefreshTokenHasher:
    """Salted hasher with a test-sized work factor."""
    return RefreshTokenHasher(method="pbkdf2:sha256:1000")


@pytest.fixture()
def generator(hasher: RefreshTokenHasher) -> JWTCredentialGenerator:
    """Generator signing with a known secret."""
    return JWTCredentialGenerator(secret_key=SECRET, access_ttl=ACCESS_TTL, hasher=hasher)


@pytest.fixture()
def store(hasher: RefreshTokenHasher) -> InMemoryCredentialStore:
    """Fresh in-memory credential store."""
    return InMemoryCredentialStore(hasher)


@pytest.fixture()
def service(generator: JWTCredentialGenerator, store: InMemoryCredentialStore) -> TokenRotationService:
    """Rotation service wired to in-memory doubles."""
    return TokenRotationService(
        generator=generator,
        store=store,
        cfg=RotationConfig(store_timeout=timedelta(seconds=2)),
    )


@pytest.fixture()
def app():
    """Create a Flask application configured for testing."""
    application = create_app(TestConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def user_id() -> str:
    """GUID used across the rotation scenarios."""
    return USER_ID
