"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, cast

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from tokenauth.core.errors import error_response
from tokenauth.core.security import RefreshTokenHasher
from tokenauth.infra.jwt.jwt_credential_generator import JWTCredentialGenerator
from tokenauth.infra.redis.redis_credential_store import RedisCredentialStore
from tokenauth.infra.sql.sqlalchemy_credential_store import SQLAlchemyCredentialStore
from tokenauth.services._shared.ports import (
    CredentialGenerator,
    CredentialStore,
    InMemoryCredentialStore,
)

log = logging.getLogger(__name__)

# Verifies bearer access tokens on protected routes (same key/algorithm as the generator)
jwt = JWTManager()

GENERATOR_KEY = "credential_generator"
STORE_KEY = "credential_store"


# -------------------- bearer-token error envelopes --------------------


@jwt.unauthorized_loader
def _missing_token(reason: str):
    return error_response(401, code="unauthorized", message=reason)


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return error_response(401, code="unauthorized", message=reason)


@jwt.expired_token_loader
def _expired_token(_jwt_header: dict[str, Any], _jwt_payload: dict[str, Any]):
    return error_response(401, code="token_expired", message="Access token has expired")


# -------------------- builders --------------------


def build_credential_generator(
    config: Mapping[str, Any], hasher: RefreshTokenHasher
) -> JWTCredentialGenerator:
    """Create the generator from config; the signing key is passed in explicitly."""
    return JWTCredentialGenerator(
        secret_key=str(config["JWT_SECRET_KEY"]),
        access_ttl=timedelta(seconds=int(config["ACCESS_TOKEN_TTL_SECONDS"])),
        hasher=hasher,
        algorithm=str(config.get("JWT_ALGORITHM", "HS512")),
        refresh_token_bytes=int(config["REFRESH_TOKEN_BYTES"]),
        entropy_timeout=float(config["ENTROPY_TIMEOUT_SECONDS"]),
    )


def build_credential_store(config: Mapping[str, Any], hasher: RefreshTokenHasher) -> CredentialStore:
    """
    Create the configured credential store backend.

    :raises RuntimeError: When the backend cannot be reached at start-up.
    """
    backend = config["CREDENTIAL_STORE"]
    timeout = float(config["STORE_TIMEOUT_SECONDS"])

    if backend == "memory":
        return InMemoryCredentialStore(hasher)

    if backend == "redis":
        redis_url = config["REDIS_URL"]
        client = redis.Redis.from_url(
            redis_url, socket_timeout=timeout, socket_connect_timeout=timeout
        )
        try:
            client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
        return RedisCredentialStore(r=client, hasher=hasher)

    if backend == "sql":
        engine = create_engine(config["DATABASE_URL"], pool_pre_ping=True)
        store = SQLAlchemyCredentialStore(engine, hasher)
        try:
            store.create_schema()
        except SQLAlchemyError as exc:
            raise RuntimeError("Failed to prepare the auth_records table") from exc
        return store

    raise RuntimeError(f"Unknown CREDENTIAL_STORE {backend!r}")


def init_app(app: Flask) -> None:
    """Initialize JWT verification, the credential generator and the store.

    Parameters
    ----------
    app: flask.Flask
        Application whose config drives the builders. Instances are kept in
        ``app.extensions`` so request handlers can reach them.
    """
    jwt.init_app(app)

    hasher = RefreshTokenHasher(method=app.config["REFRESH_TOKEN_HASH_METHOD"])
    app.extensions[GENERATOR_KEY] = build_credential_generator(app.config, hasher)
    app.extensions[STORE_KEY] = build_credential_store(app.config, hasher)
    log.info("credential store ready", extra={"op": app.config["CREDENTIAL_STORE"]})


def get_credential_generator() -> CredentialGenerator:
    """Return the generator bound to the current application."""
    try:
        return cast(CredentialGenerator, current_app.extensions[GENERATOR_KEY])
    except KeyError as exc:
        raise RuntimeError("Credential generator is not initialized. Call init_app() first.") from exc


def get_credential_store() -> CredentialStore:
    """Return the credential store bound to the current application."""
    try:
        return cast(CredentialStore, current_app.extensions[STORE_KEY])
    except KeyError as exc:
        raise RuntimeError("Credential store is not initialized. Call init_app() first.") from exc
