"""Unit tests for the credential generator and store builders."""

from __future__ import annotations

import pytest
from sqlalchemy import inspect

from tokenauth.core.config import TestingConfig
from tokenauth.core.extensions import build_credential_generator, build_credential_store
from tokenauth.infra.jwt.jwt_credential_generator import JWTCredentialGenerator
from tokenauth.infra.sql.sqlalchemy_credential_store import SQLAlchemyCredentialStore
from tokenauth.services._shared.ports import InMemoryCredentialStore


def _settings(**overrides) -> dict:
    base = {
        key: getattr(TestingConfig, key) for key in dir(TestingConfig) if key.isupper()
    }
    base.update(overrides)
    return base


def test_build_generator_from_config(hasher) -> None:
    gen = build_credential_generator(
        _settings(ACCESS_TOKEN_TTL_SECONDS=60, REFRESH_TOKEN_BYTES=40), hasher
    )

    assert isinstance(gen, JWTCredentialGenerator)
    assert gen.access_ttl.total_seconds() == 60
    assert gen.refresh_token_bytes == 40
    assert gen.algorithm == "HS512"
    assert gen.hasher is hasher


def test_build_memory_store(hasher) -> None:
    assert isinstance(build_credential_store(_settings(), hasher), InMemoryCredentialStore)


def test_build_sql_store_creates_schema(hasher, tmp_path) -> None:
    settings = _settings(CREDENTIAL_STORE="sql", DATABASE_URL=f"sqlite:///{tmp_path / 'a.db'}")

    store = build_credential_store(settings, hasher)

    assert isinstance(store, SQLAlchemyCredentialStore)
    assert inspect(store.engine).has_table("auth_records")


def test_build_redis_store_fails_fast_when_unreachable(hasher) -> None:
    settings = _settings(
        CREDENTIAL_STORE="redis",
        REDIS_URL="redis://127.0.0.1:1/0",
        STORE_TIMEOUT_SECONDS=0.2,
    )
    with pytest.raises(RuntimeError):
        build_credential_store(settings, hasher)


def test_build_unknown_store_raises(hasher) -> None:
    with pytest.raises(RuntimeError):
        build_credential_store(_settings(CREDENTIAL_STORE="mongo"), hasher)
