"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Development placeholder; production refuses to start with it.
PLACEHOLDER_SECRET: Final[str] = "CHANGE_ME_JWT"

MIN_REFRESH_TOKEN_BYTES: Final[int] = 32

STORE_BACKENDS: Final[frozenset[str]] = frozenset({"redis", "sql", "memory"})


# Loads .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    """Parse a float from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Symmetric key used to sign access tokens. Also consumed by
        ``flask-jwt-extended`` when verifying bearer tokens.
    JWT_ALGORITHM: str
        MAC-based signing algorithm (``HS512``).
    ACCESS_TOKEN_TTL_SECONDS: int
        Lifetime of an access token.
    REFRESH_TOKEN_BYTES: int
        Size of the random secret inside every refresh token (>= 32).
    REFRESH_TOKEN_HASH_METHOD: str
        Werkzeug hashing method used for stored refresh-token hashes.
    CREDENTIAL_STORE: str
        Backend holding refresh-token hashes: ``redis``, ``sql`` or ``memory``.
    STORE_TIMEOUT_SECONDS: float
        Upper bound for every credential store call.
    ENTROPY_TIMEOUT_SECONDS: float
        Upper bound for drawing random bytes from the OS.
    REDIS_URL: str
        Connection URL for the Redis backend.
    DATABASE_URL: str
        SQLAlchemy URL for the SQL backend.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    APP_ENV = "development"

    # Secrets / signing
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_SECRET)
    JWT_ALGORITHM = "HS512"
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)

    # Refresh tokens
    REFRESH_TOKEN_BYTES = env_int("REFRESH_TOKEN_BYTES", MIN_REFRESH_TOKEN_BYTES)
    REFRESH_TOKEN_HASH_METHOD = os.getenv("REFRESH_TOKEN_HASH_METHOD", "scrypt")
    ENTROPY_TIMEOUT_SECONDS = env_float("ENTROPY_TIMEOUT_SECONDS", 1.0)

    # Credential store
    CREDENTIAL_STORE = os.getenv("CREDENTIAL_STORE", "redis").strip().lower()
    STORE_TIMEOUT_SECONDS = env_float("STORE_TIMEOUT_SECONDS", 5.0)
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tokenauth.db")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and keeps refresh-token hashes in memory
    unless ``CREDENTIAL_STORE`` says otherwise.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CREDENTIAL_STORE = os.getenv("CREDENTIAL_STORE", "memory").strip().lower()


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and the in-memory credential store.
    - Uses a cheap PBKDF2 work factor so the suite stays fast.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-secret-key-" + "t" * 64
    CREDENTIAL_STORE = "memory"
    REFRESH_TOKEN_HASH_METHOD = "pbkdf2:sha256:1000"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled; :func:`validate_config` rejects a missing or
    placeholder signing secret.
    """

    APP_ENV = "production"
    DEBUG = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Fail fast on settings the token engine cannot run with.

    :param config: Loaded Flask config mapping.
    :raises RuntimeError: On an unusable value.
    """
    secret = str(config.get("JWT_SECRET_KEY") or "")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY must be set.")
    if config.get("APP_ENV") == "production" and secret == PLACEHOLDER_SECRET:
        raise RuntimeError("JWT_SECRET_KEY still holds the development placeholder.")

    if int(config.get("ACCESS_TOKEN_TTL_SECONDS", 0)) <= 0:
        raise RuntimeError("ACCESS_TOKEN_TTL_SECONDS must be positive.")
    if int(config.get("REFRESH_TOKEN_BYTES", 0)) < MIN_REFRESH_TOKEN_BYTES:
        raise RuntimeError(f"REFRESH_TOKEN_BYTES must be at least {MIN_REFRESH_TOKEN_BYTES}.")
    if float(config.get("STORE_TIMEOUT_SECONDS", 0)) <= 0:
        raise RuntimeError("STORE_TIMEOUT_SECONDS must be positive.")

    backend = str(config.get("CREDENTIAL_STORE", ""))
    if backend not in STORE_BACKENDS:
        raise RuntimeError(f"Unknown CREDENTIAL_STORE {backend!r}.")
