"""Settings classes selected by ``APP_ENV`` and fed from environment variables.

A local ``.env`` file is loaded on import when present. The factory runs
:func:`validate_config` on whatever class it loads, so an unsafe deployment
fails at boot instead of at the first token it signs.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"

# Placeholder secrets accepted outside production only
PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_JWT", "CHANGE_ME_JWT_REFRESH"}
)

REQUIRED_SECRETS: Final[tuple[str, ...]] = (
    "SECRET_KEY",
    "JWT_SECRET_KEY",
    "JWT_REFRESH_SECRET_KEY",
)

TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing or unsafe."""


def env_bool(name: str, default: bool = False) -> bool:
    """``1``, ``true``, ``yes``, ``y`` and ``on`` (any case) are true; unset gives ``default``."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in TRUTHY


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable.

    :param name: Environment variable to inspect.
    :param default: Value used when the variable is unset or blank.
    :returns: Parsed integer.
    :raises ConfigError: If the value is not a valid integer.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


class BaseConfig:
    """Defaults shared by every environment.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Mount point of the versioned API (``/api/v1/...``).
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Key signing access tokens.
    JWT_REFRESH_SECRET_KEY: str
        Key signing refresh tokens. Must differ from ``JWT_SECRET_KEY``.
    JWT_ACCESS_TOKEN_EXPIRES_SECONDS: int
        Access token lifetime (24 hours by default).
    JWT_REFRESH_TOKEN_EXPIRES_SECONDS: int
        Refresh token lifetime (7 days by default).
    REFRESH_STORE_BACKEND: str
        ``"sql"`` (default) or ``"redis"``; the latter requires ``REDIS_URL``.
    SQLALCHEMY_DATABASE_URI: str
        From ``DATABASE_URL``; SQLite file in development.
    SQLALCHEMY_ENGINE_OPTIONS: dict
        Engine keyword arguments (pre-ping, pool timeout).
    AUTH_LOGIN_RATE_LIMIT: str
        Flask-Limiter expression applied to ``POST /auth/login``.
    STORE_RETRY_ATTEMPTS: int
        Attempts for store calls failing with transient connectivity errors.
    LOG_LEVEL: str
        Level of the JSON root logger.
    CORS_ORIGINS: str
        Comma-separated origins of the parent-facing web client.
    """

    APP_ENV = "development"
    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_JWT_REFRESH")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "vaxtrack")
    JWT_ACCESS_TOKEN_EXPIRES_SECONDS = env_int("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", 24 * 3600)
    JWT_REFRESH_TOKEN_EXPIRES_SECONDS = env_int("JWT_REFRESH_TOKEN_EXPIRES_SECONDS", 7 * 24 * 3600)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Refresh sessions
    REFRESH_STORE_BACKEND = os.getenv("REFRESH_STORE_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}
    STORE_RETRY_ATTEMPTS = env_int("STORE_RETRY_ATTEMPTS", 3)
    STORE_RETRY_MAX_WAIT_SECONDS = env_int("STORE_RETRY_MAX_WAIT_SECONDS", 2)

    # Rate limiting
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "200 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    DEBUG = False
    TESTING = False
    PROPAGATE_EXCEPTIONS = False


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG=0``; placeholder secrets tolerated."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """
    pytest settings.

    In-memory SQLite (override with ``TEST_DATABASE_URL``), the SQL refresh
    store, fixed distinct signing keys, a cheap password hash and no retry
    backoff.
    """

    TESTING = True
    APP_ENV = "testing"
    DEBUG = False
    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-access-signing-key-0123456789abcdef"
    JWT_REFRESH_SECRET_KEY = "test-refresh-signing-key-fedcba9876543210"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    REFRESH_STORE_BACKEND = "sql"
    REDIS_URL = None
    STORE_RETRY_MAX_WAIT_SECONDS = 0
    RATELIMIT_STORAGE_URI = "memory://"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Real secrets required; pool checkout bounded by ``DB_POOL_TIMEOUT`` seconds."""

    DEBUG = False
    APP_ENV = "production"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_timeout": env_int("DB_POOL_TIMEOUT", 10),
    }


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Settings class named by ``APP_ENV``; unknown or unset means development."""
    return CONFIG_MAP.get(os.getenv(ENV_VAR, "").strip().lower(), DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Fail fast when the loaded configuration cannot run safely.

    :param config: Loaded Flask configuration mapping.
    :raises ConfigError: On missing secrets, placeholder secrets outside
        development/testing, identical access/refresh secrets, non-positive
        expiries, or an unknown refresh store backend.
    """
    missing = [key for key in REQUIRED_SECRETS if not config.get(key)]
    if missing:
        raise ConfigError(f"Missing required secrets: {', '.join(missing)}")

    relaxed = bool(config.get("DEBUG")) or bool(config.get("TESTING"))
    if not relaxed:
        placeholders = [key for key in REQUIRED_SECRETS if config.get(key) in PLACEHOLDER_SECRETS]
        if placeholders:
            raise ConfigError(f"Placeholder secrets are not allowed: {', '.join(placeholders)}")

    if config.get("JWT_SECRET_KEY") == config.get("JWT_REFRESH_SECRET_KEY"):
        raise ConfigError("JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY must differ.")

    for key in ("JWT_ACCESS_TOKEN_EXPIRES_SECONDS", "JWT_REFRESH_TOKEN_EXPIRES_SECONDS"):
        if int(config.get(key) or 0) <= 0:
            raise ConfigError(f"{key} must be a positive number of seconds.")

    backend = str(config.get("REFRESH_STORE_BACKEND", "sql")).lower()
    if backend not in {"sql", "redis"}:
        raise ConfigError(f"Unknown REFRESH_STORE_BACKEND {backend!r}")
    if backend == "redis" and not config.get("REDIS_URL"):
        raise ConfigError("REFRESH_STORE_BACKEND=redis requires REDIS_URL.")
