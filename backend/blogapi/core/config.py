"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

#: Minimum length accepted for the HMAC signing secret.
MIN_JWT_SECRET_LENGTH: Final[int] = 32

# Only ever used outside production; ``validate_config`` rejects it there.
DEV_JWT_SECRET: Final[str] = "dev-only-jwt-secret-change-me-0123456789abcdef"

# Load .env in development (no-op when missing)
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
    APP_NAME: str
        Service name. Also used as the JWT ``iss`` claim.
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        HMAC secret used by ``flask-jwt-extended`` to sign both token kinds.
        Must be at least 32 characters long.
    JWT_EXPIRY_HOURS / JWT_REFRESH_EXPIRY_HOURS: int
        Access and refresh token lifetimes.
    SQLALCHEMY_ENGINE_OPTIONS: dict
        Pool checkout timeout and pre-ping so no request waits forever on the
        database.
    RATELIMIT_DEFAULT / AUTH_RATE_LIMIT: str
        Global and public-auth request limits consumed by ``flask-limiter``.
    CORS_ORIGINS / CORS_METHODS / CORS_HEADERS: str
        Comma-separated CORS allow-lists.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    ENVIRONMENT = "development"
    APP_NAME = os.getenv("APP_NAME", "blog-api")
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    APP_COMMIT = os.getenv("APP_COMMIT", "unknown")
    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET", os.getenv("JWT_SECRET_KEY", DEV_JWT_SECRET))
    JWT_ALGORITHM = "HS256"
    JWT_DECODE_ALGORITHMS = ["HS256"]
    JWT_EXPIRY_HOURS = env_int("JWT_EXPIRY_HOURS", 24)
    JWT_REFRESH_EXPIRY_HOURS = env_int("JWT_REFRESH_EXPIRY_HOURS", 168)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=JWT_EXPIRY_HOURS)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=JWT_REFRESH_EXPIRY_HOURS)
    JWT_ENCODE_ISSUER = APP_NAME
    JWT_DECODE_ISSUER = APP_NAME
    JWT_ENCODE_NBF = True
    JWT_DECODE_LEEWAY = 0
    JWT_TOKEN_LOCATION = ["headers"]

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_POOL_TIMEOUT = env_int("DB_POOL_TIMEOUT", 10)
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"pool_pre_ping": True}

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    CORS_METHODS = os.getenv("CORS_METHODS", "GET,POST,PUT,PATCH,DELETE,OPTIONS")
    CORS_HEADERS = os.getenv("CORS_HEADERS", "Authorization,Content-Type,X-Request-ID")
    CORS_MAX_AGE = 600

    # Rate limiting (flask-limiter)
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "10 per minute")

    USE_PROXYFIX = env_bool("USE_PROXYFIX", False)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    """

    ENVIRONMENT = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    JWT_SECRET_KEY = "testing-jwt-secret-0123456789abcdefghijklmnop"
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    ``validate_config`` refuses to boot with the development JWT secret.
    """

    ENVIRONMENT = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: MutableMapping[str, Any]) -> None:
    """Fail fast on settings the service cannot run safely with.

    Also derives the values that depend on other keys (issuer, TTLs, engine
    timeouts) so instance/override configs only have to set the base ones.

    :param config: The Flask ``app.config`` mapping (mutated in place).
    :raises RuntimeError: When the JWT secret is missing, too short, or the
        development placeholder is used in production.
    """
    secret = config.get("JWT_SECRET_KEY") or ""
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY is required.")
    if len(secret) < MIN_JWT_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET_KEY must be at least {MIN_JWT_SECRET_LENGTH} characters long."
        )
    if config.get("ENVIRONMENT") == "production" and secret == DEV_JWT_SECRET:
        raise RuntimeError("Refusing to start in production with the development JWT secret.")

    app_name = config.get("APP_NAME") or BaseConfig.APP_NAME
    config["JWT_ENCODE_ISSUER"] = app_name
    config["JWT_DECODE_ISSUER"] = app_name
    config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(
        hours=int(config.get("JWT_EXPIRY_HOURS", BaseConfig.JWT_EXPIRY_HOURS))
    )
    config["JWT_REFRESH_TOKEN_EXPIRES"] = timedelta(
        hours=int(config.get("JWT_REFRESH_EXPIRY_HOURS", BaseConfig.JWT_REFRESH_EXPIRY_HOURS))
    )
    uri = str(config.get("SQLALCHEMY_DATABASE_URI", ""))
    engine_options = dict(config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    if not uri.startswith("sqlite"):
        # SQLite uses a static/singleton pool without checkout timeouts
        engine_options.setdefault("pool_timeout", int(config.get("DB_POOL_TIMEOUT", 10)))
    config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options
