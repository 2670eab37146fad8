"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

from authkit.services._shared.errors import ConfigInvalid

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Loads .env during development (no-op when the file does not exist)
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
    """Parse an integer from an environment variable, falling back to ``default``.

    :raises ConfigInvalid: If the variable is set but is not an integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val.strip())
    except ValueError as exc:
        raise ConfigInvalid(f"{name} must be an integer, got {val!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_ACCESS_SECRET: str
        HMAC key signing access tokens. Must differ from the refresh key.
    JWT_REFRESH_SECRET: str
        HMAC key signing refresh tokens.
    JWT_ISSUER: str
        Value of the ``iss`` claim written into and required from tokens.
    JWT_ACCESS_TTL_SECONDS: int
        Access token lifetime (30 minutes by default).
    JWT_REFRESH_TTL_SECONDS: int
        Refresh token lifetime (7 days by default).
    AUTH_OPERATION_TIMEOUT_SECONDS: int
        Deadline applied to every auth operation.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method, e.g. ``"scrypt"`` or ``"pbkdf2:sha256:600000"``.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes. Signing keys have no defaults: an
    empty key aborts application start-up.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "authkit")
    JWT_ACCESS_TTL_SECONDS = env_int("JWT_ACCESS_TTL_SECONDS", 30 * 60)
    JWT_REFRESH_TTL_SECONDS = env_int("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60)
    AUTH_OPERATION_TIMEOUT_SECONDS = env_int("AUTH_OPERATION_TIMEOUT_SECONDS", 10)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and falls back to throwaway signing keys so
    the server starts without a ``.env`` file.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret")
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap PBKDF2 cost so hashing does not dominate test time.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


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


def _positive_seconds(config: Mapping[str, Any], key: str) -> timedelta:
    raw = config.get(key)
    try:
        seconds = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigInvalid(f"{key} must be an integer number of seconds") from exc
    if seconds <= 0:
        raise ConfigInvalid(f"{key} must be positive")
    return timedelta(seconds=seconds)


def validate_auth_settings(config: Mapping[str, Any]) -> dict[str, Any]:
    """Validate the auth-related settings and return them in typed form.

    :param config: Flask config (or any mapping with the same keys).
    :returns: Mapping with ``access_secret``, ``refresh_secret``, ``issuer``,
        ``access_ttl``, ``refresh_ttl``, ``operation_timeout`` and
        ``password_hash_method``.
    :raises ConfigInvalid: On empty keys, identical keys or non-positive durations.
    """
    access_secret = str(config.get("JWT_ACCESS_SECRET") or "").strip()
    refresh_secret = str(config.get("JWT_REFRESH_SECRET") or "").strip()
    if not access_secret or not refresh_secret:
        raise ConfigInvalid("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET are required")
    if access_secret == refresh_secret:
        raise ConfigInvalid("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")

    issuer = str(config.get("JWT_ISSUER") or "").strip()
    if not issuer:
        raise ConfigInvalid("JWT_ISSUER must not be empty")

    method = str(config.get("PASSWORD_HASH_METHOD") or "").strip()
    if not method:
        raise ConfigInvalid("PASSWORD_HASH_METHOD must not be empty")

    return {
        "access_secret": access_secret,
        "refresh_secret": refresh_secret,
        "issuer": issuer,
        "access_ttl": _positive_seconds(config, "JWT_ACCESS_TTL_SECONDS"),
        "refresh_ttl": _positive_seconds(config, "JWT_REFRESH_TTL_SECONDS"),
        "operation_timeout": _positive_seconds(config, "AUTH_OPERATION_TIMEOUT_SECONDS"),
        "password_hash_method": method,
    }
