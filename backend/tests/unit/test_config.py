"""Configuration loading and auth settings validation."""

from __future__ import annotations

from datetime import timedelta

import pytest
from authkit.core.config import (
    CONFIG_MAP,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_int,
    get_config,
    validate_auth_settings,
)
from authkit.factory import create_app
from authkit.services._shared.errors import ConfigInvalid


def _settings(**overrides):
    base = {
        "JWT_ACCESS_SECRET": "access",
        "JWT_REFRESH_SECRET": "refresh",
        "JWT_ISSUER": "authkit",
        "JWT_ACCESS_TTL_SECONDS": 1800,
        "JWT_REFRESH_TTL_SECONDS": 604800,
        "AUTH_OPERATION_TIMEOUT_SECONDS": 10,
        "PASSWORD_HASH_METHOD": "scrypt",
    }
    base.update(overrides)
    return base


def test_validate_auth_settings_returns_typed_values():
    settings = validate_auth_settings(_settings())

    assert settings["access_ttl"] == timedelta(minutes=30)
    assert settings["refresh_ttl"] == timedelta(days=7)
    assert settings["operation_timeout"] == timedelta(seconds=10)
    assert settings["issuer"] == "authkit"


@pytest.mark.parametrize(
    "overrides",
    [
        {"JWT_ACCESS_SECRET": ""},
        {"JWT_REFRESH_SECRET": "   "},
        {"JWT_REFRESH_SECRET": "access"},
        {"JWT_ISSUER": ""},
        {"PASSWORD_HASH_METHOD": ""},
        {"JWT_ACCESS_TTL_SECONDS": 0},
        {"JWT_REFRESH_TTL_SECONDS": -1},
        {"AUTH_OPERATION_TIMEOUT_SECONDS": "soon"},
    ],
)
def test_validate_auth_settings_rejects(overrides):
    with pytest.raises(ConfigInvalid):
        validate_auth_settings(_settings(**overrides))


def test_create_app_fails_fast_without_signing_keys():
    class NoKeys(TestingConfig):
        JWT_ACCESS_SECRET = ""

    with pytest.raises(ConfigInvalid):
        create_app(NoKeys, instance_relative_config=False)


def test_get_config_selects_by_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_config() is ProductionConfig
    monkeypatch.setenv("APP_ENV", "unknown")
    assert get_config() is DevelopmentConfig
    assert set(CONFIG_MAP) == {"development", "testing", "production"}


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "Yes")
    monkeypatch.setenv("NUM", " 42 ")
    monkeypatch.setenv("BAD", "forty-two")

    assert env_bool("FLAG") is True
    assert env_bool("MISSING_FLAG", default=True) is True
    assert env_int("NUM", 1) == 42
    assert env_int("MISSING_NUM", 7) == 7
    with pytest.raises(ConfigInvalid):
        env_int("BAD", 1)


def test_testing_config_keys_differ():
    assert TestingConfig.JWT_ACCESS_SECRET != TestingConfig.JWT_REFRESH_SECRET
