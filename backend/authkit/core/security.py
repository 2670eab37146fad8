"""Build the auth stack from configuration and attach it to the app."""

from __future__ import annotations

import logging

from flask import Flask, current_app

from authkit.core.config import validate_auth_settings
from authkit.infra.jwt.pyjwt_token_issuer import JWTTokenIssuer
from authkit.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authkit.services.auth.service import AuthService
from authkit.uow.coordinator import TransactionCoordinator

log = logging.getLogger(__name__)

EXTENSION_KEY = "authkit.auth"


def build_auth_service(config) -> AuthService:
    """
    Validate the settings and wire hasher, issuer and coordinator.

    :raises ConfigInvalid: On missing keys or non-positive durations.
    """
    settings = validate_auth_settings(config)
    issuer = JWTTokenIssuer.from_settings(settings)
    return AuthService(
        hasher=WerkzeugPasswordHasher(method=settings["password_hash_method"]),
        issuer=issuer,
        coordinator=TransactionCoordinator(),
        refresh_ttl=settings["refresh_ttl"],
        operation_timeout=settings["operation_timeout"],
    )


def init_app(app: Flask) -> None:
    """Fail start-up on invalid auth settings; store the service in ``app.extensions``."""
    service = build_auth_service(app.config)
    app.extensions[EXTENSION_KEY] = service
    log.debug("auth stack ready (issuer=%s)", service.issuer.issuer)


def get_auth_service() -> AuthService:
    """Return the service bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]
