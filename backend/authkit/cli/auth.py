"""Flask CLI commands for operating the auth store."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from authkit.core.extensions import db
from authkit.core.security import get_auth_service
from authkit.services._shared.errors import RefreshTokenError

LOGGER = logging.getLogger(__name__)


def _ensure_non_production() -> None:
    """Abort schema-changing commands when running in production."""
    config = current_app.config
    app_env = str(config.get("APP_ENV", "")).lower()
    is_debug = bool(config.get("DEBUG"))
    is_testing = bool(config.get("TESTING"))
    if app_env == "production" or not (is_debug or is_testing):
        raise click.UsageError(
            "The 'flask auth create-db' command is restricted to non-production environments."
        )


@click.group("auth")
def auth_cli() -> None:
    """Auth store maintenance commands."""


@auth_cli.command("create-db")
@with_appcontext
def create_db() -> None:
    """Create the users and refresh_tokens tables without running migrations."""
    _ensure_non_production()
    db.create_all()
    LOGGER.info("auth.create_db")
    click.echo("Tables created.")


@auth_cli.command("revoke")
@click.argument("token")
@with_appcontext
def revoke(token: str) -> None:
    """Revoke a refresh token through the normal logout path."""
    try:
        get_auth_service().logout(token)
    except RefreshTokenError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo("Token revoked.")
