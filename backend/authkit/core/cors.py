"""CORS configuration helper for API resources."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value, dropping blanks."""
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` from ``CORS_ORIGINS``.

    A blank value or ``"*"`` allows any origin without credentials. Clients
    send the ``Authorization`` header, so it is always allowed and the
    ``X-Request-ID`` response header is exposed.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
