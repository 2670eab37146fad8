"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, overload

from flask import Response, current_app, g, jsonify, request

from authkit.core.errors import Unauthorized
from authkit.core.security import get_auth_service
from authkit.services._shared.ports import TokenClaims
from authkit.services.auth import AuthService

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def bearer_token() -> str | None:
    """Return the token from ``Authorization: Bearer <token>``, if present.

    :raises Unauthorized: When the header is present but not a bearer credential.
    """
    header = request.headers.get("Authorization")
    if not header:
        return None
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Authorization header must use the Bearer scheme")
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Bearer token is empty")
    return token


def current_claims() -> TokenClaims | None:
    """Claims of the verified access token for this request (set by :func:`require_auth`)."""
    return g.get("auth_claims")


def current_actor_id() -> str | None:
    claims = current_claims()
    return claims.user_id if claims is not None else None


@overload
def require_auth(func: F) -> F: ...
@overload
def require_auth(*, optional: bool = ...) -> Callable[[F], F]: ...


def require_auth(func: F | None = None, *, optional: bool = False):
    """Verify the bearer access token and keep its claims on ``flask.g``.

    Use bare (``@require_auth``) to demand a token, or
    ``@require_auth(optional=True)`` to verify one only when it is sent.
    Verification errors surface as :class:`InvalidToken` (401).
    """

    def decorator(view: F) -> F:
        @functools.wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            token = bearer_token()
            if token is None:
                if not optional:
                    raise Unauthorized("Missing bearer token")
                g.auth_claims = None
            else:
                g.auth_claims = get_auth_service().issuer.verify_access_token(token)
            return view(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator


def auth_service() -> AuthService:
    """Return the auth service bound to the current application."""
    return get_auth_service()


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
