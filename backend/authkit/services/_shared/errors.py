"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They are the stable contract between the stores, the token
issuer, the password hasher and the auth service.

The translation to HTTP responses (RFC 7807) is handled by
``authkit/core/errors.py``; every kind below maps to exactly one status.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the driver message. SQLite only
    reports the offending columns (``UNIQUE constraint failed: users.email``),
    so the ``<table>.<column>`` form derived from the naming convention
    ``uq_<table>_<column>`` is matched as well.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if not name.startswith("uq_"):
        return False
    # uq_refresh_tokens_token -> any "<table>.<column>" split of the remainder
    rest = name[3:]
    return any(
        f"{rest[:i]}.{rest[i + 1:]}" in message for i, ch in enumerate(rest) if ch == "_"
    )


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, adapters or the auth service.
    - Subclasses carry a ``default_message`` used when none is given.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


# --------------------------------------------------------------------------- #
# Lookup
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


# --------------------------------------------------------------------------- #
# Credentials
# --------------------------------------------------------------------------- #


class EmailAlreadyExists(ServiceError):
    """Registration attempted with an email that is already taken."""

    default_message = "email already exists"


class InvalidEmailOrPassword(ServiceError):
    """
    Login failed.

    Raised both for unknown emails and for wrong passwords so callers cannot
    tell which one happened.
    """

    default_message = "invalid email or password"


class HashingFailure(ServiceError):
    """The password hasher could not produce a hash."""

    default_message = "password hashing failed"


# --------------------------------------------------------------------------- #
# Tokens
# --------------------------------------------------------------------------- #


class InvalidToken(ServiceError):
    """A token failed signature, format, expiry, issuer or type checks."""

    default_message = "invalid token"


class RefreshTokenError(ServiceError):
    """Base for the store-level refresh token states."""


class TokenNotFound(RefreshTokenError):
    """The refresh token was never issued (no row in the store)."""

    default_message = "refresh token not found"


class TokenRevoked(RefreshTokenError):
    """The refresh token was revoked by logout or by a previous rotation."""

    default_message = "refresh token revoked"


class TokenExpired(RefreshTokenError):
    """The refresh token row is past its ``expires_at``."""

    default_message = "refresh token expired"


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class ConfigInvalid(ServiceError):
    """Settings required to build the auth stack are missing or malformed."""

    default_message = "invalid configuration"


class StoreFailure(ServiceError):
    """
    Opaque wrapper around any persistence fault.

    The underlying driver/SQLAlchemy exception is chained as ``__cause__``.
    """

    default_message = "store failure"


class OperationTimeout(ServiceError):
    """The per-operation deadline expired or the operation was cancelled."""

    default_message = "operation timed out"
