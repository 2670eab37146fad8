# authkit/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT, also recorded in the token store.
    :type refresh_token: str
    :param token_type: Authorization scheme for the access token.
    :type token_type: str
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """
    Public view of a user. Never carries the password hash.

    :param id: User identifier.
    :param email: Email exactly as stored.
    :param created_at: Creation timestamp.
    :param updated_at: Last update timestamp.
    """

    id: str
    email: str
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_user(cls, user: Any) -> UserProfileOut:
        return cls(
            id=str(user.id),
            email=user.email,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


# ------------------------- Internal snapshots ------------------------------ #


@dataclass(frozen=True, slots=True)
class AuthPrincipal:
    """
    Detached snapshot of the fields the auth flows need from a user row.

    Taken inside a unit of work so nothing touches expired ORM state after
    the scope closes. Satisfies the ``TokenSubject`` port.
    """

    id: str
    email: str
    password_hash: str

    @classmethod
    def from_user(cls, user: Any) -> AuthPrincipal:
        return cls(id=str(user.id), email=user.email, password_hash=user.password_hash)
