from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol


class UserStore(Protocol):
    """
    Persistence contract for users, bound to one unit of work.

    Lookups raise :class:`~authkit.services._shared.errors.NotFoundError`
    instead of returning ``None``.
    """

    def email_exists(self, email: str) -> bool: ...

    def find_by_email(self, email: str) -> Any:
        """Return the user with exactly this email. :raises NotFoundError:"""
        ...

    def find_by_id(self, user_id: str) -> Any:
        """Return the user with this id. :raises NotFoundError:"""
        ...

    def insert_user(self, *, email: str, password_hash: str) -> Any:
        """
        Insert a user; the store assigns ``id``, ``created_at`` and ``updated_at``.

        :raises EmailAlreadyExists: When the unique email constraint fires.
        """
        ...


class RefreshTokenStore(Protocol):
    """
    Persistence contract for issued refresh tokens, bound to one unit of work.

    Rows are never deleted. ``revoked`` only ever moves from false to true.
    """

    def insert_refresh_token(self, *, user_id: str, token: str, expires_at: datetime) -> Any: ...

    def validate_refresh_token(self, token: str) -> None:
        """
        Check the stored state of ``token``, in this order.

        :raises TokenNotFound: No row for the token.
        :raises TokenRevoked: Row is revoked.
        :raises TokenExpired: Row is past ``expires_at``.
        """
        ...

    def revoke_refresh_token(self, token: str) -> None:
        """
        Mark ``token`` revoked.

        :raises TokenNotFound: Zero rows affected and the token does not exist.
        :raises TokenRevoked: Zero rows affected because it was already revoked.
        """
        ...
