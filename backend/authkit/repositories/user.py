"""User repository implementing the ``UserStore`` port."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from authkit.models.user import User
from authkit.repositories.base import BaseRepository, store_operation
from authkit.services._shared.errors import EmailAlreadyExists, NotFoundError, violates


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Emails are matched exactly as stored. Password hashing happens before the
    repository is called; it only ever sees the hash.
    """

    model = User

    @store_operation("users.email_exists")
    def email_exists(self, email: str) -> bool:
        """Return ``True`` when a user with exactly this email exists."""
        stmt = select(User.id).where(User.email == email).limit(1)
        return self.session.execute(stmt).first() is not None

    @store_operation("users.find_by_email")
    def find_by_email(self, email: str) -> User:
        """Fetch a user by email.

        :raises NotFoundError: When no user has this email.
        """
        user = self.find_one(User.email == email)
        if user is None:
            raise NotFoundError("User", email)
        return user

    @store_operation("users.find_by_id")
    def find_by_id(self, user_id: str) -> User:
        """Fetch a user by id.

        :raises NotFoundError: When the id is unknown.
        """
        user = self.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @store_operation("users.insert_user")
    def insert_user(self, *, email: str, password_hash: str) -> User:
        """Insert a user and flush so ``id`` is assigned.

        :raises EmailAlreadyExists: When a concurrent insert won the unique email race.
        """
        user = User(email=email, password_hash=password_hash)
        try:
            return self.add(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email"):
                raise EmailAlreadyExists() from exc
            raise
