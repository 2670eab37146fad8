"""User model definition."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from authkit.core.extensions import db

from .base import PublicIdPKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken


class User(PublicIdPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    id : str
        Opaque identifier assigned on insert.
    email : str
        Login email, unique and compared exactly as stored.
    password_hash : str
        Self-describing password hash produced by the password hasher. The
        plaintext never reaches this model.
    created_at, updated_at : datetime
        Timestamps set by the database (from mixin).
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        lazy="select",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Reject empty emails; the value is otherwise stored verbatim.

        :raises ValueError: If email is missing or has no ``@``.
        """
        if not value or not isinstance(value, str) or "@" not in value:
            raise ValueError("Email is required.")
        return value

    @validates("password_hash")
    def _validate_password_hash(self, key: str, value: str) -> str:
        if not value or not isinstance(value, str):
            raise ValueError("Password hash is required.")
        return value
