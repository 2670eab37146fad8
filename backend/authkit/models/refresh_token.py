"""Refresh token model: durable record of every issued refresh token."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from authkit.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (SQLite hands back naive values)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Issued refresh token.

    Rows are kept after revocation or expiry as an audit trail. ``revoked``
    moves from ``False`` to ``True`` exactly once.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(1024), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return ``True`` once ``now`` is strictly after ``expires_at``."""
        current = now or datetime.now(UTC)
        return current > as_utc(self.expires_at)
