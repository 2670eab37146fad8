"""Refresh token repository implementing the ``RefreshTokenStore`` port."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select, update

from authkit.models.refresh_token import RefreshToken, as_utc
from authkit.repositories.base import BaseRepository, store_operation
from authkit.services._shared.errors import TokenExpired, TokenNotFound, TokenRevoked


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    @store_operation("refresh_tokens.insert")
    def insert_refresh_token(
        self, *, user_id: str, token: str, expires_at: datetime
    ) -> RefreshToken:
        """Persist a freshly issued, non-revoked refresh token."""
        row = RefreshToken(
            user_id=user_id,
            token=token,
            expires_at=as_utc(expires_at),
            revoked=False,
        )
        return self.add(row)

    @store_operation("refresh_tokens.get_by_token")
    def get_by_token(self, token: str) -> RefreshToken | None:
        return self.find_one(RefreshToken.token == token)

    @store_operation("refresh_tokens.validate")
    def validate_refresh_token(self, token: str) -> None:
        """Check existence, then revocation, then expiry.

        :raises TokenNotFound: No row for the token.
        :raises TokenRevoked: Row is revoked.
        :raises TokenExpired: Row is past ``expires_at``.
        """
        stmt = select(RefreshToken.revoked, RefreshToken.expires_at).where(
            RefreshToken.token == token
        )
        row = self.session.execute(stmt).first()
        if row is None:
            raise TokenNotFound()
        revoked, expires_at = row
        if revoked:
            raise TokenRevoked()
        if datetime.now(UTC) > as_utc(expires_at):
            raise TokenExpired()

    @store_operation("refresh_tokens.revoke")
    def revoke_refresh_token(self, token: str) -> None:
        """Flip ``revoked`` to ``True`` with a single conditional UPDATE.

        The ``revoked = false`` predicate makes the statement the double-spend
        guard: of two transactions revoking the same row, the second one
        re-evaluates the predicate after the first commits and updates nothing.

        :raises TokenNotFound: The token was never issued.
        :raises TokenRevoked: The token was already revoked.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount:
            return
        exists = self.session.execute(
            select(RefreshToken.id).where(RefreshToken.token == token)
        ).first()
        if exists is None:
            raise TokenNotFound()
        raise TokenRevoked()
