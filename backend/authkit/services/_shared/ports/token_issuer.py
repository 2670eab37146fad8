from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol


class TokenSubject(Protocol):
    """Anything tokens can be issued for (ORM ``User`` or :class:`AuthPrincipal`)."""

    @property
    def id(self) -> str: ...

    @property
    def email(self) -> str: ...


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Claims reconstructed from a verified token. Never persisted.

    :ivar user_id: Owning user id.
    :ivar email: User email at issuance time.
    :ivar issuer: ``iss`` claim.
    :ivar subject: ``sub`` claim (the user id).
    :ivar issued_at: ``iat`` as aware UTC datetime.
    :ivar expires_at: ``exp`` as aware UTC datetime.
    :ivar token_id: ``jti`` claim, unique per issued token.
    """

    user_id: str
    email: str
    issuer: str
    subject: str
    issued_at: datetime
    expires_at: datetime
    token_id: str


class TokenIssuer(Protocol):
    """
    Port for creating and verifying signed, time-bounded tokens.

    Access and refresh tokens are signed with different keys. Verification
    checks signature, expiry, issuer and token type only; it never consults the
    refresh token store.
    """

    refresh_ttl: timedelta

    def issue_access_token(self, user: TokenSubject) -> str: ...

    def issue_refresh_token(self, user: TokenSubject) -> str: ...

    def verify_access_token(self, token: str) -> TokenClaims: ...

    def verify_refresh_token(self, token: str) -> TokenClaims: ...
