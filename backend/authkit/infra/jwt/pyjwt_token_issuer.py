# authkit/infra/jwt/pyjwt_token_issuer.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from authkit.services._shared.errors import ConfigInvalid, InvalidToken
from authkit.services._shared.ports import TokenClaims, TokenIssuer, TokenSubject

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

_REQUIRED_CLAIMS = ["exp", "iat", "iss", "sub", "jti"]


@dataclass(frozen=True, slots=True)
class JWTTokenIssuer(TokenIssuer):
    """
    HS256 token issuer built on PyJWT.

    Access and refresh tokens are signed with different secrets and carry a
    ``type`` claim, so a token of one kind never verifies as the other.

    :ivar access_secret: Key for access tokens.
    :ivar refresh_secret: Key for refresh tokens.
    :ivar issuer: ``iss`` claim written and required.
    :ivar access_ttl: Access token lifetime.
    :ivar refresh_ttl: Refresh token lifetime.
    :ivar algorithm: JWS algorithm.
    :ivar leeway: Clock skew tolerated when checking ``exp``/``iat``.
    """

    access_secret: str
    refresh_secret: str
    issuer: str = "authkit"
    access_ttl: timedelta = timedelta(minutes=30)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    leeway: timedelta = timedelta(seconds=0)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ConfigInvalid("access and refresh signing keys are required")
        if self.access_secret == self.refresh_secret:
            raise ConfigInvalid("access and refresh signing keys must differ")
        if self.access_ttl <= timedelta(0) or self.refresh_ttl <= timedelta(0):
            raise ConfigInvalid("token lifetimes must be positive")

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> JWTTokenIssuer:
        """Build from the mapping returned by ``validate_auth_settings``."""
        return cls(
            access_secret=settings["access_secret"],
            refresh_secret=settings["refresh_secret"],
            issuer=settings["issuer"],
            access_ttl=settings["access_ttl"],
            refresh_ttl=settings["refresh_ttl"],
        )

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue_access_token(self, user: TokenSubject) -> str:
        return self._encode(user, self.access_secret, self.access_ttl, ACCESS_TOKEN_TYPE)

    def issue_refresh_token(self, user: TokenSubject) -> str:
        return self._encode(user, self.refresh_secret, self.refresh_ttl, REFRESH_TOKEN_TYPE)

    def _encode(self, user: TokenSubject, key: str, ttl: timedelta, token_type: str) -> str:
        user_id = str(user.id)
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": user_id,
            "user_id": user_id,
            "email": user.email,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            # Unique per token: two tokens minted in the same second never collide.
            "jti": uuid4().hex,
            "type": token_type,
        }
        return jwt.encode(payload, key, algorithm=self.algorithm)

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify_access_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> TokenClaims:
        return self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)

    def _decode(self, token: str, key: str, expected_type: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidToken("token is empty")
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidToken("token expired") from exc
        except jwt.PyJWTError as exc:
            raise InvalidToken(f"token rejected: {exc}") from exc

        if payload.get("type") != expected_type:
            raise InvalidToken(f"{expected_type} token required")

        return TokenClaims(
            user_id=str(payload.get("user_id") or payload["sub"]),
            email=str(payload.get("email", "")),
            issuer=str(payload["iss"]),
            subject=str(payload["sub"]),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            token_id=str(payload["jti"]),
        )
