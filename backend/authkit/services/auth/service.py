# authkit/services/auth/service.py
from __future__ import annotations

import logging
from datetime import timedelta

from authkit.services._shared.base import DEFAULT_OPERATION_TIMEOUT, BaseService
from authkit.services._shared.deadline import Deadline
from authkit.services._shared.errors import (
    ConfigInvalid,
    EmailAlreadyExists,
    InvalidEmailOrPassword,
    InvalidToken,
    NotFoundError,
)
from authkit.services._shared.ports import PasswordHasher, TokenIssuer, TokenSubject
from authkit.services.auth.dto import AuthPrincipal, TokenPairOut, UserProfileOut
from authkit.uow.base import UnitOfWork
from authkit.uow.coordinator import TransactionCoordinator

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Credential and session lifecycle: register, login, refresh, logout, profile.

    Every mutation runs through the :class:`TransactionCoordinator`, so a user
    row is never committed without its refresh token and a rotation never
    leaves both the old and the new refresh token current. Reads that only
    decide whether to proceed run in read-only scopes.

    Store and issuer errors propagate unchanged. The only collapse is in
    :meth:`login`, where an unknown email and a wrong password both raise
    :class:`InvalidEmailOrPassword`.
    """

    def __init__(
        self,
        *,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        coordinator: TransactionCoordinator | None = None,
        refresh_ttl: timedelta | None = None,
        operation_timeout: timedelta = DEFAULT_OPERATION_TIMEOUT,
    ) -> None:
        """
        :param hasher: One-way password hasher.
        :param issuer: Signs and verifies access/refresh tokens.
        :param coordinator: Unit-of-work runner.
        :param refresh_ttl: Lifetime recorded in the store for new refresh
            tokens; defaults to the issuer's refresh lifetime.
        :param operation_timeout: Deadline for each operation.
        :raises ConfigInvalid: On non-positive durations.
        """
        super().__init__(coordinator=coordinator, operation_timeout=operation_timeout)
        self.hasher = hasher
        self.issuer = issuer
        self.refresh_ttl = refresh_ttl if refresh_ttl is not None else issuer.refresh_ttl
        if self.refresh_ttl <= timedelta(0):
            raise ConfigInvalid("refresh token lifetime must be positive")

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, email: str, password: str, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Create a user and issue its first token pair.

        The pre-check gives the common duplicate case a clean error; the
        unique constraint still turns a concurrent duplicate insert into
        :class:`EmailAlreadyExists` and rolls the whole transaction back.

        :raises EmailAlreadyExists: If the email is taken.
        :raises HashingFailure: If the password cannot be hashed.
        """
        dl = self.start_deadline(deadline)

        if self.coordinator.run_read(lambda uow: uow.users.email_exists(email), deadline=dl):
            log.info("auth.register.conflict", extra={"operation": "register"})
            raise EmailAlreadyExists()

        dl.check("hash password")
        password_hash = self.hasher.hash(password)
        dl.check("insert user")

        def work(uow: UnitOfWork) -> tuple[str, TokenPairOut]:
            user = uow.users.insert_user(email=email, password_hash=password_hash)
            principal = AuthPrincipal.from_user(user)
            return principal.id, self._issue_pair(uow, principal, dl)

        user_id, pair = self.coordinator.run_in_transaction(work, deadline=dl)
        log.info("auth.register", extra={"operation": "register", "user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, email: str, password: str, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Verify credentials and issue a new token pair.

        :raises InvalidEmailOrPassword: For an unknown email or a wrong password alike.
        """
        dl = self.start_deadline(deadline)

        def load(uow: UnitOfWork) -> AuthPrincipal | None:
            try:
                return AuthPrincipal.from_user(uow.users.find_by_email(email))
            except NotFoundError:
                return None

        principal = self.coordinator.run_read(load, deadline=dl)
        if principal is None:
            log.info("auth.login.failed", extra={"operation": "login", "error": "unknown_email"})
            raise InvalidEmailOrPassword()

        dl.check("verify password")
        if not self.hasher.verify(principal.password_hash, password):
            log.info(
                "auth.login.failed",
                extra={"operation": "login", "user_id": principal.id, "error": "bad_password"},
            )
            raise InvalidEmailOrPassword()

        pair = self.coordinator.run_in_transaction(
            lambda uow: self._issue_pair(uow, principal, dl), deadline=dl
        )
        log.info("auth.login", extra={"operation": "login", "user_id": principal.id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh (rotation)
    # ------------------------------------------------------------------ #

    def refresh_token(
        self,
        token: str,
        *,
        actor_id: str | None = None,
        deadline: Deadline | None = None,
    ) -> TokenPairOut:
        """
        Rotate ``token``: revoke it and issue a new pair in one transaction.

        The stored state is checked first so its three outcomes surface
        unchanged. The signature is then verified with the refresh key and the
        owner is taken from the refresh token claims. When the transport layer
        also authenticated the caller, ``actor_id`` must name the same user.

        Of two concurrent rotations of the same token, the second one's
        conditional revoke matches no row and raises :class:`TokenRevoked`.

        :param token: Refresh token presented by the client.
        :param actor_id: Verified caller id from an access token, if any.
        :raises TokenNotFound: The token was never issued.
        :raises TokenRevoked: The token was already rotated or logged out.
        :raises TokenExpired: The stored token is past its expiry.
        :raises InvalidToken: Bad signature, or owned by a different actor.
        :raises NotFoundError: The owning user no longer exists.
        """
        dl = self.start_deadline(deadline)

        self.coordinator.run_read(
            lambda uow: uow.refresh_tokens.validate_refresh_token(token), deadline=dl
        )
        claims = self.issuer.verify_refresh_token(token)
        if actor_id is not None and str(actor_id) != claims.user_id:
            log.warning(
                "auth.refresh.actor_mismatch",
                extra={"operation": "refresh", "user_id": str(actor_id)},
            )
            raise InvalidToken("refresh token belongs to a different user")

        principal = self.coordinator.run_read(
            lambda uow: AuthPrincipal.from_user(uow.users.find_by_id(claims.user_id)),
            deadline=dl,
        )

        def rotate(uow: UnitOfWork) -> TokenPairOut:
            uow.refresh_tokens.revoke_refresh_token(token)
            return self._issue_pair(uow, principal, dl)

        pair = self.coordinator.run_in_transaction(rotate, deadline=dl)
        log.info("auth.refresh", extra={"operation": "refresh", "user_id": principal.id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, token: str, *, deadline: Deadline | None = None) -> None:
        """
        Revoke a refresh token.

        :raises TokenNotFound: The token was never issued.
        :raises TokenRevoked: The token is already revoked.
        """
        dl = self.start_deadline(deadline)
        self.coordinator.run_in_transaction(
            lambda uow: uow.refresh_tokens.revoke_refresh_token(token), deadline=dl
        )
        log.info("auth.logout", extra={"operation": "logout"})

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def get_profile(self, *, actor_id: str, deadline: Deadline | None = None) -> UserProfileOut:
        """:raises NotFoundError: When the actor no longer exists."""
        dl = self.start_deadline(deadline)
        return self.coordinator.run_read(
            lambda uow: UserProfileOut.from_user(uow.users.find_by_id(actor_id)), deadline=dl
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _issue_pair(self, uow: UnitOfWork, subject: TokenSubject, dl: Deadline) -> TokenPairOut:
        """Sign both tokens and record the refresh one inside ``uow``."""
        access = self.issuer.issue_access_token(subject)
        refresh = self.issuer.issue_refresh_token(subject)
        dl.check("store refresh token")
        uow.refresh_tokens.insert_refresh_token(
            user_id=subject.id,
            token=refresh,
            expires_at=self.now_utc() + self.refresh_ttl,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh)
