"""In-memory store and unit of work doubles for thread-level tests.

Read-write scopes are serialized by one lock and restore a snapshot on
rollback, which mirrors a store with row locks on the refresh token row.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from authkit.services._shared.errors import (
    EmailAlreadyExists,
    NotFoundError,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
)
from authkit.uow.base import UnitOfWork


@dataclass
class FakeUser:
    email: str
    password_hash: str
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class FakeRefreshToken:
    user_id: str
    token: str
    expires_at: datetime
    revoked: bool = False


@dataclass
class FakeState:
    users: dict[str, FakeUser] = field(default_factory=dict)
    tokens: dict[str, FakeRefreshToken] = field(default_factory=dict)


class InMemoryDatabase:
    """Shared state plus the write lock."""

    def __init__(self) -> None:
        self.state = FakeState()
        self.write_lock = threading.Lock()
        self.commits = 0
        self.rollbacks = 0
        # Called after every successful validate_refresh_token.
        self.after_validate: Callable[[], None] = lambda: None


class FakeUserStore:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def email_exists(self, email: str) -> bool:
        return any(u.email == email for u in self._db.state.users.values())

    def find_by_email(self, email: str) -> FakeUser:
        for user in self._db.state.users.values():
            if user.email == email:
                return user
        raise NotFoundError("User", email)

    def find_by_id(self, user_id: str) -> FakeUser:
        try:
            return self._db.state.users[user_id]
        except KeyError:
            raise NotFoundError("User", user_id) from None

    def insert_user(self, *, email: str, password_hash: str) -> FakeUser:
        if self.email_exists(email):
            raise EmailAlreadyExists()
        user = FakeUser(email=email, password_hash=password_hash)
        self._db.state.users[user.id] = user
        return user


class FakeRefreshTokenStore:
    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def insert_refresh_token(self, *, user_id: str, token: str, expires_at: datetime):
        row = FakeRefreshToken(user_id=user_id, token=token, expires_at=expires_at)
        self._db.state.tokens[token] = row
        return row

    def validate_refresh_token(self, token: str) -> None:
        row = self._db.state.tokens.get(token)
        if row is None:
            raise TokenNotFound()
        if row.revoked:
            raise TokenRevoked()
        if datetime.now(UTC) > row.expires_at:
            raise TokenExpired()
        self._db.after_validate()

    def revoke_refresh_token(self, token: str) -> None:
        row = self._db.state.tokens.get(token)
        if row is None:
            raise TokenNotFound()
        if row.revoked:
            raise TokenRevoked()
        row.revoked = True


class InMemoryUnitOfWork(UnitOfWork):
    """Read-write scope: takes the write lock and snapshots state for rollback."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db
        self._snapshot: FakeState | None = None
        self.users = FakeUserStore(db)
        self.refresh_tokens = FakeRefreshTokenStore(db)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._db.write_lock.acquire()
        self._snapshot = copy.deepcopy(self._db.state)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._db.write_lock.release()

    def commit(self) -> None:
        self._db.commits += 1
        self._snapshot = None

    def rollback(self) -> None:
        if self._snapshot is not None:
            self._db.state = self._snapshot
            self._snapshot = None
        self._db.rollbacks += 1


class InMemoryReadOnlyUnitOfWork(UnitOfWork):
    """Read scope: no lock, no writes expected."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self.users = FakeUserStore(db)
        self.refresh_tokens = FakeRefreshTokenStore(db)

    def __enter__(self) -> InMemoryReadOnlyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def commit(self) -> None:
        raise RuntimeError("read-only")

    def rollback(self) -> None:
        return None
