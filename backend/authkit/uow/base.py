"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from authkit.services._shared.ports import RefreshTokenStore, UserStore


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Expose the stores bound to the same session/transaction.
    - Commit on clean exit, rollback on any exception, then let it propagate.
    """

    users: UserStore
    refresh_tokens: RefreshTokenStore

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
