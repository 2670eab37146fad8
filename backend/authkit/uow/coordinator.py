"""Transaction coordinator: run a unit of work atomically."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from authkit.services._shared.deadline import Deadline
from authkit.uow.base import UnitOfWork
from authkit.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

T = TypeVar("T")


class TransactionCoordinator:
    """
    Execute work functions inside units of work.

    :param uow_factory: Builds the read-write UoW used by :meth:`run_in_transaction`.
    :param ro_uow_factory: Builds the read-only UoW used by :meth:`run_read`.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow_factory: Callable[[], UnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._uow_factory = uow_factory
        self._ro_uow_factory = ro_uow_factory

    def run_in_transaction(
        self, work: Callable[[UnitOfWork], T], *, deadline: Deadline | None = None
    ) -> T:
        """
        Run ``work`` atomically and return its result.

        Commits when ``work`` returns and the deadline still holds; rolls back
        when ``work`` raises (anything, including ``BaseException``) or the
        deadline expired before commit. The exception always propagates.

        :raises OperationTimeout: When the deadline expires before begin or commit.
        """
        if deadline is not None:
            deadline.check("begin")
        with self._uow_factory() as uow:
            result = work(uow)
            if deadline is not None:
                deadline.check("commit")
            return result

    def run_read(self, work: Callable[[UnitOfWork], T], *, deadline: Deadline | None = None) -> T:
        """Run ``work`` in a read-only scope that is always rolled back."""
        if deadline is not None:
            deadline.check("read")
        with self._ro_uow_factory() as uow:
            return work(uow)
