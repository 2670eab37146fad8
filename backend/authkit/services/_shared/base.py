# authkit/services/_shared/base.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from authkit.services._shared.deadline import Deadline
from authkit.services._shared.errors import ConfigInvalid
from authkit.uow.coordinator import TransactionCoordinator

DEFAULT_OPERATION_TIMEOUT = timedelta(seconds=10)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the :class:`TransactionCoordinator` every store access goes through.
    * Start the per-operation :class:`Deadline`.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use the coordinator.
    - Identity is passed in explicitly (``actor_id``); services never read
      request-scoped globals.
    """

    def __init__(
        self,
        *,
        coordinator: TransactionCoordinator | None = None,
        operation_timeout: timedelta = DEFAULT_OPERATION_TIMEOUT,
    ) -> None:
        """
        Initialize the base service.

        :param coordinator: Runs units of work; a SQLAlchemy-backed one by default.
        :param operation_timeout: Deadline applied to each operation.
        :raises ConfigInvalid: If ``operation_timeout`` is not positive.
        """
        if operation_timeout <= timedelta(0):
            raise ConfigInvalid("operation timeout must be positive")
        self.coordinator = coordinator or TransactionCoordinator()
        self.operation_timeout = operation_timeout

    # -------------------------- Deadline helpers ----------------------------

    def start_deadline(self, deadline: Deadline | None = None) -> Deadline:
        """Return ``deadline`` when the caller supplied one, else a fresh default one."""
        if deadline is not None:
            return deadline
        return Deadline.after(self.operation_timeout)

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
