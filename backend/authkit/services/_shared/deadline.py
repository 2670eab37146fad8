"""Per-operation deadlines with cooperative cancellation."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta

from authkit.services._shared.errors import OperationTimeout


@dataclass(slots=True)
class Deadline:
    """
    Monotonic deadline shared by all steps of one auth operation.

    The service checks it between store round-trips, around password hashing
    and right before commit; a check past the deadline (or after
    :meth:`cancel`) raises :class:`OperationTimeout`, which rolls back any open
    unit of work.

    :ivar expires_at: ``time.monotonic()`` value after which the deadline is expired.
    """

    expires_at: float
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def after(cls, timeout: timedelta | float) -> Deadline:
        """Build a deadline ``timeout`` from now (``timedelta`` or seconds)."""
        seconds = timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
        return cls(expires_at=time.monotonic() + seconds)

    def remaining(self) -> float:
        """Seconds left before expiry (negative once expired)."""
        return self.expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        return self._cancelled.is_set() or self.remaining() <= 0

    def cancel(self) -> None:
        """Signal cancellation; the next :meth:`check` raises."""
        self._cancelled.set()

    def check(self, step: str) -> None:
        """
        Raise if the operation must stop before ``step``.

        :param step: Name of the step about to run (for the error message).
        :raises OperationTimeout: When cancelled or past the deadline.
        """
        if self._cancelled.is_set():
            raise OperationTimeout(f"operation cancelled before {step}")
        if self.remaining() <= 0:
            raise OperationTimeout(f"deadline exceeded before {step}")
