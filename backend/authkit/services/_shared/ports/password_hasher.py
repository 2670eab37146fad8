from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations must salt every hash, use a deliberately expensive
    function, and produce self-describing output (method, cost and salt are
    embedded) so :meth:`verify` needs nothing but the stored value.
    """

    def hash(self, plaintext: str) -> str:
        """Hash ``plaintext``. :raises HashingFailure: When hashing is impossible."""
        ...

    def verify(self, hashed: str, plaintext: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``; never raises on mismatch."""
        ...
