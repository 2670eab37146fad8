# authkit/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from authkit.services._shared.errors import HashingFailure
from authkit.services._shared.ports import PasswordHasher


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adapter over :mod:`werkzeug.security`.

    Output looks like ``scrypt:32768:8:1$<salt>$<hex digest>``: method, cost
    factors and salt travel with the hash, so verification needs no settings.

    :ivar method: Werkzeug method string (``"scrypt"``, ``"pbkdf2:sha256:600000"``...).
    :ivar salt_length: Number of salt characters.
    """

    method: str = "scrypt"
    salt_length: int = 16

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise HashingFailure("password must be a non-empty string")
        try:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=self.salt_length
            )
        except (ValueError, TypeError) as exc:
            raise HashingFailure(f"password hashing failed ({self.method})") from exc

    def verify(self, hashed: str, plaintext: str) -> bool:
        if not hashed or not isinstance(plaintext, str):
            return False
        try:
            return bool(check_password_hash(hashed, plaintext))
        except (ValueError, TypeError):
            # Unknown method or corrupted hash: treat as a mismatch.
            return False
