"""
authkit.services._shared.ports
==============================

*Ports* (hexagonal interfaces) the auth service depends on.

Modules
-------
- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`: one-way hashing and verification.

- :mod:`token_issuer`:
    Defines :class:`~.TokenIssuer` and :class:`~.TokenClaims`: signed token
    creation and verification.

- :mod:`token_store`:
    Defines :class:`~.UserStore` and :class:`~.RefreshTokenStore`: the
    persistence contract exposed by a unit of work.

Concrete adapters live under ``authkit.infra`` and ``authkit.repositories``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .token_issuer import TokenClaims, TokenIssuer, TokenSubject
from .token_store import RefreshTokenStore, UserStore

__all__ = [
    "PasswordHasher",
    "TokenClaims",
    "TokenIssuer",
    "TokenSubject",
    "RefreshTokenStore",
    "UserStore",
]
