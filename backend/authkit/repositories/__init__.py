"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from authkit.repositories.base import BaseRepository, store_operation
from authkit.repositories.refresh_token import RefreshTokenRepository
from authkit.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "store_operation",
    "RefreshTokenRepository",
    "UserRepository",
]
