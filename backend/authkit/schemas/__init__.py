"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, RegisterSchema, TokenPairSchema, TokenSchema
from .user import UserProfileSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "TokenSchema",
    "UserProfileSchema",
]
