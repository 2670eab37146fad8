"""Authentication lifecycle service."""

from authkit.services.auth.dto import AuthPrincipal, TokenPairOut, UserProfileOut
from authkit.services.auth.service import AuthService

__all__ = ["AuthService", "AuthPrincipal", "TokenPairOut", "UserProfileOut"]
