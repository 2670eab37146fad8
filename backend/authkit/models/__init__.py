from authkit.models.refresh_token import RefreshToken
from authkit.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
