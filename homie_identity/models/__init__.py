"""Database models module."""
from .base import Base
from .user import User, UserRole, UserStatus
from .artisan import Artisan, ArtisanStatus
from .tokens import RefreshToken, TokenPurpose, VerificationToken

__all__ = [
    "Base",
    "User",
    "UserRole",
    "UserStatus",
    "Artisan",
    "ArtisanStatus",
    "RefreshToken",
    "TokenPurpose",
    "VerificationToken",
]
