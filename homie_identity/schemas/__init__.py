"""Pydantic schemas module."""
from .common import BaseSchema, ErrorResponse, HealthResponse, SuccessResponse
from .auth import (
    ArtisanProfileCreate,
    ArtisanRegister,
    ArtisanResendCodeRequest,
    ArtisanResponse,
    ArtisanStatusUpdate,
    ArtisanVerifyRequest,
    LoginRequest,
    LogoutRequest,
    PasswordChangeRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    RefreshTokenRequest,
    RegistrationResponse,
    ResendCodeRequest,
    TokenResponse,
    UserRegister,
    UserResponse,
    UserStatusUpdate,
    VerifyEmailRequest,
)
from .oauth import OAuthProfile

__all__ = [
    # Common
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    # Auth
    "ArtisanProfileCreate",
    "ArtisanRegister",
    "ArtisanResendCodeRequest",
    "ArtisanResponse",
    "ArtisanStatusUpdate",
    "ArtisanVerifyRequest",
    "LoginRequest",
    "LogoutRequest",
    "PasswordChangeRequest",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "RefreshTokenRequest",
    "RegistrationResponse",
    "ResendCodeRequest",
    "TokenResponse",
    "UserRegister",
    "UserResponse",
    "UserStatusUpdate",
    "VerifyEmailRequest",
    # OAuth
    "OAuthProfile",
]
