"""Authentication schemas."""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from ..models import ArtisanStatus, UserRole, UserStatus
from .common import BaseSchema

CODE_PATTERN = r"^\d{4,10}$"


class UserRegister(BaseSchema):
    """Customer registration schema."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, max_length=128, description="User password")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    phone_number: Optional[str] = Field(None, max_length=32, description="Phone number")
    role: UserRole = Field(default=UserRole.CUSTOMER, description="Requested role")
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)


class ArtisanProfileCreate(BaseSchema):
    """Business details supplied when registering as an artisan."""

    business_name: str = Field(..., min_length=1, max_length=255)
    business_license: str = Field(..., min_length=1, max_length=100)
    tax_id: Optional[str] = Field(None, max_length=100)
    service_categories: List[str] = Field(..., min_length=1, description="Offered services")
    service_areas: List[str] = Field(..., min_length=1, description="Areas served")
    description: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    years_of_experience: Optional[int] = Field(None, ge=0)
    qualifications: List[str] = Field(default_factory=list)
    insurance_info: Optional[str] = None
    working_hours: Optional[str] = Field(None, max_length=255)
    max_job_distance: int = Field(default=50, ge=1)


class ArtisanRegister(UserRegister, ArtisanProfileCreate):
    """Artisan registration schema: user fields plus business details."""

    role: UserRole = Field(default=UserRole.ARTISAN, description="Always ARTISAN")

    def user_fields(self) -> UserRegister:
        data = self.model_dump(include=set(UserRegister.model_fields))
        data["role"] = UserRole.ARTISAN
        return UserRegister(**data)

    def profile_fields(self) -> ArtisanProfileCreate:
        return ArtisanProfileCreate(**self.model_dump(include=set(ArtisanProfileCreate.model_fields)))


class RegistrationResponse(BaseSchema):
    """Registration result; the account still needs verifying."""

    id: uuid.UUID = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User email")
    artisan_id: Optional[uuid.UUID] = Field(None, description="Artisan profile ID")
    message: str = Field(
        default="Registration successful. Please verify your email using the code sent to your email."
    )


class VerifyEmailRequest(BaseSchema):
    user_id: uuid.UUID = Field(..., description="User ID")
    code: str = Field(..., pattern=CODE_PATTERN, description="Verification code")


class ArtisanVerifyRequest(BaseSchema):
    artisan_id: uuid.UUID = Field(..., description="Artisan profile ID")
    code: str = Field(..., pattern=CODE_PATTERN, description="Verification code")


class ResendCodeRequest(BaseSchema):
    user_id: uuid.UUID = Field(..., description="User ID")


class ArtisanResendCodeRequest(BaseSchema):
    artisan_id: uuid.UUID = Field(..., description="Artisan profile ID")


class ArtisanResponse(BaseSchema):
    """Artisan profile projection."""

    id: uuid.UUID
    business_name: str
    business_license: str
    tax_id: Optional[str] = None
    service_categories: List[str]
    service_areas: List[str]
    status: ArtisanStatus
    verification_date: Optional[datetime] = None
    rating: Optional[float] = None
    total_ratings: int
    is_available: bool
    hourly_rate: Optional[float] = None
    max_job_distance: int


class UserResponse(BaseSchema):
    """Safe user projection; never carries the password hash."""

    id: uuid.UUID = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User email address")
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: UserRole
    status: UserStatus
    is_email_verified: bool
    profile_picture: Optional[str] = None
    last_login: Optional[datetime] = Field(None, description="Last login time")
    created_at: datetime = Field(..., description="Account creation time")
    artisan: Optional[ArtisanResponse] = None


class LoginRequest(BaseSchema):
    """Login request schema."""

    email: EmailStr = Field(..., description="User email")
    password: str = Field(..., description="User password")


class TokenResponse(BaseSchema):
    """Token response schema."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse = Field(..., description="User information")


class RefreshTokenRequest(BaseSchema):
    """Refresh token request schema."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class LogoutRequest(BaseSchema):
    refresh_token: str = Field(..., min_length=1, description="Refresh token to revoke")


class PasswordChangeRequest(BaseSchema):
    """Password change request schema."""

    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=8, max_length=128, description="New password")


class PasswordResetRequest(BaseSchema):
    """Password reset request schema."""

    email: EmailStr = Field(..., description="User email")


class PasswordResetConfirm(BaseSchema):
    """Password reset confirmation schema."""

    token: str = Field(..., min_length=1, description="Reset token")
    new_password: str = Field(..., min_length=8, max_length=128, description="New password")


class UserStatusUpdate(BaseSchema):
    status: UserStatus


class ArtisanStatusUpdate(BaseSchema):
    status: ArtisanStatus
