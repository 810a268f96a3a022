"""Authentication routes."""
from fastapi import APIRouter, Depends, status

from ...core.security import get_current_user, get_services
from ...models.user import User
from ...schemas.auth import (
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
    VerifyEmailRequest,
)
from ...schemas.common import SuccessResponse
from ...services import AuthSession, IdentityServices

router = APIRouter(prefix="/auth", tags=["Authentication"])


def token_response(session: AuthSession) -> TokenResponse:
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
        user=UserResponse.model_validate(session.user),
    )


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    user_register: UserRegister,
    services: IdentityServices = Depends(get_services)
):
    """Register a new customer and send a verification code."""
    registration = await services.verification.register(user_register)
    return RegistrationResponse(id=registration.user.id, email=registration.user.email)


@router.post("/verify", response_model=SuccessResponse)
async def verify_email(
    verify_request: VerifyEmailRequest,
    services: IdentityServices = Depends(get_services)
):
    """Verify an email address with the emailed code."""
    await services.verification.verify(verify_request.user_id, verify_request.code)
    return SuccessResponse(message="Email successfully verified")


@router.post("/resend-code", response_model=SuccessResponse)
async def resend_verification_code(
    resend_request: ResendCodeRequest,
    services: IdentityServices = Depends(get_services)
):
    """Issue a fresh verification code, invalidating earlier ones."""
    await services.verification.resend_code(resend_request.user_id)
    return SuccessResponse(message="Verification code resent successfully")


@router.post("/login", response_model=TokenResponse)
async def login_user(
    login_request: LoginRequest,
    services: IdentityServices = Depends(get_services)
):
    """Login user and return tokens."""
    session = await services.sessions.login(login_request.email, login_request.password)
    return token_response(session)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_request: RefreshTokenRequest,
    services: IdentityServices = Depends(get_services)
):
    """Rotate a refresh token and return a new token pair."""
    session = await services.sessions.refresh_access_token(refresh_request.refresh_token)
    return token_response(session)


@router.post("/logout", response_model=SuccessResponse)
async def logout_user(
    logout_request: LogoutRequest,
    services: IdentityServices = Depends(get_services)
):
    """Revoke a refresh token."""
    await services.sessions.logout(logout_request.refresh_token)
    return SuccessResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password(
    reset_request: PasswordResetRequest,
    services: IdentityServices = Depends(get_services)
):
    """Send a password reset link if the account exists."""
    await services.password_reset.forgot_password(reset_request.email)
    return SuccessResponse(
        message="If an account exists for this email, password reset instructions were sent"
    )


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password(
    reset_confirm: PasswordResetConfirm,
    services: IdentityServices = Depends(get_services)
):
    """Set a new password with a reset token."""
    await services.password_reset.reset_password(reset_confirm.token, reset_confirm.new_password)
    return SuccessResponse(message="Password reset successful")


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)


@router.post("/change-password", response_model=SuccessResponse)
async def change_password(
    password_change: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    services: IdentityServices = Depends(get_services)
):
    """Change user password."""
    await services.password_reset.change_password(
        current_user.id,
        password_change.current_password,
        password_change.new_password,
    )
    return SuccessResponse(message="Password changed successfully")
