"""Artisan account routes."""
from fastapi import APIRouter, Depends, status

from ...core.security import artisan_required, get_services
from ...models import User, UserRole
from ...schemas.auth import (
    ArtisanRegister,
    ArtisanResendCodeRequest,
    ArtisanVerifyRequest,
    LoginRequest,
    RegistrationResponse,
    TokenResponse,
    UserResponse,
)
from ...schemas.common import SuccessResponse
from ...services import IdentityServices
from .auth import token_response

router = APIRouter(prefix="/artisans", tags=["Artisans"])


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_artisan(
    artisan_register: ArtisanRegister,
    services: IdentityServices = Depends(get_services)
):
    """Register an artisan with their business profile."""
    registration = await services.verification.register(
        artisan_register.user_fields(),
        artisan_register.profile_fields(),
    )
    return RegistrationResponse(
        id=registration.user.id,
        email=registration.user.email,
        artisan_id=registration.artisan.id,
    )


@router.post("/verify", response_model=SuccessResponse)
async def verify_artisan(
    verify_request: ArtisanVerifyRequest,
    services: IdentityServices = Depends(get_services)
):
    await services.verification.verify_artisan(verify_request.artisan_id, verify_request.code)
    return SuccessResponse(message="Artisan account successfully verified")


@router.post("/resend-code", response_model=SuccessResponse)
async def resend_artisan_code(
    resend_request: ArtisanResendCodeRequest,
    services: IdentityServices = Depends(get_services)
):
    await services.verification.resend_artisan_code(resend_request.artisan_id)
    return SuccessResponse(message="Verification code resent successfully")


@router.post("/login", response_model=TokenResponse)
async def login_artisan(
    login_request: LoginRequest,
    services: IdentityServices = Depends(get_services)
):
    """Login restricted to artisan accounts."""
    session = await services.sessions.login(
        login_request.email,
        login_request.password,
        required_role=UserRole.ARTISAN,
    )
    return token_response(session)


@router.get("/me", response_model=UserResponse)
async def get_artisan_profile(current_user: User = Depends(artisan_required)):
    return UserResponse.model_validate(current_user)
