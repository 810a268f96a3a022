"""Administrative account routes."""
import uuid

from fastapi import APIRouter, Depends

from ...core.security import admin_required, get_services
from ...models import User, UserRole
from ...schemas.auth import (
    ArtisanResponse,
    ArtisanStatusUpdate,
    LoginRequest,
    TokenResponse,
    UserResponse,
    UserStatusUpdate,
)
from ...services import IdentityServices
from .auth import token_response

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=TokenResponse)
async def login_admin(
    login_request: LoginRequest,
    services: IdentityServices = Depends(get_services)
):
    """Login restricted to administrator accounts."""
    session = await services.sessions.login(
        login_request.email,
        login_request.password,
        required_role=UserRole.ADMIN,
    )
    return token_response(session)


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def change_user_status(
    user_id: uuid.UUID,
    status_update: UserStatusUpdate,
    current_user: User = Depends(admin_required),
    services: IdentityServices = Depends(get_services)
):
    """Suspend, reactivate or ban a user."""
    user = await services.accounts.change_user_status(user_id, status_update.status)
    return UserResponse.model_validate(user)


@router.patch("/artisans/{artisan_id}/status", response_model=ArtisanResponse)
async def change_artisan_status(
    artisan_id: uuid.UUID,
    status_update: ArtisanStatusUpdate,
    current_user: User = Depends(admin_required),
    services: IdentityServices = Depends(get_services)
):
    """Approve or reject an artisan's business profile."""
    artisan = await services.accounts.change_artisan_status(artisan_id, status_update.status)
    return ArtisanResponse.model_validate(artisan)
