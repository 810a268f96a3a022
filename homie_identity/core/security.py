"""Request-scoped authentication dependencies."""
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.exceptions import BaseAPIException, ForbiddenError, InvalidCredentialError
from ..core.logging import SecurityLogger
from ..models import User, UserRole
from ..services import IdentityServices, ensure_can_authenticate

# Security scheme
security = HTTPBearer(auto_error=False)


def get_services(request: Request) -> IdentityServices:
    """Services wired for this application instance."""
    return request.app.state.services


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    services: IdentityServices = Depends(get_services),
) -> User:
    """Resolve the user behind a bearer access token."""
    try:
        if credentials is None:
            raise InvalidCredentialError("Could not validate credentials")

        payload = services.tokens.decode_access_token(credentials.credentials)
        try:
            user_id = uuid.UUID(payload["sub"])
        except ValueError:
            raise InvalidCredentialError("Could not validate credentials")

        user = await services.store.find_user_by_id(user_id)
        if user is None:
            raise InvalidCredentialError("Could not validate credentials")

        ensure_can_authenticate(user)
    except BaseAPIException as exc:
        SecurityLogger.log_unauthorized_access(
            path=str(request.url.path),
            method=request.method,
            reason=exc.error_code,
        )
        raise

    return user


class RoleChecker:
    """Role checker class for role requirements."""

    def __init__(self, allowed_roles: list[UserRole]):
        self.allowed_roles = allowed_roles

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in self.allowed_roles:
            raise ForbiddenError(
                "Insufficient permissions",
                error_code="AUTHORIZATION_ERROR",
            )
        return current_user


# Common role checkers
admin_required = RoleChecker([UserRole.ADMIN])
artisan_required = RoleChecker([UserRole.ARTISAN])
