"""Login, token issuance, refresh rotation and logout."""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..core.auth import PasswordHasher, TokenGenerator, utcnow
from ..core.exceptions import (
    BaseAPIException,
    ExpiredError,
    ForbiddenError,
    InvalidCredentialError,
)
from ..core.logging import SecurityLogger
from ..models import RefreshToken, User, UserRole
from ..store import CredentialStore
from .account_state import ensure_can_authenticate

logger = SecurityLogger()

INVALID_LOGIN = "Invalid email or password"


@dataclass(frozen=True)
class AuthSession:
    """Credentials handed to a client after login, refresh or OAuth linking."""

    access_token: str
    refresh_token: str
    expires_in: int
    user: User
    token_type: str = "bearer"


class SessionIssuer:
    """Issues and rotates session credentials."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenGenerator,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.clock = clock

    @property
    def access_token_lifetime_seconds(self) -> int:
        return self.tokens.access_token_expire_minutes * 60

    async def login(
        self,
        email: str,
        password: str,
        required_role: Optional[UserRole] = None,
    ) -> AuthSession:
        """Authenticate with email and password and open a new session."""
        try:
            user = await self.store.find_user_by_email(email)
            if user is None:
                raise InvalidCredentialError(INVALID_LOGIN)

            ensure_can_authenticate(user)

            if not self.hasher.verify(password, user.password_hash):
                raise InvalidCredentialError(INVALID_LOGIN)

            # Role is checked only after the password so it reveals nothing to guessers
            if required_role is not None and user.role != required_role:
                raise ForbiddenError(
                    f"This account is not registered as {required_role.value.lower()}",
                    error_code="ROLE_MISMATCH",
                )
        except BaseAPIException as exc:
            logger.log_login_attempt(email, success=False, failure_reason=exc.error_code)
            raise

        user = await self.store.update_user(user.id, last_login=self.clock()) or user
        session = await self.issue_session(user)
        logger.log_login_attempt(email, success=True)
        return session

    async def issue_session(self, user: User) -> AuthSession:
        """Mint an access token and persist a new refresh token for ``user``."""
        access = self.tokens.create_access_token(user.id, user.email, user.role.value)
        refresh = self.tokens.create_refresh_token(self.clock())
        await self.store.create_refresh_token(RefreshToken(
            user_id=user.id,
            token=refresh.value,
            expires_at=refresh.expires_at,
        ))
        return AuthSession(
            access_token=access.value,
            refresh_token=refresh.value,
            expires_in=self.access_token_lifetime_seconds,
            user=user,
        )

    async def logout(self, refresh_token: str) -> None:
        """Revoke a refresh token. Unknown or already revoked tokens are not an error."""
        revoked = await self.store.delete_refresh_token(refresh_token)
        logger.log_session_revoked(count=int(revoked), reason="logout")

    async def revoke_all_sessions(self, user_id: uuid.UUID, reason: str = "revoke_all") -> int:
        count = await self.store.delete_refresh_tokens_for_user(user_id)
        logger.log_session_revoked(user_id=str(user_id), count=count, reason=reason)
        return count

    async def refresh_access_token(self, refresh_token: str) -> AuthSession:
        """Exchange a refresh token for a new access token and a rotated refresh token.

        The presented token stops working as soon as this call succeeds.
        """
        record = await self.store.find_refresh_token_by_value(refresh_token)
        if record is None:
            logger.log_token_refresh(success=False, failure_reason="unknown_token")
            raise InvalidCredentialError("Invalid refresh token")

        now = self.clock()
        if record.is_expired(now):
            await self.store.delete_refresh_token(refresh_token)
            logger.log_token_refresh(str(record.user_id), False, "expired")
            raise ExpiredError("Refresh token expired")

        user = await self.store.find_user_by_id(record.user_id)
        if user is None:
            await self.store.delete_refresh_token(refresh_token)
            raise InvalidCredentialError("Invalid refresh token")

        try:
            ensure_can_authenticate(user)
        except ForbiddenError:
            logger.log_token_refresh(str(user.id), False, "account_not_available")
            raise

        replacement = self.tokens.create_refresh_token(now)
        rotated = await self.store.rotate_refresh_token(
            refresh_token, replacement.value, replacement.expires_at
        )
        if rotated is None:
            # Another request rotated or revoked this token first
            logger.log_token_refresh(str(user.id), False, "already_rotated")
            raise InvalidCredentialError("Invalid refresh token")

        access = self.tokens.create_access_token(user.id, user.email, user.role.value)
        logger.log_token_refresh(str(user.id), True)
        return AuthSession(
            access_token=access.value,
            refresh_token=replacement.value,
            expires_in=self.access_token_lifetime_seconds,
            user=user,
        )
