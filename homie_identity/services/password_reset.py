"""Forgot, reset and change password flows."""
import uuid
from datetime import datetime
from typing import Callable

from ..core.auth import PasswordHasher, TokenGenerator, utcnow
from ..core.exceptions import (
    DependencyError,
    ExpiredError,
    InvalidCredentialError,
    NotFoundError,
)
from ..core.logging import AccountLogger
from ..models import TokenPurpose, User, VerificationToken
from ..store import CredentialStore
from .notifications import Notifier
from .session import SessionIssuer

logger = AccountLogger()

INVALID_RESET_TOKEN = "Invalid or expired reset token"


class PasswordResetFlow:
    """Persisted, single-use password reset tokens and password changes."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenGenerator,
        notifier: Notifier,
        sessions: SessionIssuer,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.sessions = sessions
        self.clock = clock

    async def forgot_password(self, email: str) -> None:
        """Email a reset link if the account exists.

        Unknown addresses are accepted without side effects so the response
        never reveals whether an account exists.
        """
        user = await self.store.find_user_by_email(email)
        logger.log_password_reset_requested(email.strip().lower(), user_found=user is not None)
        if user is None:
            return

        reset = self.tokens.create_password_reset_token(user.id, self.clock())
        record = await self.store.replace_verification_tokens(VerificationToken(
            user_id=user.id,
            purpose=TokenPurpose.PASSWORD_RESET,
            auth_code=self.tokens.digest(reset.value),
            expires_at=reset.expires_at,
        ))

        try:
            await self.notifier.send_password_reset(user, reset.value)
        except DependencyError:
            await self.store.delete_verification_token(record.id)
            raise

    async def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password using a reset token; the token is consumed."""
        claims = self.tokens.decode_password_reset_token(token)
        try:
            user_id = uuid.UUID(claims["sub"])
        except ValueError as exc:
            raise InvalidCredentialError(INVALID_RESET_TOKEN) from exc

        record = await self.store.find_latest_verification_token(
            user_id, TokenPurpose.PASSWORD_RESET
        )
        if record is None or not self.tokens.digest_matches(token, record.auth_code):
            raise InvalidCredentialError(INVALID_RESET_TOKEN)
        if record.is_expired(self.clock()):
            await self.store.delete_verification_token(record.id)
            raise ExpiredError(INVALID_RESET_TOKEN)

        # Claim the token before touching the password; only one caller can delete it
        if not await self.store.delete_verification_token(record.id):
            raise InvalidCredentialError(INVALID_RESET_TOKEN)

        user = await self.store.update_user(
            user_id, password_hash=self.hasher.hash(new_password)
        )
        if user is None:
            raise InvalidCredentialError(INVALID_RESET_TOKEN)

        await self.sessions.revoke_all_sessions(user_id, reason="password_reset")
        logger.log_password_changed(str(user_id), via="reset")

        await self.notifier.send_password_changed(user)
        return user

    async def change_password(
        self,
        user_id: uuid.UUID,
        current_password: str,
        new_password: str,
    ) -> User:
        user = await self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not self.hasher.verify(current_password, user.password_hash):
            raise InvalidCredentialError("Current password is incorrect")

        user = await self.store.update_user(
            user_id, password_hash=self.hasher.hash(new_password)
        )
        logger.log_password_changed(str(user_id), via="change")
        await self.notifier.send_password_changed(user)
        return user
