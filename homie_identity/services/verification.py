"""Registration and email verification service."""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..core.auth import PasswordHasher, TokenGenerator, utcnow
from ..core.exceptions import (
    ConflictError,
    DependencyError,
    ExpiredError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)
from ..core.logging import AccountLogger
from ..models import Artisan, TokenPurpose, User, UserRole, UserStatus, VerificationToken
from ..schemas.auth import ArtisanProfileCreate, UserRegister
from ..store import CredentialStore
from .account_state import status_after_verification
from .notifications import Notifier

logger = AccountLogger()


@dataclass(frozen=True)
class Registration:
    """Outcome of a successful registration."""

    user: User
    artisan: Optional[Artisan] = None


class VerificationManager:
    """Creates pending accounts and turns them active once the email is proven."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        tokens: TokenGenerator,
        notifier: Notifier,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.clock = clock

    def _new_code_token(self, user_id: Optional[uuid.UUID] = None):
        code = self.tokens.generate_verification_code()
        token = VerificationToken(
            user_id=user_id,
            purpose=TokenPurpose.EMAIL_VERIFICATION,
            auth_code=self.hasher.hash(code),
            expires_at=self.tokens.verification_code_expiry(self.clock()),
        )
        return code, token

    @staticmethod
    def _email_subject(user: User) -> str:
        if user.role == UserRole.ARTISAN:
            return "Verify Your Artisan Account"
        return "Verify Your Email"

    async def register(
        self,
        registration: UserRegister,
        artisan_profile: Optional[ArtisanProfileCreate] = None,
    ) -> Registration:
        """Create a pending user and email them a verification code.

        The user, its artisan profile and the hashed code are written in one
        transaction. If the email cannot be delivered the user is deleted again
        and ``DependencyError`` is raised.
        """
        if registration.role == UserRole.ADMIN:
            raise ValidationError("Administrator accounts cannot be self-registered")
        if registration.role == UserRole.ARTISAN and artisan_profile is None:
            raise ValidationError("Artisan registration requires business details")
        if artisan_profile is not None and registration.role != UserRole.ARTISAN:
            raise ValidationError("Business details are only accepted for artisan accounts")

        email = registration.email.strip().lower()
        existing = await self.store.find_user_by_email(email)
        if existing is not None:
            live_token = await self.store.find_live_verification_token(
                existing.id, TokenPurpose.EMAIL_VERIFICATION, self.clock()
            )
            if live_token is not None:
                raise ConflictError(
                    "A valid verification code already exists. "
                    "Please use it or wait for it to expire."
                )
            raise ConflictError(
                "User with this email already exists. Please login or use a different email."
            )

        user = User(
            email=email,
            password_hash=self.hasher.hash(registration.password),
            first_name=registration.first_name,
            last_name=registration.last_name,
            phone_number=registration.phone_number or None,
            role=registration.role,
            status=UserStatus.PENDING,
            is_email_verified=False,
            address=registration.address,
            city=registration.city,
            state=registration.state,
            zip_code=registration.zip_code,
        )
        artisan = None
        if artisan_profile is not None:
            artisan = Artisan(**artisan_profile.model_dump())

        code, token = self._new_code_token()
        user = await self.store.create_user(user, artisan=artisan, verification_token=token)
        logger.log_user_registered(str(user.id), user.email, user.role.value)

        try:
            await self.notifier.send_verification_code(user, code, self._email_subject(user))
        except DependencyError as exc:
            rolled_back = await self._rollback_registration(user)
            logger.log_registration_rolled_back(str(user.id), user.email, rolled_back)
            raise DependencyError("Error sending verification email") from exc

        logger.log_verification_code_issued(str(user.id), reason="registration")
        return Registration(user=user, artisan=artisan)

    async def _rollback_registration(self, user: User) -> bool:
        try:
            return await self.store.delete_user(user.id)
        except DependencyError:
            # Left for the unverified-user sweep
            return False

    async def verify(self, user_id: uuid.UUID, code: str) -> User:
        """Consume the user's verification code and activate the account."""
        token = await self.store.find_latest_verification_token(
            user_id, TokenPurpose.EMAIL_VERIFICATION
        )
        if token is None:
            raise ExpiredError("Verification code is expired or invalid")

        if token.is_expired(self.clock()):
            await self.store.delete_verification_token(token.id)
            raise ExpiredError("Verification code is expired or invalid")

        if not self.hasher.verify(code, token.auth_code):
            raise InvalidCredentialError("Invalid verification code")

        user = await self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        user = await self.store.update_user(
            user_id,
            is_email_verified=True,
            status=status_after_verification(user),
        )
        await self.store.delete_verification_token(token.id)
        logger.log_email_verified(str(user_id))

        await self.notifier.send_verification_success(user)
        return user

    async def verify_artisan(self, artisan_id: uuid.UUID, code: str) -> User:
        artisan = await self._require_artisan(artisan_id)
        return await self.verify(artisan.user_id, code)

    async def resend_code(self, user_id: uuid.UUID) -> User:
        """Replace every outstanding code for the user with a fresh one."""
        user = await self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_email_verified:
            raise ConflictError("Email address is already verified")

        code, token = self._new_code_token(user.id)
        await self.store.replace_verification_tokens(token)
        await self.notifier.send_verification_code(user, code, self._email_subject(user))

        logger.log_verification_code_issued(str(user.id), reason="resend")
        return user

    async def resend_artisan_code(self, artisan_id: uuid.UUID) -> User:
        artisan = await self._require_artisan(artisan_id)
        return await self.resend_code(artisan.user_id)

    async def _require_artisan(self, artisan_id: uuid.UUID) -> Artisan:
        artisan = await self.store.find_artisan_by_id(artisan_id)
        if artisan is None:
            raise NotFoundError("Artisan not found")
        return artisan
