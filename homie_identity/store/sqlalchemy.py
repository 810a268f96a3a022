"""SQLAlchemy implementation of the credential store."""
import asyncio
import functools
import uuid
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.auth import utcnow
from ..core.exceptions import ConflictError, DependencyError
from ..models import Artisan, RefreshToken, TokenPurpose, User, VerificationToken
from .base import CredentialStore

logger = structlog.get_logger(__name__)

# Checked in order; "email" must come after fields that contain it
UNIQUE_FIELD_MESSAGES = (
    ("phone_number", "Phone number is already in use"),
    ("business_license", "Business license is already registered"),
    ("tax_id", "Tax ID is already registered"),
    ("email", "User with this email already exists"),
    ("refresh_tokens", "Refresh token collision"),
)


def _conflict_from_integrity_error(exc: IntegrityError) -> ConflictError:
    text = str(exc.orig).lower()
    for field, message in UNIQUE_FIELD_MESSAGES:
        if field in text:
            return ConflictError(message, details={"field": field})
    return ConflictError("Record conflicts with existing data")


def normalize_email(email: str) -> str:
    """Emails are stored lowercased so lookups can use the unique index."""
    return email.strip().lower()


def store_operation(func):
    """Bound the call with the store timeout and normalise backend failures."""

    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await asyncio.wait_for(func(self, *args, **kwargs), timeout=self.timeout)
        except IntegrityError as exc:
            raise _conflict_from_integrity_error(exc) from exc
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            logger.error(
                "Credential store operation failed",
                operation=func.__name__,
                error_type=type(exc).__name__,
            )
            raise DependencyError("Credential store is unavailable") from exc

    return wrapper


class SqlAlchemyCredentialStore(CredentialStore):
    """Credential store backed by an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float = 10.0,
    ):
        self.session_factory = session_factory
        self.timeout = timeout
        # SQLite ignores FOR UPDATE; this serializes replacements within the process
        self._replace_lock = asyncio.Lock()

    # Users

    @store_operation
    async def create_user(
        self,
        user: User,
        *,
        artisan: Optional[Artisan] = None,
        verification_token: Optional[VerificationToken] = None,
    ) -> User:
        async with self.session_factory() as session, session.begin():
            user.email = normalize_email(user.email)
            user.artisan = artisan
            session.add(user)
            await session.flush()

            if verification_token is not None:
                verification_token.user_id = user.id
                session.add(verification_token)
        return user

    @store_operation
    async def find_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        async with self.session_factory() as session:
            return await session.get(User, user_id)

    @store_operation
    async def find_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == normalize_email(email))
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    @store_operation
    async def update_user(self, user_id: uuid.UUID, **values: Any) -> Optional[User]:
        async with self.session_factory() as session, session.begin():
            user = await session.get(User, user_id)
            if user is None:
                return None
            for field, value in values.items():
                setattr(user, field, value)
            user.updated_at = utcnow()
        return user

    @store_operation
    async def delete_user(self, user_id: uuid.UUID) -> bool:
        async with self.session_factory() as session, session.begin():
            deleted = await self._delete_users(session, [user_id])
        return deleted > 0

    @store_operation
    async def delete_unverified_users(self, created_before: datetime) -> int:
        stmt = select(User.id).where(
            User.is_email_verified.is_(False),
            User.created_at < created_before,
        )
        async with self.session_factory() as session, session.begin():
            user_ids = list((await session.execute(stmt)).scalars())
            if not user_ids:
                return 0
            return await self._delete_users(session, user_ids)

    @staticmethod
    async def _delete_users(session: AsyncSession, user_ids: list) -> int:
        # Children first; does not rely on the backend enforcing ON DELETE CASCADE
        await session.execute(
            delete(VerificationToken).where(VerificationToken.user_id.in_(user_ids))
        )
        await session.execute(delete(RefreshToken).where(RefreshToken.user_id.in_(user_ids)))
        await session.execute(delete(Artisan).where(Artisan.user_id.in_(user_ids)))
        result = await session.execute(delete(User).where(User.id.in_(user_ids)))
        return result.rowcount

    # Artisans

    @store_operation
    async def create_artisan(self, artisan: Artisan) -> Artisan:
        async with self.session_factory() as session, session.begin():
            session.add(artisan)
        return artisan

    @store_operation
    async def find_artisan_by_id(self, artisan_id: uuid.UUID) -> Optional[Artisan]:
        async with self.session_factory() as session:
            return await session.get(Artisan, artisan_id)

    @store_operation
    async def update_artisan(self, artisan_id: uuid.UUID, **values: Any) -> Optional[Artisan]:
        async with self.session_factory() as session, session.begin():
            artisan = await session.get(Artisan, artisan_id)
            if artisan is None:
                return None
            for field, value in values.items():
                setattr(artisan, field, value)
            artisan.updated_at = utcnow()
        return artisan

    # Verification tokens

    @store_operation
    async def create_verification_token(self, token: VerificationToken) -> VerificationToken:
        async with self.session_factory() as session, session.begin():
            session.add(token)
        return token

    @store_operation
    async def find_live_verification_token(
        self,
        user_id: uuid.UUID,
        purpose: TokenPurpose,
        now: datetime,
    ) -> Optional[VerificationToken]:
        stmt = (
            select(VerificationToken)
            .where(
                VerificationToken.user_id == user_id,
                VerificationToken.purpose == purpose,
                VerificationToken.expires_at > now,
            )
            .order_by(VerificationToken.created_at.desc())
            .limit(1)
        )
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    @store_operation
    async def find_latest_verification_token(
        self,
        user_id: uuid.UUID,
        purpose: TokenPurpose,
    ) -> Optional[VerificationToken]:
        stmt = (
            select(VerificationToken)
            .where(
                VerificationToken.user_id == user_id,
                VerificationToken.purpose == purpose,
            )
            .order_by(VerificationToken.created_at.desc())
            .limit(1)
        )
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    @store_operation
    async def replace_verification_tokens(self, token: VerificationToken) -> VerificationToken:
        async with self._replace_lock, self.session_factory() as session, session.begin():
            # Row lock on the owner serializes concurrent replacements per user
            await session.execute(
                select(User.id).where(User.id == token.user_id).with_for_update()
            )
            await session.execute(
                delete(VerificationToken).where(
                    VerificationToken.user_id == token.user_id,
                    VerificationToken.purpose == token.purpose,
                )
            )
            session.add(token)
        return token

    @store_operation
    async def delete_verification_token(self, token_id: uuid.UUID) -> bool:
        async with self.session_factory() as session, session.begin():
            result = await session.execute(
                delete(VerificationToken).where(VerificationToken.id == token_id)
            )
        return result.rowcount > 0

    @store_operation
    async def delete_verification_tokens(
        self,
        user_id: uuid.UUID,
        purpose: Optional[TokenPurpose] = None,
    ) -> int:
        stmt = delete(VerificationToken).where(VerificationToken.user_id == user_id)
        if purpose is not None:
            stmt = stmt.where(VerificationToken.purpose == purpose)
        async with self.session_factory() as session, session.begin():
            result = await session.execute(stmt)
        return result.rowcount

    @store_operation
    async def delete_expired_verification_tokens(self, now: datetime) -> int:
        async with self.session_factory() as session, session.begin():
            result = await session.execute(
                delete(VerificationToken).where(VerificationToken.expires_at <= now)
            )
        return result.rowcount

    # Refresh tokens

    @store_operation
    async def create_refresh_token(self, token: RefreshToken) -> RefreshToken:
        async with self.session_factory() as session, session.begin():
            session.add(token)
        return token

    @store_operation
    async def find_refresh_token_by_value(self, value: str) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.token == value)
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none()

    @store_operation
    async def rotate_refresh_token(
        self,
        current_value: str,
        new_value: str,
        expires_at: datetime,
    ) -> Optional[RefreshToken]:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == current_value)
            .values(token=new_value, expires_at=expires_at, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session, session.begin():
            result = await session.execute(stmt)
            if result.rowcount != 1:
                return None
            rotated = await session.execute(
                select(RefreshToken).where(RefreshToken.token == new_value)
            )
            return rotated.scalar_one()

    @store_operation
    async def delete_refresh_token(self, value: str) -> bool:
        async with self.session_factory() as session, session.begin():
            result = await session.execute(delete(RefreshToken).where(RefreshToken.token == value))
        return result.rowcount > 0

    @store_operation
    async def delete_refresh_tokens_for_user(self, user_id: uuid.UUID) -> int:
        async with self.session_factory() as session, session.begin():
            result = await session.execute(
                delete(RefreshToken).where(RefreshToken.user_id == user_id)
            )
        return result.rowcount

    @store_operation
    async def delete_expired_refresh_tokens(self, now: datetime) -> int:
        async with self.session_factory() as session, session.begin():
            result = await session.execute(
                delete(RefreshToken).where(RefreshToken.expires_at <= now)
            )
        return result.rowcount
