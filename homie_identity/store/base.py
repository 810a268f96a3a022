"""Credential store interface."""
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from ..models import Artisan, RefreshToken, TokenPurpose, User, VerificationToken


class CredentialStore(ABC):
    """Persistence for users, artisans and their tokens.

    Implementations raise ``ConflictError`` on unique-constraint violations
    (email, phone number, refresh token value, business license, tax id) and
    ``DependencyError`` when the backing store fails or times out. Each method
    is its own transaction.
    """

    # Users

    @abstractmethod
    async def create_user(
        self,
        user: User,
        *,
        artisan: Optional[Artisan] = None,
        verification_token: Optional[VerificationToken] = None,
    ) -> User:
        """Persist a user together with its optional artisan profile and token."""

    @abstractmethod
    async def find_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""

    @abstractmethod
    async def update_user(self, user_id: uuid.UUID, **values: Any) -> Optional[User]:
        ...

    @abstractmethod
    async def delete_user(self, user_id: uuid.UUID) -> bool:
        """Delete a user with its artisan profile and all tokens."""

    @abstractmethod
    async def delete_unverified_users(self, created_before: datetime) -> int:
        ...

    # Artisans

    @abstractmethod
    async def create_artisan(self, artisan: Artisan) -> Artisan:
        ...

    @abstractmethod
    async def find_artisan_by_id(self, artisan_id: uuid.UUID) -> Optional[Artisan]:
        ...

    @abstractmethod
    async def update_artisan(self, artisan_id: uuid.UUID, **values: Any) -> Optional[Artisan]:
        ...

    # Verification tokens

    @abstractmethod
    async def create_verification_token(self, token: VerificationToken) -> VerificationToken:
        ...

    @abstractmethod
    async def find_live_verification_token(
        self,
        user_id: uuid.UUID,
        purpose: TokenPurpose,
        now: datetime,
    ) -> Optional[VerificationToken]:
        ...

    @abstractmethod
    async def find_latest_verification_token(
        self,
        user_id: uuid.UUID,
        purpose: TokenPurpose,
    ) -> Optional[VerificationToken]:
        """Most recently issued token regardless of expiry."""

    @abstractmethod
    async def replace_verification_tokens(self, token: VerificationToken) -> VerificationToken:
        """Atomically drop every token of the same user and purpose, then insert ``token``.

        Concurrent calls for one user are serialized.
        """

    @abstractmethod
    async def delete_verification_token(self, token_id: uuid.UUID) -> bool:
        ...

    @abstractmethod
    async def delete_verification_tokens(
        self,
        user_id: uuid.UUID,
        purpose: Optional[TokenPurpose] = None,
    ) -> int:
        ...

    @abstractmethod
    async def delete_expired_verification_tokens(self, now: datetime) -> int:
        ...

    # Refresh tokens

    @abstractmethod
    async def create_refresh_token(self, token: RefreshToken) -> RefreshToken:
        ...

    @abstractmethod
    async def find_refresh_token_by_value(self, value: str) -> Optional[RefreshToken]:
        ...

    @abstractmethod
    async def rotate_refresh_token(
        self,
        current_value: str,
        new_value: str,
        expires_at: datetime,
    ) -> Optional[RefreshToken]:
        """Replace a token value in place if it still holds ``current_value``.

        Returns ``None`` when the token was already rotated or deleted.
        """

    @abstractmethod
    async def delete_refresh_token(self, value: str) -> bool:
        ...

    @abstractmethod
    async def delete_refresh_tokens_for_user(self, user_id: uuid.UUID) -> int:
        ...

    @abstractmethod
    async def delete_expired_refresh_tokens(self, now: datetime) -> int:
        ...
