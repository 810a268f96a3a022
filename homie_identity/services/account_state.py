"""Account status state machine."""
import uuid
from datetime import datetime
from typing import Callable, Dict, FrozenSet

from ..core.auth import utcnow
from ..core.exceptions import (
    EmailNotVerifiedError,
    ForbiddenError,
    InvalidStateTransitionError,
    NotFoundError,
)
from ..core.logging import AccountLogger
from ..models import Artisan, ArtisanStatus, User, UserStatus
from ..store import CredentialStore

logger = AccountLogger()

ACCOUNT_NOT_AVAILABLE = "Account not available"

# PENDING -> ACTIVE only happens through email verification
ADMIN_USER_TRANSITIONS: Dict[UserStatus, FrozenSet[UserStatus]] = {
    UserStatus.PENDING: frozenset(),
    UserStatus.ACTIVE: frozenset({UserStatus.SUSPENDED, UserStatus.BANNED}),
    UserStatus.SUSPENDED: frozenset({UserStatus.ACTIVE, UserStatus.BANNED}),
    UserStatus.BANNED: frozenset(),
}

ARTISAN_TRANSITIONS: Dict[ArtisanStatus, FrozenSet[ArtisanStatus]] = {
    ArtisanStatus.PENDING_VERIFICATION: frozenset({ArtisanStatus.VERIFIED, ArtisanStatus.REJECTED}),
    ArtisanStatus.VERIFIED: frozenset(),
    ArtisanStatus.REJECTED: frozenset(),
}

BLOCKED_STATUSES = frozenset({UserStatus.SUSPENDED, UserStatus.BANNED})


def ensure_can_authenticate(user: User) -> None:
    """Gate credential issuance on account status and email verification.

    Suspended and banned accounts are rejected with the same message.
    """
    if user.status in BLOCKED_STATUSES:
        raise ForbiddenError(ACCOUNT_NOT_AVAILABLE)
    if not user.is_email_verified:
        raise EmailNotVerifiedError()


def status_after_verification(user: User) -> UserStatus:
    """Status a user moves to once their email is verified."""
    if user.status in BLOCKED_STATUSES:
        raise ForbiddenError(ACCOUNT_NOT_AVAILABLE)
    return UserStatus.ACTIVE


class AccountStateMachine:
    """Administrative status changes for users and artisan profiles."""

    def __init__(self, store: CredentialStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    async def change_user_status(self, user_id: uuid.UUID, target: UserStatus) -> User:
        user = await self.store.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if target not in ADMIN_USER_TRANSITIONS[user.status]:
            raise InvalidStateTransitionError(
                f"Cannot change user status from {user.status.value} to {target.value}",
                details={"from": user.status.value, "to": target.value},
            )

        previous = user.status
        updated = await self.store.update_user(user_id, status=target)
        if updated is None:
            raise NotFoundError("User not found")

        logger.log_status_changed("user", str(user_id), previous.value, target.value)
        return updated

    async def change_artisan_status(
        self,
        artisan_id: uuid.UUID,
        target: ArtisanStatus,
    ) -> Artisan:
        artisan = await self.store.find_artisan_by_id(artisan_id)
        if artisan is None:
            raise NotFoundError("Artisan not found")

        if target not in ARTISAN_TRANSITIONS[artisan.status]:
            raise InvalidStateTransitionError(
                f"Cannot change artisan status from {artisan.status.value} to {target.value}",
                details={"from": artisan.status.value, "to": target.value},
            )

        values = {"status": target}
        if target == ArtisanStatus.VERIFIED:
            values["verification_date"] = self.clock()

        previous = artisan.status
        updated = await self.store.update_artisan(artisan_id, **values)
        if updated is None:
            raise NotFoundError("Artisan not found")

        logger.log_status_changed("artisan", str(artisan_id), previous.value, target.value)
        return updated

