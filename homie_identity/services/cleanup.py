"""Periodic purge of expired tokens and abandoned registrations."""
import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog

from ..core.auth import utcnow
from ..core.exceptions import DependencyError
from ..core.logging import AccountLogger
from ..store import CredentialStore

logger = structlog.get_logger(__name__)
account_logger = AccountLogger()


@dataclass(frozen=True)
class CleanupSummary:
    verification_tokens_deleted: int
    refresh_tokens_deleted: int
    users_deleted: int


class CleanupSweeper:
    """Deletes expired tokens and users that never verified their email."""

    def __init__(
        self,
        store: CredentialStore,
        unverified_user_ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.unverified_user_ttl = unverified_user_ttl
        self.clock = clock

    async def run_once(self, now: Optional[datetime] = None) -> CleanupSummary:
        now = now or self.clock()
        verification_tokens = await self.store.delete_expired_verification_tokens(now)
        refresh_tokens = await self.store.delete_expired_refresh_tokens(now)
        users = await self.store.delete_unverified_users(now - self.unverified_user_ttl)

        account_logger.log_cleanup_completed(verification_tokens, refresh_tokens, users)
        return CleanupSummary(
            verification_tokens_deleted=verification_tokens,
            refresh_tokens_deleted=refresh_tokens,
            users_deleted=users,
        )

    async def run_forever(self, interval_seconds: float) -> None:
        """Sweep on a fixed interval until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.run_once()
            except DependencyError:
                # Try again next tick
                logger.warning("Cleanup sweep skipped: credential store unavailable")
