"""Linking external OAuth identities to local accounts."""
import secrets
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.exceptions import ConflictError, ValidationError
from ..core.logging import AccountLogger
from ..models import Artisan, User, UserRole, UserStatus
from ..schemas.oauth import OAuthProfile
from ..store import CredentialStore
from .account_state import ensure_can_authenticate
from .session import AuthSession, SessionIssuer

logger = AccountLogger()

PLACEHOLDER_LICENSE_PREFIX = "PENDING_VERIFICATION"


def split_display_name(display_name: Optional[str]) -> Tuple[str, str]:
    """Split a provider display name into first and last name.

    "Ese O. Jonathan" drops the middle initial; otherwise the first word is
    the first name and the remainder the last name.
    """
    parts = (display_name or "").split()
    if len(parts) == 3 and parts[1].endswith("."):
        return parts[0], parts[2]
    if len(parts) >= 2:
        return parts[0], " ".join(parts[1:])
    return (parts[0] if parts else ""), ""


def _names_from_profile(profile: OAuthProfile) -> Tuple[str, str]:
    if profile.given_name:
        return profile.given_name, profile.family_name or ""
    first, last = split_display_name(profile.display_name)
    return first or profile.email.split("@")[0], last


def _placeholder_artisan(profile: OAuthProfile, first_name: str) -> Artisan:
    """Business profile to be completed by the artisan after signing in."""
    owner = profile.display_name or first_name
    return Artisan(
        business_name=f"{owner}'s Business",
        business_license=f"{PLACEHOLDER_LICENSE_PREFIX}-{secrets.token_hex(8)}",
        service_categories=["General"],
        service_areas=["Local"],
        description="OAuth registered artisan",
        hourly_rate=0,
        years_of_experience=0,
        qualifications=[],
        max_job_distance=50,
    )


@dataclass(frozen=True)
class LinkResult:
    session: AuthSession
    created: bool


class OAuthIdentityLinker:
    """Finds or creates the local user behind a provider profile and signs them in."""

    def __init__(self, store: CredentialStore, sessions: SessionIssuer):
        self.store = store
        self.sessions = sessions

    async def link_or_create(
        self,
        profile: OAuthProfile,
        requested_role: UserRole = UserRole.CUSTOMER,
    ) -> LinkResult:
        if not profile.email:
            raise ValidationError("No email found in OAuth profile")
        if requested_role == UserRole.ADMIN:
            raise ValidationError("Administrator accounts cannot be created through OAuth")

        user = await self.store.find_user_by_email(profile.email)
        created = user is None

        if user is None:
            try:
                user = await self._create_user(profile, requested_role)
            except ConflictError:
                # A concurrent sign-in created the account first
                user = await self.store.find_user_by_email(profile.email)
                if user is None:
                    raise
                created = False
        elif not user.profile_picture and profile.photo_url:
            user = await self.store.update_user(user.id, profile_picture=profile.photo_url) or user

        ensure_can_authenticate(user)
        session = await self.sessions.issue_session(user)
        logger.log_oauth_linked(str(user.id), profile.provider, created)
        return LinkResult(session=session, created=created)

    async def _create_user(self, profile: OAuthProfile, role: UserRole) -> User:
        first_name, last_name = _names_from_profile(profile)
        user = User(
            email=profile.email,
            password_hash="",
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=UserStatus.ACTIVE,
            is_email_verified=True,
            profile_picture=profile.photo_url,
        )
        artisan = _placeholder_artisan(profile, first_name) if role == UserRole.ARTISAN else None
        return await self.store.create_user(user, artisan=artisan)
