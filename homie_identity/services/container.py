"""Wiring of services around one credential store and email dispatcher."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from ..config import Settings
from ..core.auth import PasswordHasher, TokenGenerator, utcnow
from ..store import CredentialStore
from .account_state import AccountStateMachine
from .cleanup import CleanupSweeper
from .email import EmailDispatcher
from .notifications import Notifier
from .oauth import OAuthIdentityLinker
from .password_reset import PasswordResetFlow
from .session import SessionIssuer
from .verification import VerificationManager


@dataclass
class IdentityServices:
    settings: Settings
    store: CredentialStore
    hasher: PasswordHasher
    tokens: TokenGenerator
    notifier: Notifier
    verification: VerificationManager
    sessions: SessionIssuer
    password_reset: PasswordResetFlow
    oauth: OAuthIdentityLinker
    accounts: AccountStateMachine
    cleanup: CleanupSweeper


def build_services(
    settings: Settings,
    store: CredentialStore,
    dispatcher: EmailDispatcher,
    clock: Callable[[], datetime] = utcnow,
) -> IdentityServices:
    """Construct every service with explicit collaborators."""
    hasher = PasswordHasher(rounds=settings.auth.bcrypt_rounds)
    tokens = TokenGenerator(settings.auth)
    notifier = Notifier(
        dispatcher,
        frontend_url=settings.api.frontend_url,
        timeout=settings.email.timeout_seconds,
        verification_code_expire_minutes=settings.auth.verification_code_expire_minutes,
        password_reset_expire_minutes=settings.auth.password_reset_expire_minutes,
    )
    sessions = SessionIssuer(store, hasher, tokens, clock=clock)

    return IdentityServices(
        settings=settings,
        store=store,
        hasher=hasher,
        tokens=tokens,
        notifier=notifier,
        verification=VerificationManager(store, hasher, tokens, notifier, clock=clock),
        sessions=sessions,
        password_reset=PasswordResetFlow(store, hasher, tokens, notifier, sessions, clock=clock),
        oauth=OAuthIdentityLinker(store, sessions),
        accounts=AccountStateMachine(store, clock=clock),
        cleanup=CleanupSweeper(
            store,
            unverified_user_ttl=timedelta(hours=settings.cleanup.unverified_user_ttl_hours),
            clock=clock,
        ),
    )
