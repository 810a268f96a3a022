"""Services module."""
from .account_state import AccountStateMachine, ensure_can_authenticate
from .cleanup import CleanupSummary, CleanupSweeper
from .container import IdentityServices, build_services
from .email import (
    EmailDispatcher,
    EmailMessage,
    LoggingEmailDispatcher,
    SmtpEmailDispatcher,
    build_email_dispatcher,
)
from .notifications import Notifier
from .oauth import LinkResult, OAuthIdentityLinker, split_display_name
from .password_reset import PasswordResetFlow
from .session import AuthSession, SessionIssuer
from .verification import Registration, VerificationManager

__all__ = [
    "AccountStateMachine",
    "ensure_can_authenticate",
    "CleanupSummary",
    "CleanupSweeper",
    "IdentityServices",
    "build_services",
    "EmailDispatcher",
    "EmailMessage",
    "LoggingEmailDispatcher",
    "SmtpEmailDispatcher",
    "build_email_dispatcher",
    "Notifier",
    "LinkResult",
    "OAuthIdentityLinker",
    "split_display_name",
    "PasswordResetFlow",
    "AuthSession",
    "SessionIssuer",
    "Registration",
    "VerificationManager",
]
