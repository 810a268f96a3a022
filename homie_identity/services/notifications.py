"""Account notification emails."""
import asyncio

import structlog

from ..core.exceptions import DependencyError
from ..models import User
from . import email_templates
from .email import EmailDispatcher, EmailMessage

logger = structlog.get_logger(__name__)


class Notifier:
    """Renders account emails and hands them to the dispatcher.

    ``deliver`` raises ``DependencyError`` on failure or timeout so callers can
    roll back; ``deliver_quietly`` is for notifications whose loss must not
    fail the surrounding operation.
    """

    def __init__(
        self,
        dispatcher: EmailDispatcher,
        frontend_url: str,
        timeout: float = 10.0,
        verification_code_expire_minutes: int = 10,
        password_reset_expire_minutes: int = 10,
    ):
        self.dispatcher = dispatcher
        self.frontend_url = frontend_url.rstrip("/")
        self.timeout = timeout
        self.verification_code_expire_minutes = verification_code_expire_minutes
        self.password_reset_expire_minutes = password_reset_expire_minutes

    async def deliver(self, message: EmailMessage) -> None:
        try:
            await asyncio.wait_for(self.dispatcher.send(message), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Email dispatch timed out", recipient=message.recipient)
            raise DependencyError("Email delivery timed out") from exc

    async def deliver_quietly(self, message: EmailMessage) -> bool:
        try:
            await self.deliver(message)
        except DependencyError:
            logger.warning(
                "Non-critical email not delivered",
                recipient=message.recipient,
                subject=message.subject,
            )
            return False
        return True

    @staticmethod
    def _full_name(user: User) -> str:
        return f"{user.first_name} {user.last_name}".strip()

    async def send_verification_code(self, user: User, code: str, subject: str = "Verify Your Email"):
        await self.deliver(EmailMessage(
            recipient=user.email,
            subject=subject,
            body=email_templates.verification_code(code, self.verification_code_expire_minutes),
        ))

    async def send_verification_success(self, user: User) -> bool:
        return await self.deliver_quietly(EmailMessage(
            recipient=user.email,
            subject="Email Verification Successful",
            body=email_templates.successful_verification(f"{self.frontend_url}/login"),
        ))

    async def send_password_reset(self, user: User, reset_token: str):
        reset_url = f"{self.frontend_url}/reset-password?token={reset_token}"
        await self.deliver(EmailMessage(
            recipient=user.email,
            subject="Password Reset Request",
            body=email_templates.forgot_password(
                self._full_name(user), reset_url, self.password_reset_expire_minutes
            ),
        ))

    async def send_password_changed(self, user: User) -> bool:
        return await self.deliver_quietly(EmailMessage(
            recipient=user.email,
            subject="Password Changed Successfully",
            body=email_templates.password_changed(
                self._full_name(user), f"{self.frontend_url}/login"
            ),
        ))
