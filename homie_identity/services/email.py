"""Outbound email dispatch."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage as MimeMessage

import aiosmtplib
import structlog

from ..config import EmailSettings
from ..core.exceptions import DependencyError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    recipient: str
    subject: str
    body: str


class EmailDispatcher(ABC):
    """Sends a message; raises ``DependencyError`` when delivery fails."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        ...


class SmtpEmailDispatcher(EmailDispatcher):
    """Delivers email through an SMTP relay."""

    def __init__(self, settings: EmailSettings):
        self.settings = settings

    def _build(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = self.settings.sender
        mime["To"] = message.recipient
        mime["Subject"] = message.subject
        mime.set_content(message.body)
        return mime

    async def send(self, message: EmailMessage) -> None:
        try:
            await aiosmtplib.send(
                self._build(message),
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=self.settings.password,
                use_tls=self.settings.use_tls,
                start_tls=self.settings.start_tls if not self.settings.use_tls else False,
                timeout=self.settings.timeout_seconds,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error(
                "Failed to send email",
                recipient=message.recipient,
                subject=message.subject,
                error_type=type(exc).__name__,
            )
            raise DependencyError("Email delivery failed") from exc
        logger.info("Sent email", recipient=message.recipient, subject=message.subject)


class LoggingEmailDispatcher(EmailDispatcher):
    """Development dispatcher that logs message metadata instead of sending.

    Bodies carry verification codes and reset links, so they are never logged.
    """

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            "Email not sent (no SMTP host configured)",
            recipient=message.recipient,
            subject=message.subject,
        )


def build_email_dispatcher(
    settings: EmailSettings, environment: str = "development"
) -> EmailDispatcher:
    if settings.host:
        return SmtpEmailDispatcher(settings)
    if environment != "development":
        logger.warning(
            "No SMTP host configured; outgoing email will be dropped",
            environment=environment,
        )
    return LoggingEmailDispatcher()
