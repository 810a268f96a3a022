"""Logging configuration and utilities."""
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.stdlib import LoggerFactory

from ..config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None):
    """Configure structured logging."""
    settings = settings or get_settings()

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.monitoring.log_level.upper()),
    )

    # Set third-party log levels
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


class RequestLogger:
    """Request logging utility."""

    @staticmethod
    def log_request(
        method: str,
        path: str,
        request_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log incoming request."""
        logger = structlog.get_logger("api.request")
        logger.info(
            "Request started",
            method=method,
            path=path,
            request_id=request_id,
            **(extra_data or {})
        )

    @staticmethod
    def log_response(
        method: str,
        path: str,
        status_code: int,
        response_time_ms: float,
        request_id: str = None,
    ):
        """Log response."""
        logger = structlog.get_logger("api.response")
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            response_time_ms=response_time_ms,
            request_id=request_id,
        )


class AccountLogger:
    """Account lifecycle event logging utility."""

    @staticmethod
    def log_user_registered(user_id: str, email: str, role: str):
        """Log a new pending registration."""
        logger = structlog.get_logger("account.registration")
        logger.info(
            "User registered",
            event_type="user_registered",
            user_id=user_id,
            email=email,
            role=role
        )

    @staticmethod
    def log_registration_rolled_back(user_id: str, email: str, rollback_succeeded: bool):
        """Log the compensating delete after a failed verification email."""
        logger = structlog.get_logger("account.registration")
        logger.warning(
            "Registration rolled back",
            event_type="registration_rolled_back",
            user_id=user_id,
            email=email,
            rollback_succeeded=rollback_succeeded
        )

    @staticmethod
    def log_verification_code_issued(user_id: str, reason: str):
        """Log issuance of a fresh verification code."""
        logger = structlog.get_logger("account.verification")
        logger.info(
            "Verification code issued",
            event_type="verification_code_issued",
            user_id=user_id,
            reason=reason
        )

    @staticmethod
    def log_email_verified(user_id: str):
        """Log successful email verification."""
        logger = structlog.get_logger("account.verification")
        logger.info("Email verified", event_type="email_verified", user_id=user_id)

    @staticmethod
    def log_password_reset_requested(email: str, user_found: bool):
        """Log a forgot-password request."""
        logger = structlog.get_logger("account.password")
        logger.info(
            "Password reset requested",
            event_type="password_reset_requested",
            email=email,
            user_found=user_found
        )

    @staticmethod
    def log_password_changed(user_id: str, via: str):
        """Log a password change or reset."""
        logger = structlog.get_logger("account.password")
        logger.info(
            "Password changed",
            event_type="password_changed",
            user_id=user_id,
            via=via
        )

    @staticmethod
    def log_oauth_linked(user_id: str, provider: str, created: bool):
        """Log an OAuth identity link."""
        logger = structlog.get_logger("account.oauth")
        logger.info(
            "OAuth identity linked",
            event_type="oauth_linked",
            user_id=user_id,
            provider=provider,
            created=created
        )

    @staticmethod
    def log_status_changed(
        subject: str,
        subject_id: str,
        previous_status: str,
        new_status: str
    ):
        """Log a user or artisan status transition."""
        logger = structlog.get_logger("account.state")
        logger.info(
            "Status changed",
            event_type="status_changed",
            subject=subject,
            subject_id=subject_id,
            previous_status=previous_status,
            new_status=new_status
        )

    @staticmethod
    def log_cleanup_completed(
        verification_tokens: int,
        refresh_tokens: int,
        users: int
    ):
        """Log the outcome of a cleanup sweep."""
        logger = structlog.get_logger("account.cleanup")
        logger.info(
            "Cleanup sweep completed",
            event_type="cleanup_completed",
            verification_tokens_deleted=verification_tokens,
            refresh_tokens_deleted=refresh_tokens,
            users_deleted=users
        )


class SecurityLogger:
    """Security event logging utility."""

    @staticmethod
    def log_login_attempt(
        email: str,
        success: bool,
        failure_reason: str = None
    ):
        """Log login attempt."""
        logger = structlog.get_logger("security.auth")
        logger.info(
            "Login attempt",
            event_type="login_attempt",
            email=email,
            success=success,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_token_refresh(
        user_id: str = None,
        success: bool = True,
        failure_reason: str = None
    ):
        """Log a refresh token rotation attempt."""
        logger = structlog.get_logger("security.token")
        logger.info(
            "Token refresh",
            event_type="token_refresh",
            user_id=user_id,
            success=success,
            failure_reason=failure_reason
        )

    @staticmethod
    def log_session_revoked(user_id: str = None, count: int = 1, reason: str = "logout"):
        """Log refresh token revocation."""
        logger = structlog.get_logger("security.token")
        logger.info(
            "Session revoked",
            event_type="session_revoked",
            user_id=user_id,
            count=count,
            reason=reason
        )

    @staticmethod
    def log_unauthorized_access(
        path: str,
        method: str,
        reason: str = None
    ):
        """Log unauthorized access attempt."""
        logger = structlog.get_logger("security.access")
        logger.warning(
            "Unauthorized access attempt",
            event_type="unauthorized_access",
            path=path,
            method=method,
            reason=reason
        )
