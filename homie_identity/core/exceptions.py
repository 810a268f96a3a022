"""Custom exceptions for the identity service."""


class BaseAPIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = None,
        details: dict = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseAPIException):
    """Malformed or disallowed input."""

    def __init__(self, message: str = "Validation failed", details: dict = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )


class NotFoundError(BaseAPIException):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND_ERROR",
            details=details
        )


class ConflictError(BaseAPIException):
    """Resource conflict error."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict = None,
        error_code: str = "CONFLICT_ERROR"
    ):
        super().__init__(
            message=message,
            status_code=409,
            error_code=error_code,
            details=details
        )


class InvalidStateTransitionError(ConflictError):
    """Account status change not permitted from the current state."""

    def __init__(self, message: str = "Status transition not allowed", details: dict = None):
        super().__init__(
            message=message,
            details=details,
            error_code="INVALID_STATE_TRANSITION"
        )


class ExpiredError(BaseAPIException):
    """Token or code past its expiry."""

    def __init__(self, message: str = "Token has expired", details: dict = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="EXPIRED_ERROR",
            details=details
        )


class InvalidCredentialError(BaseAPIException):
    """Wrong password, code or token."""

    def __init__(self, message: str = "Invalid credentials", details: dict = None):
        super().__init__(
            message=message,
            status_code=401,
            error_code="INVALID_CREDENTIALS",
            details=details
        )


class ForbiddenError(BaseAPIException):
    """Account may not perform the requested operation."""

    def __init__(
        self,
        message: str = "Account not available",
        details: dict = None,
        error_code: str = "FORBIDDEN_ERROR"
    ):
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details
        )


class EmailNotVerifiedError(ForbiddenError):
    """Login attempted before the email address was verified."""

    def __init__(
        self,
        message: str = "Please verify your email before logging in",
        details: dict = None
    ):
        super().__init__(
            message=message,
            details=details,
            error_code="EMAIL_NOT_VERIFIED"
        )


class DependencyError(BaseAPIException):
    """Credential store or email dispatch failure."""

    def __init__(self, message: str = "A required service is unavailable", details: dict = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="DEPENDENCY_ERROR",
            details=details
        )
