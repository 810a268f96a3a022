"""Plain-text bodies for account emails."""


def verification_code(code: str, expires_minutes: int) -> str:
    return (
        "Hello!\n\n"
        f"Your verification code is: {code}\n\n"
        f"This code will expire in {expires_minutes} minutes.\n\n"
        "If you didn't request this code, please ignore this email.\n"
    )


def successful_verification(login_url: str) -> str:
    return (
        "Congratulations!\n\n"
        "Your email has been successfully verified. You can now log in to your account.\n\n"
        f"Login here: {login_url}\n"
    )


def forgot_password(full_name: str, reset_url: str, expires_minutes: int) -> str:
    return (
        f"Hello {full_name},\n\n"
        "You recently requested to reset your password. "
        "Click the link below to reset it:\n\n"
        f"{reset_url}\n\n"
        f"This link will expire in {expires_minutes} minutes.\n\n"
        "If you didn't request this, please ignore this email.\n"
    )


def password_changed(full_name: str, login_url: str) -> str:
    return (
        f"Hello {full_name},\n\n"
        "Your password has been successfully changed.\n\n"
        f"You can now login with your new password here: {login_url}\n\n"
        "If you didn't make this change, please contact support immediately.\n"
    )
