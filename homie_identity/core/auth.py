"""Credential primitives: password hashing, codes and tokens."""
import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from ..config import AuthSettings
from .exceptions import ExpiredError, InvalidCredentialError

ACCESS_TOKEN_TYPE = "access"
PASSWORD_RESET_TOKEN_TYPE = "password_reset"


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PasswordHasher:
    """One-way bcrypt hashing for passwords and verification codes."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, secret: str) -> str:
        """Hash a secret using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(secret.encode('utf-8'), salt).decode('utf-8')

    def verify(self, secret: str, hashed: Optional[str]) -> bool:
        """Verify a secret against a stored hash.

        Accounts created through OAuth carry an empty hash and never match.
        """
        if not hashed:
            return False
        try:
            return bcrypt.checkpw(secret.encode('utf-8'), hashed.encode('utf-8'))
        except ValueError:
            # Malformed stored hash
            return False


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token and the moment it stops being valid."""

    value: str
    expires_at: datetime


class TokenGenerator:
    """Generates OTPs, opaque refresh tokens and signed JWTs."""

    def __init__(self, settings: AuthSettings):
        self.secret_key = settings.secret_key
        self.algorithm = settings.algorithm
        self.code_length = settings.verification_code_length
        self.access_token_expire_minutes = settings.access_token_expire_minutes
        self.refresh_token_expire_days = settings.refresh_token_expire_days
        self.verification_code_expire_minutes = settings.verification_code_expire_minutes
        self.password_reset_expire_minutes = settings.password_reset_expire_minutes

    def generate_verification_code(self) -> str:
        """Uniform numeric code of fixed length, leading zeros preserved."""
        return str(secrets.randbelow(10 ** self.code_length)).zfill(self.code_length)

    def verification_code_expiry(self, now: Optional[datetime] = None) -> datetime:
        return (now or utcnow()) + timedelta(minutes=self.verification_code_expire_minutes)

    def create_refresh_token(self, now: Optional[datetime] = None) -> IssuedToken:
        """Create an opaque refresh token; it is looked up, never decoded."""
        expires_at = (now or utcnow()) + timedelta(days=self.refresh_token_expire_days)
        return IssuedToken(value=secrets.token_urlsafe(48), expires_at=expires_at)

    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: str,
        role: str,
        expires_delta: Optional[timedelta] = None
    ) -> IssuedToken:
        """Create JWT access token."""
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (
            expires_delta or timedelta(minutes=self.access_token_expire_minutes)
        )
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": issued_at,
            "exp": expire,
        }
        token = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(value=token, expires_at=expire.replace(tzinfo=None))

    def create_password_reset_token(
        self,
        user_id: uuid.UUID,
        now: Optional[datetime] = None
    ) -> IssuedToken:
        """Create a signed, single-use password reset token."""
        expires_at = (now or utcnow()) + timedelta(minutes=self.password_reset_expire_minutes)
        to_encode = {
            "sub": str(user_id),
            "type": PASSWORD_RESET_TOKEN_TYPE,
            "jti": secrets.token_hex(16),
            "exp": expires_at.replace(tzinfo=timezone.utc),
        }
        token = jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        return IssuedToken(value=token, expires_at=expires_at)

    def decode(self, token: str, expected_type: str) -> Dict[str, Any]:
        """Verify and decode a signed token of the given type."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredError("Token has expired") from exc
        except JWTError as exc:
            raise InvalidCredentialError("Invalid token") from exc

        if payload.get("type") != expected_type or not payload.get("sub"):
            raise InvalidCredentialError("Invalid token")
        return payload

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        return self.decode(token, ACCESS_TOKEN_TYPE)

    def decode_password_reset_token(self, token: str) -> Dict[str, Any]:
        return self.decode(token, PASSWORD_RESET_TOKEN_TYPE)

    @staticmethod
    def digest(token: str) -> str:
        """SHA-256 digest used to persist reset tokens."""
        return hashlib.sha256(token.encode()).hexdigest()

    @staticmethod
    def digest_matches(token: str, stored_digest: str) -> bool:
        return hmac.compare_digest(TokenGenerator.digest(token), stored_digest)
