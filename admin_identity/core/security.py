# admin_identity/core/security.py
"""
Credential primitives for admin accounts.

- bcrypt password digests (passlib)
- reset tokens and temporary passwords (secrets)
- signed admin session tokens (python-jose)
"""

import secrets
from datetime import timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from admin_identity.core.config import settings
from admin_identity.core.errors import AuthenticationError, ValidationError
from admin_identity.utils.time_utils import utcnow

# bcrypt only looks at the first 72 bytes
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# -----------------------------
# HASHING FUNCTIONS
# -----------------------------
def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Each call uses a fresh salt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def validate_password(password: Optional[str]) -> str:
    """Reject passwords bcrypt can't store faithfully."""
    if not isinstance(password, str) or not password:
        raise ValidationError("Password is required", errors={"password": "required"})

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            errors={"password": "too_short"},
        )

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
            errors={"password": "too_long"},
        )

    return password


# -----------------------------
# RANDOM SECRETS
# -----------------------------
def generate_reset_token(nbytes: Optional[int] = None) -> str:
    """32 random bytes by default, hex encoded (64 chars)."""
    return secrets.token_hex(nbytes or settings.RESET_TOKEN_BYTES)


def generate_temporary_password() -> str:
    return secrets.token_hex(settings.TEMP_PASSWORD_BYTES)


def tokens_match(candidate: Optional[str], stored: Optional[str]) -> bool:
    if not candidate or not stored:
        return False
    return secrets.compare_digest(candidate.encode("utf-8"), stored.encode("utf-8"))


# -----------------------------
# ADMIN SESSION TOKENS
# -----------------------------
def create_admin_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT token for an admin session.
    The payload carries the admin id and role; the account itself is
    re-read on every request so suspension takes effect immediately.
    """
    to_encode = data.copy()
    now = utcnow()

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ADMIN_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "scope": "admin",
    })

    return jwt.encode(to_encode, settings.ADMIN_JWT_SECRET, algorithm=settings.ADMIN_JWT_ALGORITHM)


def decode_admin_token(token: str) -> dict:
    """
    Decode and validate admin JWT token.
    Raises AuthenticationError if token is invalid or not an admin token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.ADMIN_JWT_SECRET,
            algorithms=[settings.ADMIN_JWT_ALGORITHM],
        )
    except JWTError:
        raise AuthenticationError("Could not validate admin credentials")

    if payload.get("scope") != "admin" or not payload.get("admin_id"):
        raise AuthenticationError("Invalid token payload")

    return payload
