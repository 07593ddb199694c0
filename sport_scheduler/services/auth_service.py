"""
Authentication helpers: password hashing and JWT access tokens.
"""

import logging
import os
import secrets
from datetime import timedelta
from typing import Dict, Optional

import bcrypt
from jose import JWTError, jwt

from sport_scheduler.services.errors import InvalidInput
from sport_scheduler.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRATION_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRATION_MINUTES", "1440"))
MIN_PASSWORD_LENGTH = 8

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not JWT_SECRET_KEY:
    # Tokens will not survive a restart
    logger.warning("JWT_SECRET_KEY is not set; using a random per-process secret")
    JWT_SECRET_KEY = secrets.token_hex(64)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash (e.g. a placeholder seeded by hand)
        return False


def validate_password(password: Optional[str]) -> None:
    """
    Enforce password rules.

    Raises:
        InvalidInput: If the password is too short or has no digit
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if not any(char.isdigit() for char in password):
        raise InvalidInput("Password must include at least one number")


def normalize_email(email: str) -> str:
    """Lowercase and trim an email address."""
    return email.strip().lower()


def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Args:
        data: Claims to embed (expects "user_id" and "role")
        expires_delta: Optional lifetime, defaults to ACCESS_TOKEN_EXPIRATION_MINUTES

    Returns:
        Encoded JWT
    """
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRATION_MINUTES))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[Dict]:
    """
    Decode and validate a JWT access token.

    Returns:
        Token payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None
