"""
Security utilities for ReadIt

Provides password hashing, token generation and input validation helpers.
"""

import re
import asyncio
import secrets
import logging
import bcrypt

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)


def _password_bytes(password: str) -> bytes:
    return password.encode('utf-8')[:BCRYPT_MAX_PASSWORD_BYTES]


def _sync_hash_password(password: str, rounds: int) -> str:
    """Synchronous bcrypt hash (CPU-bound)"""
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode('utf-8')


def _sync_verify_password(password: str, hashed_password: str) -> bool:
    """Synchronous bcrypt verify (CPU-bound)"""
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed_password.encode('utf-8'))
    except ValueError as e:
        # Malformed hash in storage
        logger.error(f"Failed to verify password: {e}")
        return False


async def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """
    Hash password using bcrypt in a thread pool to avoid blocking

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Salted bcrypt hash
    """
    return await asyncio.to_thread(_sync_hash_password, password, rounds)


async def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify password against hash in a thread pool to avoid blocking

    Args:
        password: Plain text password
        hashed_password: Stored bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    return await asyncio.to_thread(_sync_verify_password, password, hashed_password)


def generate_session_id() -> str:
    """Generate an opaque session identifier for the session cookie"""
    return secrets.token_urlsafe(32)


def generate_reset_token() -> str:
    """Generate a single-use password reset token"""
    return secrets.token_urlsafe(32)


def validate_email(email: str) -> bool:
    """
    Check whether a string is a syntactically valid email address

    Args:
        email: Candidate address

    Returns:
        True if the address is well formed
    """
    if not email or len(email) > 254:
        return False
    return EMAIL_PATTERN.match(email) is not None
