"""
Security Utilities

One-time code generation and salted hashing.

Codes are hashed with bcrypt before storage so a database leak does not expose
codes that are still valid. ``bcrypt.checkpw`` performs the constant-time
comparison on validation.
"""

import secrets

import bcrypt

from consent_portal.core.config import settings


def generate_numeric_code(length: int | None = None) -> str:
    """
    Generate a uniformly random numeric code of fixed length.

    The first digit is never zero, so the code always has exactly ``length``
    significant digits.

    Args:
        length: Number of digits (defaults to settings.otp_length)

    Returns:
        The code as a string of digits
    """
    length = length or settings.otp_length
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def hash_secret(plain: str, rounds: int | None = None) -> str:
    """Hash a secret with a fresh bcrypt salt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.otp_hash_rounds)
    return bcrypt.hashpw(plain.encode(), salt).decode()


def verify_secret(plain: str, hashed: str) -> bool:
    """
    Compare a candidate secret against a stored bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


__all__ = [
    "generate_numeric_code",
    "hash_secret",
    "verify_secret",
]
