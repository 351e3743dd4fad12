"""
Password hashing with Argon2.

Hashes produced by werkzeug's PBKDF2 helper (older accounts imported from the
storefront) still verify and are flagged for rehashing on the next login.
"""

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHash
from werkzeug.security import check_password_hash as check_pbkdf2
import logging

logger = logging.getLogger(__name__)

ph = PasswordHasher(
    memory_cost=512,  # KiB
    time_cost=2,
    parallelism=2,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2."""
    if not password:
        raise ValueError("Password cannot be empty")
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against an Argon2 or legacy PBKDF2 hash.

    Args:
        password: Plain text password to check
        password_hash: Stored hash string

    Returns:
        True if password matches, False otherwise
    """
    if not password or not password_hash:
        return False

    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash):
        pass

    if password_hash.startswith(('pbkdf2:', 'scrypt:')):
        if check_pbkdf2(password_hash, password):
            logger.warning("User has legacy werkzeug hash - should be migrated to Argon2")
            return True

    return False


def password_needs_rehash(password_hash: str) -> bool:
    """True for legacy werkzeug hashes and Argon2 hashes with outdated parameters."""
    if password_hash.startswith(('pbkdf2:', 'scrypt:')):
        return True
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHash:
        return True
