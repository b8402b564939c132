"""
Cryptographic helpers — password hashing.

Uses argon2 for passwords (via argon2-cffi).
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

_password_hasher = PasswordHasher()


class PasswordHashingError(Exception):
    """Raised when the hasher itself fails (not on a wrong password)."""


def hash_password(plain_password: str) -> str:
    """Hash *plain_password* with argon2id.

    Returns:
        Argon2 hash string (includes algorithm parameters and salt).

    Raises:
        PasswordHashingError: if argon2 fails to produce a hash.
    """
    try:
        return _password_hasher.hash(plain_password)
    except HashingError as e:
        raise PasswordHashingError(str(e)) from e


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify *plain_password* against an argon2 *password_hash*.

    Returns:
        ``True`` if the password matches, ``False`` for a wrong password or
        an unreadable hash.
    """
    try:
        return _password_hasher.verify(password_hash, plain_password)
    except (VerificationError, InvalidHashError):
        return False
