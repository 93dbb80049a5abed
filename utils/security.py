"""
Password and token-id helpers.

Passwords are hashed with Argon2 (argon2-cffi); a stored hash that was made
with older parameters is upgraded on the next successful login.
"""
from __future__ import annotations

import uuid

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

MIN_PASSWORD_LENGTH = 8

ph = PasswordHasher()


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True when `password` matches; malformed hashes count as a mismatch."""
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def password_needs_rehash(password_hash: str) -> bool:
    return ph.check_needs_rehash(password_hash)


def password_too_short(password: str) -> bool:
    return len(password or "") < MIN_PASSWORD_LENGTH


def generate_jti() -> str:
    """Random id placed in every token so two tokens never collide."""
    return str(uuid.uuid4())
