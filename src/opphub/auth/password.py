"""
Account password hashing (argon2id) and strength checks.

Hashing is CPU-bound and slow on purpose. Route handlers and services call the
``*_async`` variants so the work lands in Starlette's thread pool.
"""

from __future__ import annotations

from collections.abc import Callable

import argon2
from starlette.concurrency import run_in_threadpool

from opphub.config import get_settings

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,
)

# Stand-in for accounts that do not exist, so a login attempt for an unknown
# email pays for one verify just like a wrong password does.
_UNKNOWN_ACCOUNT_HASH = _hasher.hash("unknown-account")

_CHARACTER_RULES: list[tuple[Callable[[str], bool], str]] = [
    (lambda p: any(c.isupper() for c in p), "Password must contain at least one uppercase letter"),
    (lambda p: any(c.islower() for c in p), "Password must contain at least one lowercase letter"),
    (lambda p: any(c.isdigit() for c in p), "Password must contain at least one digit"),
]


class PasswordStrengthError(ValueError):
    """The candidate password was rejected; the message says why."""


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True on match. Mismatches and unparseable hashes both yield False."""
    try:
        return _hasher.verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """True when the stored hash was produced with older hasher parameters."""
    return _hasher.check_needs_rehash(password_hash)


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: str, password_hash: str | None) -> bool:
    """Thread-pool verify. ``None`` (no such account) still costs one verify."""
    target = password_hash if password_hash is not None else _UNKNOWN_ACCOUNT_HASH
    matched = await run_in_threadpool(verify_password, password, target)
    return matched and password_hash is not None


def validate_password_strength(password: str) -> None:
    """
    Reject weak passwords with a PasswordStrengthError.

    Length bounds come from ``password_min_length`` / ``password_max_length``;
    the upper bound keeps argon2 input small. Beyond length, one uppercase
    letter, one lowercase letter and one digit are required.
    """
    settings = get_settings()
    if not password or not password.strip():
        raise PasswordStrengthError("Password cannot be empty")
    if len(password) < settings.password_min_length:
        raise PasswordStrengthError(f"Password must be at least {settings.password_min_length} characters")
    if len(password) > settings.password_max_length:
        raise PasswordStrengthError(f"Password must not exceed {settings.password_max_length} characters")
    for passes, message in _CHARACTER_RULES:
        if not passes(password):
            raise PasswordStrengthError(message)
