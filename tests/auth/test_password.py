"""Tests for password hashing and validation."""

import pytest

from opphub.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    hash_password_async,
    validate_password_strength,
    verify_password,
    verify_password_async,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("Password1!")
        assert verify_password("Password1!", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("Password1!")
        assert verify_password("Password2!", hashed) is False

    def test_hash_is_argon2id(self):
        assert hash_password("Password1!").startswith("$argon2id$")

    def test_salted(self):
        assert hash_password("Password1!") != hash_password("Password1!")

    def test_check_needs_rehash(self):
        assert check_needs_rehash(hash_password("Password1!")) is False


class TestAsyncHashing:
    @pytest.mark.asyncio
    async def test_round_trip(self):
        hashed = await hash_password_async("Password1!")
        assert await verify_password_async("Password1!", hashed) is True
        assert await verify_password_async("nope", hashed) is False

    @pytest.mark.asyncio
    async def test_missing_hash_is_false(self):
        assert await verify_password_async("Password1!", None) is False


class TestPasswordStrength:
    def test_strong_password_accepted(self):
        validate_password_strength("Password1!")

    @pytest.mark.parametrize(
        "password",
        ["", "   ", "Short1", "nouppercase1", "NOLOWERCASE1", "NoDigitHere", "A" * 100 + "a" * 29 + "1"],
    )
    def test_weak_passwords_rejected(self, password):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength(password)
