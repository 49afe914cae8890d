"""Tests for token issuance and verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from opphub.auth.jwt import (
    REFRESH_TOKEN_BYTES,
    WrongTokenTypeError,
    _encode,
    create_access_token,
    create_admin_token,
    generate_refresh_token,
    get_token_expiration,
    hash_refresh_token,
    is_token_expired,
    verify_token,
)
from opphub.config import get_settings


class TestAccessToken:
    def test_create_and_verify(self) -> None:
        token = create_access_token("user-1")
        payload = verify_token(token, expected_type="access")
        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert payload["iss"] == "opphub"

    def test_expires_in_fifteen_minutes(self) -> None:
        payload = verify_token(create_access_token("user-1"))
        assert payload["exp"] - payload["iat"] == 15 * 60

    def test_unique_per_issue(self) -> None:
        assert create_access_token("user-1") != create_access_token("user-1")

    def test_admin_token_rejected_as_access(self) -> None:
        with pytest.raises(WrongTokenTypeError, match="Expected token type"):
            verify_token(create_admin_token("admin-1"), expected_type="access")

    def test_access_token_rejected_as_admin(self) -> None:
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(create_access_token("user-1"), expected_type="admin")

    def test_expired(self) -> None:
        token = _encode("user-1", "access", timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            verify_token(token)

    def test_bad_signature(self) -> None:
        settings = get_settings()
        forged = jwt.encode(
            {"sub": "user-1", "type": "access", "iat": datetime.now(timezone.utc),
             "exp": datetime.now(timezone.utc) + timedelta(minutes=5), "iss": settings.jwt_issuer},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidSignatureError):
            verify_token(forged)

    def test_garbage(self) -> None:
        with pytest.raises(jwt.DecodeError):
            verify_token("not.a.token")


class TestAdminToken:
    def test_lasts_one_day(self) -> None:
        payload = verify_token(create_admin_token("admin-1"), expected_type="admin")
        assert payload["sub"] == "admin-1"
        assert payload["exp"] - payload["iat"] == 24 * 3600


class TestRefreshToken:
    def test_eighty_hex_chars(self) -> None:
        token = generate_refresh_token()
        assert len(token) == REFRESH_TOKEN_BYTES * 2
        int(token, 16)

    def test_random(self) -> None:
        assert generate_refresh_token() != generate_refresh_token()

    def test_hash_is_stable_sha256(self) -> None:
        token = generate_refresh_token()
        assert hash_refresh_token(token) == hash_refresh_token(token)
        assert len(hash_refresh_token(token)) == 64
        assert hash_refresh_token(token) != token


class TestExpiration:
    def test_reads_exp_without_verifying(self) -> None:
        token = create_access_token("user-1")
        expiration = get_token_expiration(token)
        assert expiration is not None
        assert expiration > datetime.now(timezone.utc)
        assert not is_token_expired(token)

    def test_expired_token(self) -> None:
        assert is_token_expired(_encode("user-1", "access", timedelta(seconds=-5)))

    def test_garbage_has_no_expiration(self) -> None:
        assert get_token_expiration("garbage") is None
        assert is_token_expired("garbage")
