# =============================================================================
# tests/test_security.py - Password hashing and token signing
# =============================================================================

from datetime import timedelta

import pytest
from jose import jwt

from app.core import security
from app.core.config import settings
from app.utils.exceptions import ConfigurationError, InvalidTokenError, TokenGenerationError


class TestPasswordHashing:

    def test_hash_verifies(self):
        hashed = security.get_password_hash("secret123")

        assert hashed != "secret123"
        assert security.verify_password("secret123", hashed)
        assert not security.verify_password("wrong-password", hashed)

    def test_long_password_is_truncated_consistently(self):
        long_password = "x" * 100
        hashed = security.get_password_hash(long_password)

        assert security.verify_password(long_password, hashed)


class TestAccessTokens:

    def test_round_trip_returns_user_id(self):
        token = security.create_access_token(42)

        assert security.decode_access_token(token) == 42

    def test_user_id_is_the_only_claim_besides_expiry(self):
        token = security.create_access_token(7)
        claims = jwt.get_unverified_claims(token)

        assert set(claims) == {"sub", "exp"}
        assert claims["sub"] == "7"

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError):
            security.decode_access_token("not-a-jwt")

    def test_expired_token_rejected(self):
        token = security.create_access_token(1, expires_delta=timedelta(seconds=-10))

        with pytest.raises(InvalidTokenError):
            security.decode_access_token(token)

    def test_token_signed_with_other_secret_rejected(self):
        token = jwt.encode({"sub": "1"}, "someone-else", algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            security.decode_access_token(token)

    def test_refresh_tokens_issued_together_differ(self):
        first = security.create_refresh_token(1)
        second = security.create_refresh_token(1)

        assert first != second
        assert jwt.get_unverified_claims(first)["sub"] == "1"

    def test_refresh_token_is_not_an_access_token(self):
        refresh = security.create_refresh_token(1)

        with pytest.raises(InvalidTokenError):
            security.decode_access_token(refresh)

    def test_non_integer_subject_rejected(self):
        token = jwt.encode({"sub": "abc"}, settings.ACCESS_TOKEN_SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            security.decode_access_token(token)


class TestMissingConfiguration:

    def test_signing_without_access_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "ACCESS_TOKEN_SECRET", None)

        with pytest.raises(ConfigurationError):
            security.create_access_token(1)

    def test_signing_without_refresh_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "REFRESH_TOKEN_SECRET", "")

        with pytest.raises(ConfigurationError):
            security.create_refresh_token(1)

    def test_decoding_without_access_secret(self, monkeypatch):
        token = security.create_access_token(1)
        monkeypatch.setattr(settings, "ACCESS_TOKEN_SECRET", None)

        with pytest.raises(ConfigurationError):
            security.decode_access_token(token)

    def test_signing_failure_is_wrapped(self, monkeypatch):
        monkeypatch.setattr(settings, "JWT_ALGORITHM", "NOT-AN-ALGORITHM")

        with pytest.raises(TokenGenerationError):
            security.create_access_token(1)
