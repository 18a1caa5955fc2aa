"""
Unit tests for authentication service.
Tests password hashing, JWT tokens, and email/password validation.
"""
import jwt
import pytest
from datetime import timedelta
from liprobakin.services import auth_service


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password(self):
        """Same password hashes differently (salt) but verifies against both."""
        password = "test_password_123"
        hash1 = auth_service.hash_password(password)
        hash2 = auth_service.hash_password(password)

        assert hash1 != hash2
        assert auth_service.verify_password(password, hash1)
        assert auth_service.verify_password(password, hash2)

    def test_verify_password_incorrect(self):
        password_hash = auth_service.hash_password("test_password_123")
        assert auth_service.verify_password("wrong_password", password_hash) is False

    def test_verify_password_empty(self):
        password_hash = auth_service.hash_password("test_password_123")
        assert auth_service.verify_password("", password_hash) is False

    def test_verify_password_malformed_hash(self):
        assert auth_service.verify_password("secret", "not-a-bcrypt-hash") is False


class TestPasswordRules:
    """Admin and signup password rules."""

    def test_six_characters_is_enough(self):
        auth_service.validate_password("abcdef")

    @pytest.mark.parametrize("password", [None, "", "abc", "abcde"])
    def test_too_short(self, password):
        with pytest.raises(ValueError, match="at least 6 characters"):
            auth_service.validate_password(password)


class TestEmailNormalization:

    def test_lowercases_and_trims(self):
        assert auth_service.normalize_email("  Coach@Liprobakin.CD ") == "coach@liprobakin.cd"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "@league.cd", "user@localhost"])
    def test_invalid(self, email):
        with pytest.raises(ValueError):
            auth_service.normalize_email(email)


class TestJWTTokens:
    """Tests for JWT token creation and verification."""

    def test_round_trip(self):
        token = auth_service.create_access_token({"user_id": 1, "email": "fan@league.cd"})
        payload = auth_service.verify_token(token)
        assert payload["user_id"] == 1
        assert payload["email"] == "fan@league.cd"
        assert "exp" in payload

    def test_expired_token(self):
        token = auth_service.create_access_token({"user_id": 1}, expires_delta=timedelta(seconds=-10))
        assert auth_service.verify_token(token) is None

    def test_invalid_token(self):
        assert auth_service.verify_token("not.a.token") is None

    def test_token_signed_with_other_key(self):
        token = jwt.encode({"user_id": 1}, "a-completely-different-signing-secret-value", algorithm=auth_service.JWT_ALGORITHM)
        assert auth_service.verify_token(token) is None


def test_generate_refresh_token_is_unique():
    tokens = {auth_service.generate_refresh_token() for _ in range(20)}
    assert len(tokens) == 20
    assert all(len(t) > 32 for t in tokens)
