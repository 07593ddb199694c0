"""
Tests for password hashing and JWT helpers.
"""

from datetime import timedelta

import pytest

from sport_scheduler.services import auth_service
from sport_scheduler.services.errors import InvalidInput


def test_hash_and_verify_password():
    hashed = auth_service.hash_password("secret123")
    assert hashed != "secret123"
    assert auth_service.verify_password("secret123", hashed)
    assert not auth_service.verify_password("secret124", hashed)


def test_verify_password_with_malformed_hash():
    assert auth_service.verify_password("secret123", "not-a-bcrypt-hash") is False
    assert auth_service.verify_password("", "whatever") is False
    assert auth_service.verify_password("secret123", None) is False


@pytest.mark.parametrize("password", ["", None, "short1", "abcdefgh"])
def test_validate_password_rejects_weak(password):
    with pytest.raises(InvalidInput):
        auth_service.validate_password(password)


def test_validate_password_accepts_strong():
    auth_service.validate_password("abcdefg1")


def test_token_round_trip():
    token = auth_service.create_access_token({"user_id": 7, "role": "admin"})
    payload = auth_service.verify_token(token)
    assert payload["user_id"] == 7
    assert payload["role"] == "admin"
    assert "exp" in payload


def test_expired_token_is_rejected():
    token = auth_service.create_access_token({"user_id": 7}, expires_delta=timedelta(seconds=-5))
    assert auth_service.verify_token(token) is None


def test_garbage_token_is_rejected():
    assert auth_service.verify_token("not.a.token") is None
