"""Tests for password hashing and tokens."""

from datetime import timedelta

from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_hash_and_verify():
    """A hash verifies its own password and nothing else."""
    hashed = get_password_hash("s3cret-password")

    assert hashed != "s3cret-password"
    assert hashed.startswith("$2")
    assert verify_password("s3cret-password", hashed)
    assert not verify_password("other-password", hashed)


def test_verify_never_raises():
    """Missing or garbage inputs are a failed verification."""
    hashed = get_password_hash("s3cret-password")

    assert not verify_password(None, hashed)
    assert not verify_password("", hashed)
    assert not verify_password("s3cret-password", None)
    assert not verify_password("s3cret-password", "not-a-bcrypt-hash")


def test_token_round_trip():
    """Test creating and decoding an access token."""
    token = create_access_token({"sub": "abc", "is_admin": False})

    payload = decode_access_token(token)

    assert payload is not None
    assert payload["sub"] == "abc"
    assert payload["type"] == "access"


def test_expired_token():
    """Test an expired token does not decode."""
    token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-1))

    assert decode_access_token(token) is None


def test_garbage_token():
    """Test a malformed token does not decode."""
    assert decode_access_token("not.a.token") is None
