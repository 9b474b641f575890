"""Tests de la validation des jetons d'accès."""

from backend.domain.auth import bearer_token, create_access_token, decode_token

SECRET = "s3cret"


def test_token_carries_subject() -> None:
    token = create_access_token(SECRET, "HS256", 5, {"sub": "user-7", "email": "a@b.co"})
    data = decode_token(token, SECRET, "HS256")
    assert data.sub == "user-7"
    assert data.email == "a@b.co"


def test_expired_token() -> None:
    token = create_access_token(SECRET, "HS256", -1, {"sub": "user-7"})
    assert decode_token(token, SECRET, "HS256") is None


def test_wrong_secret_or_missing_subject() -> None:
    token = create_access_token(SECRET, "HS256", 5, {"sub": "user-7"})
    assert decode_token(token, "other", "HS256") is None
    no_sub = create_access_token(SECRET, "HS256", 5, {"email": "a@b.co"})
    assert decode_token(no_sub, SECRET, "HS256") is None


def test_bearer_token_parsing() -> None:
    assert bearer_token("Bearer abc.def") == "abc.def"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic Zm9v") is None
    assert bearer_token("Bearer ") is None
    assert bearer_token(None) is None
