from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from hundred_days.app.core.config import settings
from hundred_days.app.core.security import (
    TokenError,
    decode_token,
    get_password_hash,
    issue_session_tokens,
    verify_password,
)


def test_password_round_trip() -> None:
    hashed = get_password_hash("correct horse battery")
    assert hashed != "correct horse battery"
    assert verify_password("correct horse battery", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "plaintext-not-a-hash")


def test_login_tokens_share_a_new_session() -> None:
    tokens = issue_session_tokens("user-1")

    access = decode_token(tokens.access_token, expected_type="access")
    refresh = decode_token(tokens.refresh_token, expected_type="refresh")

    assert access["sub"] == refresh["sub"] == "user-1"
    assert access["sid"] == refresh["sid"] == tokens.session_id
    assert access["jti"] == tokens.access_jti
    assert refresh["jti"] == tokens.refresh_jti
    assert tokens.access_jti != tokens.refresh_jti


def test_refresh_keeps_session_id() -> None:
    first = issue_session_tokens("user-1")
    second = issue_session_tokens("user-1", first.session_id)
    assert second.session_id == first.session_id
    assert second.refresh_jti != first.refresh_jti


def test_wrong_token_type_is_rejected() -> None:
    tokens = issue_session_tokens("user-1")
    with pytest.raises(TokenError) as exc_info:
        decode_token(tokens.refresh_token, expected_type="access")
    assert exc_info.value.detail == "Not an access token."


def test_token_without_session_is_rejected() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "user-1", "type": "access", "exp": int((now + timedelta(minutes=5)).timestamp())},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError) as exc_info:
        decode_token(token)
    assert exc_info.value.detail == "Token has no session."


def test_expired_and_garbage_tokens() -> None:
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    expired = jwt.encode(
        {"sub": "user-1", "sid": "s1", "exp": int(past.timestamp())},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError) as exc_info:
        decode_token(expired)
    assert exc_info.value.detail == "Token has expired."

    with pytest.raises(TokenError) as exc_info:
        decode_token("not-a-jwt")
    assert exc_info.value.status_code == 401
