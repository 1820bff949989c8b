from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal
from uuid import uuid4

import jwt
from fastapi import HTTPException, status
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from .config import settings

pwd_context = CryptContext(schemes=["argon2", "bcrypt"], deprecated="auto")

TokenType = Literal["access", "refresh"]

_WRONG_TYPE = {"access": "Not an access token.", "refresh": "Not a refresh token."}


class TokenError(HTTPException):
    def __init__(self, detail: str = "Invalid token."):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


@dataclass(frozen=True)
class SessionTokens:
    """Access and refresh tokens minted for one login session."""

    session_id: str
    access_token: str
    access_jti: str
    refresh_token: str
    refresh_jti: str


def get_password_hash(password: str) -> str:
    if settings.password_hash_scheme not in pwd_context.schemes():
        raise ValueError(f"Unsupported password hash scheme: {settings.password_hash_scheme}")
    return pwd_context.hash(password, scheme=settings.password_hash_scheme)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except UnknownHashError:
        return False


def _lifetime(token_type: TokenType) -> timedelta:
    if token_type == "access":
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(minutes=settings.refresh_token_expire_minutes)


def _mint(user_id: str, session_id: str, token_type: TokenType) -> tuple[str, str]:
    now = datetime.now(timezone.utc)
    jti = uuid4().hex
    payload: dict[str, Any] = {
        "sub": user_id,
        "sid": session_id,
        "type": token_type,
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": int((now + _lifetime(token_type)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm), jti


def issue_session_tokens(user_id: str, session_id: str | None = None) -> SessionTokens:
    """Mint a fresh token pair. A new session id is generated at login; refresh reuses the existing one."""
    session_id = session_id or uuid4().hex
    access_token, access_jti = _mint(user_id, session_id, "access")
    refresh_token, refresh_jti = _mint(user_id, session_id, "refresh")
    return SessionTokens(
        session_id=session_id,
        access_token=access_token,
        access_jti=access_jti,
        refresh_token=refresh_token,
        refresh_jti=refresh_jti,
    )


def decode_token(token: str, expected_type: TokenType | None = None) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise TokenError(detail="Token has expired.") from exc
    except jwt.PyJWTError as exc:
        raise TokenError(detail="Could not decode token.") from exc

    if not payload.get("sub"):
        raise TokenError(detail="Token has no user.")
    if not payload.get("sid"):
        raise TokenError(detail="Token has no session.")
    if expected_type and payload.get("type") != expected_type:
        raise TokenError(detail=_WRONG_TYPE[expected_type])
    return payload
