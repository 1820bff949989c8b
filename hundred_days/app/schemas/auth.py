from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from .user import UserPublic


class SignupResponse(BaseModel):
    user: UserPublic


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserPublic


class RefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    message: str = "Signed out."
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionInfo(BaseModel):
    session_id: str
    status: Literal["active", "revoked", "unknown"]
    created_at: datetime | None
    last_seen: datetime | None
    ip: str | None = None
    user_agent: str | None = None
    is_current: bool = False
