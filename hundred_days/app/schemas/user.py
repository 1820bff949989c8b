from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = Field(default=None, max_length=50)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserPublic(BaseModel):
    id: str
    email: EmailStr
    username: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
    timezone: str = "UTC"
    is_pro: bool = False
    pro_expires_at: datetime | None = None
    created_at: datetime


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, max_length=50)
    photo_url: str | None = Field(default=None, max_length=2048)
    timezone: str | None = None


class UsernameUpdate(BaseModel):
    username: str


class UsernameAvailability(BaseModel):
    username: str
    valid: bool
    available: bool


class ProStatusUpdate(BaseModel):
    is_pro: bool
    expires_at: datetime | None = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)


class PasswordChangeResponse(BaseModel):
    message: str = "Password updated."
    revoked_sessions: int = 0
