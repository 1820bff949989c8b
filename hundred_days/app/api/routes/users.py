import logging

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from redis.asyncio import Redis

from ...core.auth import get_current_token, get_current_user
from ...dependencies import get_mongo_db, get_redis
from ...schemas import (
    PasswordChange,
    PasswordChangeResponse,
    ProfileUpdate,
    UsernameAvailability,
    UsernameUpdate,
    UserPublic,
)
from ...services import sessions as session_service
from ...services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me/profile", response_model=UserPublic)
async def get_profile(current_user: UserPublic = Depends(get_current_user)) -> UserPublic:
    return current_user


@router.patch("/me/profile", response_model=UserPublic)
async def update_profile(
    payload: ProfileUpdate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    return await user_service.update_profile(db, current_user.id, payload)


@router.put("/me/username", response_model=UserPublic)
async def set_username(
    payload: UsernameUpdate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    return await user_service.set_username(db, current_user.id, payload.username)


@router.put("/me/password", response_model=PasswordChangeResponse)
async def change_password(
    payload: PasswordChange,
    token_payload: dict = Depends(get_current_token),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
    redis: Redis = Depends(get_redis),
) -> PasswordChangeResponse:
    """Change the password and sign out every other device."""
    await user_service.change_password(db, current_user.id, payload.current_password, payload.new_password)
    revoked = await session_service.revoke_other_sessions(
        redis, current_user.id, token_payload["sid"], reason="password_changed"
    )
    logger.info(f"Password changed for user {current_user.id}; {revoked} other sessions revoked")
    return PasswordChangeResponse(revoked_sessions=revoked)


@router.get("/username-available", response_model=UsernameAvailability)
async def username_available(
    username: str = Query(..., max_length=50),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UsernameAvailability:
    """Check a username before claiming it. Invalid names are never available."""
    username = username.strip()
    valid = user_service.validate_username(username)
    available = valid and await user_service.is_username_available(db, username, exclude_user_id=current_user.id)
    return UsernameAvailability(username=username, valid=valid, available=available)
