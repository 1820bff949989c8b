from __future__ import annotations

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..core.config import settings
from ..core.errors import InvalidUsernameError, NotFoundError, UsernameTakenError
from ..core.security import get_password_hash, verify_password
from ..db.mongo import USERS_COL
from ..schemas.user import ProfileUpdate, UserCreate, UserLogin, UserPublic

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9]{3,20}$")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _object_id(user_id: str) -> ObjectId | None:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


async def find_user_by_email(db: AsyncIOMotorDatabase, email: str) -> dict | None:
    return await db[USERS_COL].find_one({"email": email.lower()})


async def get_user_by_id(db: AsyncIOMotorDatabase, user_id: str) -> dict | None:
    object_id = _object_id(user_id)
    if object_id is None:
        return None
    return await db[USERS_COL].find_one({"_id": object_id})


def document_to_user(doc: dict) -> UserPublic:
    return UserPublic(
        id=str(doc["_id"]),
        email=doc["email"],
        username=doc.get("username"),
        display_name=doc.get("display_name"),
        photo_url=doc.get("photo_url"),
        timezone=doc.get("timezone") or settings.default_timezone,
        is_pro=doc.get("is_pro", False),
        pro_expires_at=doc.get("pro_expires_at"),
        created_at=doc.get("created_at", _now()),
    )


def user_timezone(user: UserPublic) -> ZoneInfo:
    try:
        return ZoneInfo(user.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(settings.default_timezone)


async def create_user(db: AsyncIOMotorDatabase, payload: UserCreate) -> UserPublic:
    email = payload.email.lower()
    if await find_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="That email is already registered.")

    now = _now()
    user_doc = {
        "email": email,
        "password_hash": get_password_hash(payload.password),
        "display_name": payload.display_name,
        "timezone": settings.default_timezone,
        "is_pro": False,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = await db[USERS_COL].insert_one(user_doc)
    except DuplicateKeyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="That email is already registered.") from exc
    user_doc["_id"] = result.inserted_id
    return document_to_user(user_doc)


async def authenticate_user(db: AsyncIOMotorDatabase, payload: UserLogin) -> dict:
    user_doc = await find_user_by_email(db, payload.email)
    if not user_doc or not verify_password(payload.password, user_doc.get("password_hash", "")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password.")
    return user_doc


async def update_user_fields(db: AsyncIOMotorDatabase, user_id: str, fields: dict) -> UserPublic:
    object_id = _object_id(user_id)
    if object_id is None:
        raise NotFoundError("User not found.")
    doc = await db[USERS_COL].find_one_and_update(
        {"_id": object_id},
        {"$set": {**fields, "updated_at": _now()}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise NotFoundError("User not found.")
    return document_to_user(doc)


async def update_user_password(db: AsyncIOMotorDatabase, user_id: str, new_password: str) -> UserPublic:
    return await update_user_fields(db, user_id, {"password_hash": get_password_hash(new_password)})


async def change_password(db: AsyncIOMotorDatabase, user_id: str, current_password: str, new_password: str) -> UserPublic:
    doc = await get_user_by_id(db, user_id)
    if not doc:
        raise NotFoundError("User not found.")
    if not verify_password(current_password, doc.get("password_hash", "")):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect.")
    if current_password == new_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New password must be different.")
    return await update_user_password(db, user_id, new_password)


def validate_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.match(username or ""))


async def is_username_available(db: AsyncIOMotorDatabase, username: str, exclude_user_id: str | None = None) -> bool:
    doc = await db[USERS_COL].find_one({"username_lower": username.lower()})
    if doc is None:
        return True
    return exclude_user_id is not None and str(doc["_id"]) == exclude_user_id


async def set_username(db: AsyncIOMotorDatabase, user_id: str, username: str) -> UserPublic:
    username = username.strip()
    if not validate_username(username):
        raise InvalidUsernameError()
    if not await is_username_available(db, username, exclude_user_id=user_id):
        raise UsernameTakenError()
    try:
        return await update_user_fields(db, user_id, {"username": username, "username_lower": username.lower()})
    except DuplicateKeyError as exc:
        # lost a race against another signup
        raise UsernameTakenError() from exc


async def update_profile(db: AsyncIOMotorDatabase, user_id: str, payload: ProfileUpdate) -> UserPublic:
    fields = payload.model_dump(exclude_none=True)
    if "timezone" in fields:
        try:
            ZoneInfo(fields["timezone"])
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown timezone: {fields['timezone']}",
            ) from exc
    if not fields:
        doc = await get_user_by_id(db, user_id)
        if not doc:
            raise NotFoundError("User not found.")
        return document_to_user(doc)
    return await update_user_fields(db, user_id, fields)
