from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from ..core.config import settings
from ..core.errors import FreeLimitExceededError, NotFoundError
from ..db.mongo import CHALLENGES_COL, CHECK_INS_COL
from ..schemas.challenges import ChallengeOut
from ..schemas.user import UserPublic
from . import milestones as milestone_service
from .streaks import has_streak_expired, is_challenge_completed, streak_emoji, to_day
from .subscriptions import is_pro_user

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_challenge_id(challenge_id: str) -> ObjectId:
    try:
        return ObjectId(challenge_id)
    except (InvalidId, TypeError) as exc:
        raise NotFoundError("Challenge not found.") from exc


def last_check_in_day(doc: dict) -> date | None:
    value = doc.get("last_check_in_day")
    return to_day(value) if value else None


def document_to_challenge(doc: dict, today: date) -> ChallengeOut:
    length = settings.challenge_length_days
    days_completed = doc.get("days_completed", 0)
    streak = doc.get("streak_count", 0)
    start_date = doc["start_date"]
    return ChallengeOut(
        id=str(doc["_id"]),
        title=doc["title"],
        start_date=start_date,
        end_date=start_date + timedelta(days=length),
        last_check_in_date=doc.get("last_check_in_date"),
        last_check_in_day=last_check_in_day(doc),
        streak_count=streak,
        longest_streak=max(doc.get("longest_streak", 0), streak),
        days_completed=days_completed,
        days_remaining=max(0, length - days_completed),
        progress_percentage=min(1.0, days_completed / length),
        is_completed=is_challenge_completed(doc, length),
        is_completed_today=last_check_in_day(doc) == today,
        has_streak_expired=has_streak_expired(last_check_in_day(doc), today),
        streak_emoji=streak_emoji(streak),
        is_archived=doc.get("is_archived", False),
        created_at=doc.get("created_at", start_date),
        last_modified=doc.get("last_modified"),
    )


async def count_active_challenges(db: AsyncIOMotorDatabase, user_id: str) -> int:
    return await db[CHALLENGES_COL].count_documents({"user_id": user_id, "is_archived": False})


async def create_challenge(db: AsyncIOMotorDatabase, user: UserPublic, title: str) -> dict:
    if not is_pro_user(user):
        active = await count_active_challenges(db, user.id)
        if active >= settings.free_challenge_limit:
            raise FreeLimitExceededError(settings.free_challenge_limit)

    now = _now()
    doc = {
        "user_id": user.id,
        "title": title.strip(),
        "start_date": now,
        "last_check_in_date": None,
        "last_check_in_day": None,
        "streak_count": 0,
        "longest_streak": 0,
        "days_completed": 0,
        "is_completed_today": False,
        "is_archived": False,
        "created_at": now,
        "last_modified": now,
    }
    result = await db[CHALLENGES_COL].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info(f"Challenge {doc['_id']} created for user {user.id}")
    return doc


async def list_challenges(db: AsyncIOMotorDatabase, user_id: str, include_archived: bool = False) -> list[dict]:
    query: dict = {"user_id": user_id}
    if not include_archived:
        query["is_archived"] = False
    cursor = db[CHALLENGES_COL].find(query).sort("created_at", DESCENDING)
    return [doc async for doc in cursor]


async def get_challenge(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str) -> dict:
    doc = await db[CHALLENGES_COL].find_one({"_id": parse_challenge_id(challenge_id), "user_id": user_id})
    if not doc:
        raise NotFoundError("Challenge not found.")
    return doc


async def _update_challenge(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, fields: dict) -> dict:
    doc = await db[CHALLENGES_COL].find_one_and_update(
        {"_id": parse_challenge_id(challenge_id), "user_id": user_id},
        {"$set": {**fields, "last_modified": _now()}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise NotFoundError("Challenge not found.")
    return doc


async def rename_challenge(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, title: str) -> dict:
    return await _update_challenge(db, user_id, challenge_id, {"title": title.strip()})


async def archive_challenge(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str) -> dict:
    return await _update_challenge(db, user_id, challenge_id, {"is_archived": True})


async def delete_challenge(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str) -> None:
    object_id = parse_challenge_id(challenge_id)
    result = await db[CHALLENGES_COL].delete_one({"_id": object_id, "user_id": user_id})
    if result.deleted_count == 0:
        raise NotFoundError("Challenge not found.")
    await db[CHECK_INS_COL].delete_many({"challenge_id": challenge_id})
    await milestone_service.delete_seen_milestones(db, challenge_id)
    logger.info(f"Challenge {challenge_id} deleted with its check-ins")


async def reset_streak_if_missed(db: AsyncIOMotorDatabase, challenge: dict, today: date) -> bool:
    """Zero an expired streak and clear a stale completed-today flag.

    Returns True when the stored document was changed.
    """
    last_day = last_check_in_day(challenge)
    updates: dict = {}
    if has_streak_expired(last_day, today) and challenge.get("streak_count", 0) != 0:
        updates["streak_count"] = 0
    if challenge.get("is_completed_today") and last_day != today:
        updates["is_completed_today"] = False
    if not updates:
        return False
    # guard on the snapshot so a concurrent check-in is never overwritten
    result = await db[CHALLENGES_COL].update_one(
        {"_id": challenge["_id"], "days_completed": challenge.get("days_completed", 0)},
        {"$set": {**updates, "last_modified": _now()}},
    )
    return result.modified_count > 0


async def refresh_streaks(db: AsyncIOMotorDatabase, user_id: str, today: date) -> int:
    updated = 0
    for challenge in await list_challenges(db, user_id):
        if await reset_streak_if_missed(db, challenge, today):
            updated += 1
    return updated
