"""Check-in ledger.

A check-in is appended to ``check_ins`` and the owning challenge's counters
are advanced with a conditional update on the previously read
``days_completed``. Two unique indexes (``challenge_id + day_key`` and
``challenge_id + day_number``) back this up when requests race.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..core.config import settings
from ..core.errors import (
    AlreadyCheckedInError,
    ChallengeArchivedError,
    ChallengeCompletedError,
    CheckInConflictError,
    NotFoundError,
)
from ..db.mongo import CHALLENGES_COL, CHECK_INS_COL
from ..schemas.checkins import (
    CheckInOut,
    CheckInResult,
    PendingCheckIn,
    PendingCheckInOutcome,
)
from ..schemas.milestones import MilestoneOut
from ..schemas.user import UserPublic
from .challenges import document_to_challenge, get_challenge, last_check_in_day
from .milestones import evaluate_milestone, random_motivational_message
from .streaks import effective_check_in_day, next_streak_count, to_day
from .users import user_timezone

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def document_to_check_in(doc: dict) -> CheckInOut:
    return CheckInOut(
        id=str(doc["_id"]),
        challenge_id=doc["challenge_id"],
        day_number=doc["day_number"],
        date=doc["date"],
        day_key=to_day(doc["day_key"]),
        note=doc.get("note"),
        photo_url=doc.get("photo_url"),
        quote_id=doc.get("quote_id"),
        prompt_shown=doc.get("prompt_shown"),
        duration_minutes=doc.get("duration_minutes"),
    )


def current_day(user: UserPublic, now: datetime | None = None) -> date:
    return effective_check_in_day(now or _now(), user_timezone(user), settings.checkin_grace_hour)


async def _apply_check_in(
    db: AsyncIOMotorDatabase,
    user: UserPublic,
    challenge: dict,
    at: datetime,
    day: date,
    fields: dict[str, Any],
) -> tuple[dict, dict]:
    if challenge.get("is_archived", False):
        raise ChallengeArchivedError()

    days_completed = challenge.get("days_completed", 0)
    if days_completed >= settings.challenge_length_days:
        raise ChallengeCompletedError()

    last_day = last_check_in_day(challenge)
    if last_day == day:
        raise AlreadyCheckedInError()
    if last_day is not None and day < last_day:
        raise CheckInConflictError("A later check-in already exists for this challenge.")

    streak = next_streak_count(challenge.get("streak_count", 0), last_day, day)
    day_number = days_completed + 1
    challenge_id = str(challenge["_id"])

    record = {
        "challenge_id": challenge_id,
        "user_id": user.id,
        "day_number": day_number,
        "date": at,
        "day_key": day.isoformat(),
        "note": fields.get("note"),
        "photo_url": fields.get("photo_url"),
        "quote_id": fields.get("quote_id"),
        "prompt_shown": fields.get("prompt_shown"),
        "duration_minutes": fields.get("duration_minutes"),
        "created_at": _now(),
    }
    try:
        inserted = await db[CHECK_INS_COL].insert_one(record)
    except DuplicateKeyError as exc:
        key_pattern = (exc.details or {}).get("keyPattern", {})
        if "day_key" in key_pattern:
            raise AlreadyCheckedInError() from exc
        raise CheckInConflictError() from exc
    record["_id"] = inserted.inserted_id

    updates = {
        "streak_count": streak,
        "longest_streak": max(challenge.get("longest_streak", 0), streak),
        "days_completed": day_number,
        "last_check_in_date": at,
        "last_check_in_day": day.isoformat(),
        "is_completed_today": True,
        "last_modified": _now(),
    }
    updated = await db[CHALLENGES_COL].find_one_and_update(
        {"_id": challenge["_id"], "days_completed": days_completed},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    if not updated:
        # another request advanced the challenge first
        await db[CHECK_INS_COL].delete_one({"_id": record["_id"]})
        raise CheckInConflictError()

    logger.info(f"Check-in day {day_number} recorded for challenge {challenge_id} (streak {streak})")
    return updated, record


async def check_in(
    db: AsyncIOMotorDatabase,
    user: UserPublic,
    challenge_id: str,
    now: datetime | None = None,
    **fields: Any,
) -> CheckInResult:
    now = now or _now()
    today = current_day(user, now)
    challenge = await get_challenge(db, user.id, challenge_id)
    updated, record = await _apply_check_in(db, user, challenge, now, today, fields)

    milestone = evaluate_milestone(record["day_number"])
    message = milestone.message if milestone else random_motivational_message()
    challenge_out = document_to_challenge(updated, today)
    return CheckInResult(
        challenge=challenge_out,
        check_in=document_to_check_in(record),
        milestone=MilestoneOut(**asdict(milestone)) if milestone else None,
        motivational_message=message,
        is_challenge_completed=challenge_out.is_completed,
    )


async def is_checked_in_today(
    db: AsyncIOMotorDatabase,
    user: UserPublic,
    challenge_id: str,
    now: datetime | None = None,
) -> bool:
    challenge = await get_challenge(db, user.id, challenge_id)
    return last_check_in_day(challenge) == current_day(user, now)


async def list_check_ins(
    db: AsyncIOMotorDatabase,
    user_id: str,
    challenge_id: str,
    limit: int | None = None,
    before_day: int | None = None,
) -> tuple[list[CheckInOut], bool]:
    """A page of check-ins, newest day first, plus whether more remain."""
    await get_challenge(db, user_id, challenge_id)
    limit = limit or settings.history_page_size
    query: dict[str, Any] = {"challenge_id": challenge_id, "user_id": user_id}
    if before_day is not None:
        query["day_number"] = {"$lt": before_day}
    cursor = db[CHECK_INS_COL].find(query).sort("day_number", DESCENDING).limit(limit + 1)
    docs = [doc async for doc in cursor]
    return [document_to_check_in(doc) for doc in docs[:limit]], len(docs) > limit


def group_by_month(records: list[CheckInOut]) -> dict[str, list[CheckInOut]]:
    groups: dict[str, list[CheckInOut]] = {}
    for record in records:
        groups.setdefault(record.day_key.strftime("%B %Y"), []).append(record)
    for key in groups:
        groups[key].sort(key=lambda r: r.day_number, reverse=True)
    return groups


async def update_check_in(
    db: AsyncIOMotorDatabase,
    user_id: str,
    challenge_id: str,
    day_number: int,
    fields: dict[str, Any],
) -> CheckInOut:
    allowed = {k: v for k, v in fields.items() if k in ("note", "photo_url")}
    query = {"challenge_id": challenge_id, "user_id": user_id, "day_number": day_number}
    if not allowed:
        doc = await db[CHECK_INS_COL].find_one(query)
    else:
        doc = await db[CHECK_INS_COL].find_one_and_update(
            query,
            {"$set": {**allowed, "updated_at": _now()}},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        raise NotFoundError("Check-in not found.")
    return document_to_check_in(doc)


async def update_note(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, day_number: int, note: str | None) -> CheckInOut:
    return await update_check_in(db, user_id, challenge_id, day_number, {"note": note})


async def update_photo(
    db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, day_number: int, photo_url: str | None
) -> CheckInOut:
    return await update_check_in(db, user_id, challenge_id, day_number, {"photo_url": photo_url})


async def activity_heatmap(db: AsyncIOMotorDatabase, user_id: str, since: date) -> dict[date, int]:
    cursor = db[CHECK_INS_COL].find(
        {"user_id": user_id, "day_key": {"$gte": since.isoformat()}},
        {"day_key": 1},
    )
    counter: Counter[str] = Counter()
    async for doc in cursor:
        counter[doc["day_key"]] += 1
    return {to_day(key): count for key, count in sorted(counter.items())}


async def recent_entries(db: AsyncIOMotorDatabase, user_id: str, limit: int = 10) -> list[CheckInOut]:
    cursor = (
        db[CHECK_INS_COL]
        .find(
            {
                "user_id": user_id,
                "$or": [{"note": {"$nin": [None, ""]}}, {"photo_url": {"$nin": [None, ""]}}],
            }
        )
        .sort("date", DESCENDING)
        .limit(limit)
    )
    return [document_to_check_in(doc) async for doc in cursor]


async def sync_pending_check_ins(
    db: AsyncIOMotorDatabase,
    user: UserPublic,
    pending: list[PendingCheckIn],
    now: datetime | None = None,
) -> list[PendingCheckInOutcome]:
    """Replay check-ins a client queued while offline.

    ``duplicate`` items are safe for the client to drop; ``failed`` items
    carry the reason in ``detail``.
    """
    tz = user_timezone(user)
    today = current_day(user, now)
    outcomes: list[PendingCheckInOutcome] = []

    # naive timestamps are UTC; normalise before ordering
    queued = [(item.date if item.date.tzinfo else item.date.replace(tzinfo=timezone.utc), item) for item in pending]
    queued.sort(key=lambda entry: entry[0])

    for at, item in queued:
        day = effective_check_in_day(at, tz, settings.checkin_grace_hour)
        if day > today:
            outcomes.append(PendingCheckInOutcome(id=item.id, status="failed", detail="Check-in date is in the future."))
            continue
        try:
            challenge = await get_challenge(db, user.id, item.challenge_id)
            _, record = await _apply_check_in(
                db,
                user,
                challenge,
                at,
                day,
                {"duration_minutes": item.duration_minutes, "note": item.note},
            )
        except AlreadyCheckedInError:
            outcomes.append(PendingCheckInOutcome(id=item.id, status="duplicate"))
        except (NotFoundError, ChallengeArchivedError, ChallengeCompletedError, CheckInConflictError) as exc:
            logger.warning(f"Pending check-in {item.id} for challenge {item.challenge_id} failed: {exc.detail}")
            outcomes.append(PendingCheckInOutcome(id=item.id, status="failed", detail=exc.detail))
        else:
            outcomes.append(PendingCheckInOutcome(id=item.id, status="applied", day_number=record["day_number"]))

    applied = sum(1 for o in outcomes if o.status == "applied")
    logger.info(f"Replayed {len(outcomes)} pending check-ins for user {user.id}: {applied} applied")
    return outcomes
