from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db.mongo import SEEN_MILESTONES_COL

MILESTONE_DAYS = (7, 10, 21, 30, 50, 75, 90, 100)

_MILESTONE_EMOJI = {
    7: "🌟",
    10: "🔟",
    21: "🧱",
    30: "🎯",
    50: "💪",
    75: "🚀",
    90: "🧠",
    100: "🏆",
}

_MILESTONE_MESSAGES = {
    7: "Incredible! You've completed your first week. This is where real progress begins!",
    10: "Double digits! 10 days shows serious commitment. Keep this momentum going!",
    21: "21 days - you're building a lasting habit! Research shows this is when habits start to stick.",
    30: "A full month complete! You've shown incredible discipline to make it this far.",
    50: "Halfway to 100! What an achievement. You're proving your dedication every day.",
    75: "75 days - you're in elite territory now! Most people never make it this far.",
    90: "90 days! Research shows it takes about 90 days to establish lasting behavior change. You did it!",
    100: "100 DAYS COMPLETE! 🎉 You've achieved something truly remarkable. Be proud of yourself!",
}

MOTIVATIONAL_MESSAGES = (
    "Great job! Another day complete.",
    "You're building momentum! Keep going!",
    "Consistency is key, and you're crushing it!",
    "Progress happens one day at a time. Well done!",
    "Every check-in brings you closer to your goal!",
    "You showed up today. That's what matters most!",
    "Small steps lead to big results. Nice work!",
    "Your future self will thank you for today's effort.",
)


@dataclass(frozen=True)
class Milestone:
    day: int
    tag: str
    emoji: str
    message: str


def is_milestone_day(day: int) -> bool:
    return day in MILESTONE_DAYS


def evaluate_milestone(day: int) -> Milestone | None:
    if not is_milestone_day(day):
        return None
    return Milestone(
        day=day,
        tag=f"day_{day}",
        emoji=_MILESTONE_EMOJI.get(day, "✨"),
        message=_MILESTONE_MESSAGES[day],
    )


def next_milestone(day: int) -> Milestone | None:
    """First milestone strictly after ``day``."""
    for candidate in MILESTONE_DAYS:
        if candidate > day:
            return evaluate_milestone(candidate)
    return None


def random_motivational_message(rng: random.Random | None = None) -> str:
    return (rng or random).choice(MOTIVATIONAL_MESSAGES)


async def mark_milestone_seen(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, day: int) -> None:
    await db[SEEN_MILESTONES_COL].update_one(
        {"challenge_id": challenge_id, "day": day},
        {
            "$setOnInsert": {
                "user_id": user_id,
                "challenge_id": challenge_id,
                "day": day,
                "seen_at": datetime.now(timezone.utc),
            }
        },
        upsert=True,
    )


async def list_seen_milestones(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str) -> list[int]:
    cursor = db[SEEN_MILESTONES_COL].find({"user_id": user_id, "challenge_id": challenge_id})
    return sorted([doc["day"] async for doc in cursor])


async def should_show_milestone(db: AsyncIOMotorDatabase, user_id: str, challenge_id: str, day: int) -> bool:
    if not is_milestone_day(day):
        return False
    seen = await db[SEEN_MILESTONES_COL].find_one({"user_id": user_id, "challenge_id": challenge_id, "day": day})
    return seen is None


async def delete_seen_milestones(db: AsyncIOMotorDatabase, challenge_id: str) -> None:
    await db[SEEN_MILESTONES_COL].delete_many({"challenge_id": challenge_id})
