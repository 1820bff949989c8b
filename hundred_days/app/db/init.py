from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from .mongo import CHALLENGES_COL, CHECK_INS_COL, SEEN_MILESTONES_COL, USERS_COL


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db[USERS_COL].create_index("email", unique=True)
    await db[USERS_COL].create_index("username_lower", unique=True, sparse=True)
    await db[CHALLENGES_COL].create_index([("user_id", ASCENDING), ("is_archived", ASCENDING)])
    await db[CHECK_INS_COL].create_index([("challenge_id", ASCENDING), ("day_number", DESCENDING)], unique=True)
    await db[CHECK_INS_COL].create_index([("challenge_id", ASCENDING), ("day_key", ASCENDING)], unique=True)
    await db[CHECK_INS_COL].create_index([("user_id", ASCENDING), ("date", DESCENDING)])
    await db[SEEN_MILESTONES_COL].create_index([("challenge_id", ASCENDING), ("day", ASCENDING)], unique=True)
