from __future__ import annotations

import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.user import UserPublic
from .users import update_user_fields

logger = logging.getLogger(__name__)


def is_pro_user(user: UserPublic, now: datetime | None = None) -> bool:
    if not user.is_pro:
        return False
    if user.pro_expires_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    expires_at = user.pro_expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at > now


async def set_pro_status(
    db: AsyncIOMotorDatabase,
    user_id: str,
    is_pro: bool,
    expires_at: datetime | None = None,
) -> UserPublic:
    user = await update_user_fields(db, user_id, {"is_pro": is_pro, "pro_expires_at": expires_at if is_pro else None})
    logger.info(f"Pro status for user {user_id} set to {is_pro} (expires {expires_at})")
    return user
