from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import require_admin
from ...dependencies import get_mongo_db
from ...schemas import ProStatusUpdate, UserPublic
from ...services.subscriptions import set_pro_status

router = APIRouter()


@router.put("/users/{user_id}/pro", response_model=UserPublic)
async def update_pro_status(
    user_id: str,
    payload: ProStatusUpdate,
    admin: UserPublic = Depends(require_admin),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    """Grant or revoke the Pro entitlement (admin only, see ADMIN_EMAIL)."""
    return await set_pro_status(db, user_id, payload.is_pro, payload.expires_at)
