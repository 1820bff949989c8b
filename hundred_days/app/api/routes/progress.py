from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import ChallengeProgressOut, ProgressOverview, UserPublic
from ...services import progress as progress_service
from ...services.checkins import current_day

router = APIRouter()


@router.get("/progress", response_model=ProgressOverview)
async def progress_overview(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ProgressOverview:
    return await progress_service.get_progress_overview(db, current_user.id, current_day(current_user))


@router.get("/challenges/{challenge_id}/progress", response_model=ChallengeProgressOut)
async def challenge_progress(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ChallengeProgressOut:
    return await progress_service.get_challenge_progress(
        db, current_user.id, challenge_id, current_day(current_user)
    )
