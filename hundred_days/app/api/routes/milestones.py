from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Path, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import MilestoneEvaluation, MilestoneOut, SeenMilestones, UserPublic
from ...services import milestones as milestone_service
from ...services.challenges import get_challenge

router = APIRouter()


@router.get("/milestones/{day}", response_model=MilestoneEvaluation)
async def evaluate_milestone(day: int = Path(..., ge=0)) -> MilestoneEvaluation:
    milestone = milestone_service.evaluate_milestone(day)
    return MilestoneEvaluation(
        day=day,
        is_milestone=milestone is not None,
        milestone=MilestoneOut(**asdict(milestone)) if milestone else None,
    )


@router.get("/challenges/{challenge_id}/milestones/seen", response_model=SeenMilestones)
async def list_seen_milestones(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> SeenMilestones:
    await get_challenge(db, current_user.id, challenge_id)
    days = await milestone_service.list_seen_milestones(db, current_user.id, challenge_id)
    return SeenMilestones(challenge_id=challenge_id, days=days)


@router.post(
    "/challenges/{challenge_id}/milestones/{day}/seen",
    response_model=SeenMilestones,
    status_code=status.HTTP_200_OK,
)
async def mark_milestone_seen(
    challenge_id: str,
    day: int = Path(..., ge=1),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> SeenMilestones:
    if not milestone_service.is_milestone_day(day):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Day {day} is not a milestone.")
    await get_challenge(db, current_user.id, challenge_id)
    await milestone_service.mark_milestone_seen(db, current_user.id, challenge_id, day)
    days = await milestone_service.list_seen_milestones(db, current_user.id, challenge_id)
    return SeenMilestones(challenge_id=challenge_id, days=days)
