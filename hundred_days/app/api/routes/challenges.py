from fastapi import APIRouter, Depends, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import (
    ChallengeCreate,
    ChallengeOut,
    ChallengeUpdate,
    StreakRefreshResponse,
    UserPublic,
)
from ...services import challenges as challenge_service
from ...services.checkins import current_day

router = APIRouter()


@router.get("/", response_model=list[ChallengeOut])
async def list_challenges(
    include_archived: bool = False,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[ChallengeOut]:
    today = current_day(current_user)
    docs = await challenge_service.list_challenges(db, current_user.id, include_archived=include_archived)
    return [challenge_service.document_to_challenge(doc, today) for doc in docs]


@router.post("/", response_model=ChallengeOut, status_code=status.HTTP_201_CREATED)
async def create_challenge(
    payload: ChallengeCreate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ChallengeOut:
    doc = await challenge_service.create_challenge(db, current_user, payload.title)
    return challenge_service.document_to_challenge(doc, current_day(current_user))


@router.post("/refresh-streaks", response_model=StreakRefreshResponse)
async def refresh_streaks(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> StreakRefreshResponse:
    """Reset streaks on challenges that missed a day. Clients call this on app launch."""
    updated = await challenge_service.refresh_streaks(db, current_user.id, current_day(current_user))
    return StreakRefreshResponse(updated=updated)


@router.get("/{challenge_id}", response_model=ChallengeOut)
async def get_challenge(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ChallengeOut:
    doc = await challenge_service.get_challenge(db, current_user.id, challenge_id)
    return challenge_service.document_to_challenge(doc, current_day(current_user))


@router.patch("/{challenge_id}", response_model=ChallengeOut)
async def rename_challenge(
    challenge_id: str,
    payload: ChallengeUpdate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ChallengeOut:
    doc = await challenge_service.rename_challenge(db, current_user.id, challenge_id, payload.title)
    return challenge_service.document_to_challenge(doc, current_day(current_user))


@router.post("/{challenge_id}/archive", response_model=ChallengeOut)
async def archive_challenge(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> ChallengeOut:
    doc = await challenge_service.archive_challenge(db, current_user.id, challenge_id)
    return challenge_service.document_to_challenge(doc, current_day(current_user))


@router.delete("/{challenge_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_challenge(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> Response:
    await challenge_service.delete_challenge(db, current_user.id, challenge_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
