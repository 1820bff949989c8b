from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import (
    CheckInCreate,
    CheckInOut,
    CheckInPage,
    CheckInResult,
    CheckInUpdate,
    PendingCheckInBatch,
    PendingCheckInSyncResponse,
    TodayStatus,
    UserPublic,
)
from ...services import checkins as checkin_service

router = APIRouter()


@router.post(
    "/challenges/{challenge_id}/check-ins",
    response_model=CheckInResult,
    status_code=status.HTTP_201_CREATED,
)
async def check_in(
    challenge_id: str,
    payload: CheckInCreate | None = None,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> CheckInResult:
    fields = payload.model_dump(exclude_none=True) if payload else {}
    return await checkin_service.check_in(db, current_user, challenge_id, **fields)


@router.get("/challenges/{challenge_id}/check-ins", response_model=CheckInPage)
async def list_check_ins(
    challenge_id: str,
    limit: int | None = Query(default=None, ge=1, le=100),
    before_day: int | None = Query(default=None, ge=1),
    grouped: bool = False,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> CheckInPage:
    items, has_more = await checkin_service.list_check_ins(
        db, current_user.id, challenge_id, limit=limit, before_day=before_day
    )
    return CheckInPage(
        items=items,
        has_more=has_more,
        next_before_day=items[-1].day_number if has_more and items else None,
        groups=checkin_service.group_by_month(items) if grouped else None,
    )


@router.get("/challenges/{challenge_id}/check-ins/today", response_model=TodayStatus)
async def today_status(
    challenge_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> TodayStatus:
    checked_in = await checkin_service.is_checked_in_today(db, current_user, challenge_id)
    return TodayStatus(
        challenge_id=challenge_id,
        checked_in_today=checked_in,
        day=checkin_service.current_day(current_user),
    )


@router.patch("/challenges/{challenge_id}/check-ins/{day_number}", response_model=CheckInOut)
async def update_check_in(
    challenge_id: str,
    day_number: int,
    payload: CheckInUpdate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> CheckInOut:
    # explicit nulls clear a note or photo
    fields = payload.model_dump(exclude_unset=True)
    return await checkin_service.update_check_in(db, current_user.id, challenge_id, day_number, fields)


@router.post("/check-ins/sync", response_model=PendingCheckInSyncResponse)
async def sync_pending_check_ins(
    payload: PendingCheckInBatch,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> PendingCheckInSyncResponse:
    """Replay check-ins queued while the client was offline."""
    results = await checkin_service.sync_pending_check_ins(db, current_user, payload.items)
    return PendingCheckInSyncResponse(
        results=results,
        applied=sum(1 for r in results if r.status == "applied"),
        remaining=sum(1 for r in results if r.status == "failed"),
    )
