from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from .challenges import ChallengeOut
from .milestones import MilestoneOut


class CheckInCreate(BaseModel):
    note: str | None = Field(default=None, max_length=2000)
    photo_url: str | None = Field(default=None, max_length=2048)
    duration_minutes: int | None = Field(default=None, ge=0, le=24 * 60)
    quote_id: str | None = None
    prompt_shown: str | None = Field(default=None, max_length=500)


class CheckInUpdate(BaseModel):
    note: str | None = Field(default=None, max_length=2000)
    photo_url: str | None = Field(default=None, max_length=2048)


class CheckInOut(BaseModel):
    id: str
    challenge_id: str
    day_number: int
    date: datetime
    day_key: date
    note: str | None = None
    photo_url: str | None = None
    quote_id: str | None = None
    prompt_shown: str | None = None
    duration_minutes: int | None = None


class CheckInResult(BaseModel):
    challenge: ChallengeOut
    check_in: CheckInOut
    milestone: MilestoneOut | None = None
    motivational_message: str
    is_challenge_completed: bool


class CheckInPage(BaseModel):
    items: list[CheckInOut]
    has_more: bool
    next_before_day: int | None = None
    groups: dict[str, list[CheckInOut]] | None = None


class TodayStatus(BaseModel):
    challenge_id: str
    checked_in_today: bool
    day: date


class PendingCheckIn(BaseModel):
    id: str
    challenge_id: str
    date: datetime
    duration_minutes: int | None = Field(default=None, ge=0, le=24 * 60)
    note: str | None = Field(default=None, max_length=2000)


class PendingCheckInBatch(BaseModel):
    items: list[PendingCheckIn] = Field(max_length=200)


class PendingCheckInOutcome(BaseModel):
    id: str
    status: Literal["applied", "duplicate", "failed"]
    detail: str | None = None
    day_number: int | None = None


class PendingCheckInSyncResponse(BaseModel):
    results: list[PendingCheckInOutcome]
    applied: int
    remaining: int
