from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


class ChallengeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title can't be empty")
        return value


class ChallengeUpdate(ChallengeCreate):
    pass


class ChallengeOut(BaseModel):
    id: str
    title: str
    start_date: datetime
    end_date: datetime
    last_check_in_date: datetime | None = None
    last_check_in_day: date | None = None
    streak_count: int = 0
    longest_streak: int = 0
    days_completed: int = 0
    days_remaining: int
    progress_percentage: float
    is_completed: bool
    is_completed_today: bool = False
    has_streak_expired: bool
    streak_emoji: str
    is_archived: bool = False
    created_at: datetime
    last_modified: datetime | None = None


class StreakRefreshResponse(BaseModel):
    updated: int
