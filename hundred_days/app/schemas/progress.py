from datetime import date, datetime

from pydantic import BaseModel

from .checkins import CheckInOut
from .milestones import MilestoneOut


class BadgeOut(BaseModel):
    id: int
    title: str
    icon: str


class UserStats(BaseModel):
    total_challenges: int = 0
    completed_challenges: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    overall_completion_percentage: float = 0.0
    last_check_in_date: datetime | None = None


class HeatmapDay(BaseModel):
    day: date
    count: int


class ProgressOverview(BaseModel):
    stats: UserStats
    total_days_completed: int
    completion_rate_percentage: int
    streak_emoji: str
    motivational_text: str
    badges: list[BadgeOut]
    heatmap: list[HeatmapDay]
    recent_entries: list[CheckInOut]


class ChallengeProgressOut(BaseModel):
    challenge_id: str
    current_streak: int
    longest_streak: int
    completion_rate: float
    days_completed: int
    next_milestone: MilestoneOut | None = None
