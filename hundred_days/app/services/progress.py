from __future__ import annotations

from dataclasses import asdict
from datetime import date, timedelta

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..core.config import settings
from ..db.mongo import CHECK_INS_COL
from ..schemas.milestones import MilestoneOut
from ..schemas.progress import (
    BadgeOut,
    ChallengeProgressOut,
    HeatmapDay,
    ProgressOverview,
    UserStats,
)
from . import checkins as checkin_service
from .badges import calculate_earned_badges
from .challenges import get_challenge, list_challenges
from .milestones import next_milestone
from .streaks import (
    calculate_completion_rate,
    calculate_current_streak,
    calculate_longest_streak,
    is_challenge_completed,
    motivational_text,
    streak_emoji,
    summarize_ledger,
    to_day,
)


def build_user_stats(challenges: list[dict], today: date) -> UserStats:
    length = settings.challenge_length_days
    last_dates = [c["last_check_in_date"] for c in challenges if c.get("last_check_in_date")]
    return UserStats(
        total_challenges=len(challenges),
        completed_challenges=sum(1 for c in challenges if is_challenge_completed(c, length)),
        current_streak=calculate_current_streak(challenges, today, length),
        longest_streak=calculate_longest_streak(challenges),
        overall_completion_percentage=calculate_completion_rate(challenges, length),
        last_check_in_date=max(last_dates, default=None),
    )


async def get_user_stats(db: AsyncIOMotorDatabase, user_id: str, today: date) -> UserStats:
    challenges = await list_challenges(db, user_id, include_archived=True)
    return build_user_stats(challenges, today)


async def get_progress_overview(db: AsyncIOMotorDatabase, user_id: str, today: date) -> ProgressOverview:
    challenges = await list_challenges(db, user_id, include_archived=True)
    stats = build_user_stats(challenges, today)
    since = today - timedelta(days=30 * settings.heatmap_months)
    heatmap = await checkin_service.activity_heatmap(db, user_id, since)
    recent = await checkin_service.recent_entries(db, user_id)
    badges = calculate_earned_badges(challenges, today, settings.challenge_length_days)

    return ProgressOverview(
        stats=stats,
        total_days_completed=sum(c.get("days_completed", 0) for c in challenges),
        completion_rate_percentage=int(stats.overall_completion_percentage * 100),
        streak_emoji=streak_emoji(stats.current_streak),
        motivational_text=motivational_text(stats.current_streak),
        badges=[BadgeOut(**asdict(b)) for b in badges],
        heatmap=[HeatmapDay(day=d, count=n) for d, n in heatmap.items()],
        recent_entries=recent,
    )


async def get_challenge_progress(
    db: AsyncIOMotorDatabase,
    user_id: str,
    challenge_id: str,
    today: date,
) -> ChallengeProgressOut:
    challenge = await get_challenge(db, user_id, challenge_id)
    cursor = db[CHECK_INS_COL].find({"challenge_id": challenge_id, "user_id": user_id}, {"day_key": 1})
    days = [to_day(doc["day_key"]) async for doc in cursor]
    summary = summarize_ledger(days, today, settings.challenge_length_days)
    upcoming = next_milestone(challenge.get("days_completed", 0))
    return ChallengeProgressOut(
        challenge_id=challenge_id,
        current_streak=summary.current_streak,
        longest_streak=summary.longest_streak,
        completion_rate=summary.completion_rate,
        days_completed=summary.days_completed,
        next_milestone=MilestoneOut(**asdict(upcoming)) if upcoming else None,
    )
