"""Streak and completion calculations.

Everything here is pure: callers pass in ``today`` (already resolved to the
user's calendar day) so results never depend on the wall clock.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

DEFAULT_CHALLENGE_LENGTH = 100


@dataclass(frozen=True)
class StreakSummary:
    current_streak: int
    longest_streak: int
    completion_rate: float
    days_completed: int


def to_day(value: datetime | date | str, tz: ZoneInfo | None = None) -> date:
    """Calendar day of ``value``, in ``tz`` when it is an aware datetime."""
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def effective_check_in_day(now: datetime, tz: ZoneInfo, grace_hour: int = 0) -> date:
    local = now.astimezone(tz) if now.tzinfo is not None else now.replace(tzinfo=tz)
    if grace_hour and local.hour < grace_hour:
        return local.date() - timedelta(days=1)
    return local.date()


def days_between(earlier: date, later: date) -> int:
    return (later - earlier).days


def is_streak_active(last_day: date | None, today: date) -> bool:
    if last_day is None:
        return False
    return days_between(last_day, today) <= 1


def has_streak_expired(last_day: date | None, today: date) -> bool:
    if last_day is None:
        return True
    return days_between(last_day, today) > 1


def next_streak_count(previous_streak: int, last_day: date | None, today: date) -> int:
    if last_day is not None and days_between(last_day, today) == 1:
        return previous_streak + 1
    return 1


def summarize_ledger(
    days: Iterable[date],
    today: date,
    length: int = DEFAULT_CHALLENGE_LENGTH,
) -> StreakSummary:
    """Current/longest streak and completion over a challenge's check-in days.

    Duplicate days count once and days after ``today`` are ignored. The
    current streak is anchored on today, or on yesterday while today's
    check-in is still outstanding.
    """
    unique = sorted({d for d in days if d <= today})
    if not unique:
        return StreakSummary(0, 0, 0.0, 0)

    longest = run = 1
    for prev, cur in zip(unique, unique[1:]):
        run = run + 1 if days_between(prev, cur) == 1 else 1
        longest = max(longest, run)

    present = set(unique)
    anchor = today if today in present else today - timedelta(days=1)
    current = 0
    while anchor in present:
        current += 1
        anchor -= timedelta(days=1)

    completion = min(1.0, len(unique) / length) if length > 0 else 0.0
    return StreakSummary(
        current_streak=current,
        longest_streak=longest,
        completion_rate=completion,
        days_completed=len(unique),
    )


def _last_day(challenge: Mapping[str, Any]) -> date | None:
    value = challenge.get("last_check_in_day")
    return to_day(value) if value else None


def is_challenge_completed(challenge: Mapping[str, Any], length: int = DEFAULT_CHALLENGE_LENGTH) -> bool:
    return challenge.get("days_completed", 0) >= length


def calculate_current_streak(
    challenges: Iterable[Mapping[str, Any]],
    today: date,
    length: int = DEFAULT_CHALLENGE_LENGTH,
) -> int:
    """Best live streak among challenges that are still running."""
    streaks = [
        c.get("streak_count", 0)
        for c in challenges
        if not c.get("is_archived", False)
        and not is_challenge_completed(c, length)
        and is_streak_active(_last_day(c), today)
    ]
    return max(streaks, default=0)


def calculate_longest_streak(challenges: Iterable[Mapping[str, Any]]) -> int:
    return max(
        (max(c.get("longest_streak", 0), c.get("streak_count", 0)) for c in challenges),
        default=0,
    )


def calculate_completion_rate(
    challenges: Iterable[Mapping[str, Any]],
    length: int = DEFAULT_CHALLENGE_LENGTH,
) -> float:
    items = list(challenges)
    if not items or length <= 0:
        return 0.0
    total_days = sum(c.get("days_completed", 0) for c in items)
    return min(1.0, total_days / (len(items) * length))


def streak_emoji(streak: int) -> str:
    if streak <= 2:
        return "🔥"
    if streak <= 6:
        return "🔥🔥"
    if streak <= 13:
        return "🔥🔥🔥"
    if streak <= 20:
        return "🔥🔥🔥🔥"
    return "🔥🔥🔥🔥🔥"


def motivational_text(streak: int) -> str:
    if streak <= 0:
        return "Start your journey today!"
    if streak <= 2:
        return "Great start! Keep going!"
    if streak <= 6:
        return "You're building momentum!"
    if streak <= 13:
        return "🔥 You're on fire!"
    if streak <= 20:
        return "🔥🔥 Amazing consistency!"
    return "🔥🔥🔥 Legendary streak!"
