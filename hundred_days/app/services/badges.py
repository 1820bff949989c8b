from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any

from .streaks import (
    DEFAULT_CHALLENGE_LENGTH,
    calculate_completion_rate,
    calculate_longest_streak,
    has_streak_expired,
    is_challenge_completed,
    to_day,
)


@dataclass(frozen=True)
class Badge:
    id: int
    title: str
    icon: str


def calculate_earned_badges(
    challenges: Iterable[Mapping[str, Any]],
    today: date,
    length: int = DEFAULT_CHALLENGE_LENGTH,
) -> list[Badge]:
    items = list(challenges)
    longest = calculate_longest_streak(items)
    completion = calculate_completion_rate(items, length)
    completed = sum(1 for c in items if is_challenge_completed(c, length))

    badges: list[Badge] = []
    if longest >= 7:
        badges.append(Badge(1, "7-Day Streak", "flame.fill"))
    if longest >= 30:
        badges.append(Badge(2, "30-Day Streak", "flame.fill"))
    if completed > 0:
        badges.append(Badge(3, "First Completion", "checkmark.circle.fill"))
    if completed >= 3:
        badges.append(Badge(4, "Triple Completion", "checkmark.circle.fill"))
    for badge_id, threshold in ((5, 0.25), (6, 0.50), (7, 0.75)):
        if completion >= threshold:
            badges.append(Badge(badge_id, f"{int(threshold * 100)}% Complete", "chart.bar.fill"))

    expired = any(
        has_streak_expired(to_day(c["last_check_in_day"]) if c.get("last_check_in_day") else None, today)
        for c in items
    )
    if items and not expired:
        badges.append(Badge(8, "Perfect Consistency", "star.fill"))
    return badges
