from __future__ import annotations

from datetime import date

from hundred_days.app.services.badges import calculate_earned_badges

TODAY = date(2024, 5, 20)


def _titles(challenges: list[dict]) -> set[str]:
    return {badge.title for badge in calculate_earned_badges(challenges, TODAY)}


def test_no_challenges_earn_nothing() -> None:
    assert calculate_earned_badges([], TODAY) == []


def test_week_streak_and_consistency() -> None:
    challenges = [{"streak_count": 7, "longest_streak": 7, "days_completed": 7, "last_check_in_day": "2024-05-20"}]
    assert _titles(challenges) == {"7-Day Streak", "Perfect Consistency"}


def test_completions_and_percentages() -> None:
    done = {"streak_count": 0, "longest_streak": 40, "days_completed": 100, "last_check_in_day": "2024-01-10"}
    challenges = [dict(done), dict(done), dict(done), {"days_completed": 0}]
    titles = _titles(challenges)
    assert {"7-Day Streak", "30-Day Streak", "First Completion", "Triple Completion"} <= titles
    assert {"25% Complete", "50% Complete", "75% Complete"} <= titles
    # expired streaks rule out consistency
    assert "Perfect Consistency" not in titles


def test_badge_ids_are_stable() -> None:
    challenges = [{"longest_streak": 30, "days_completed": 100, "last_check_in_day": "2024-05-19"}]
    ids = [badge.id for badge in calculate_earned_badges(challenges, TODAY)]
    assert ids == [1, 2, 3, 5, 6, 7, 8]
