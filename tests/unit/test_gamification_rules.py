"""
Unit tests for the pure gamification and analytics rules.

Covered:
- level_for_points, next_streak, period_start
- current_streak / longest_streak over workout days
- completion_percentage, is_significant_workout
"""

import pytest
from datetime import date, timedelta

from app.models.leaderboard import LeaderboardPeriodEnum
from app.services.analytics_service import current_streak, longest_streak
from app.services.challenge_service import completion_percentage
from app.services.gamification_service import level_for_points, next_streak, period_start
from app.services.social_service import is_significant_workout

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("points,level", [(0, 1), (99, 1), (100, 2), (250, 3), (1000, 11)])
def test_level_for_points(points, level):
    assert level_for_points(points) == level


def test_level_never_below_one():
    assert level_for_points(-40) == 1


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def test_first_workout_starts_streak():
    assert next_streak(0, 0, None, date(2024, 3, 1)) == (1, 1)


def test_consecutive_day_extends_streak_and_longest():
    assert next_streak(4, 4, date(2024, 3, 1), date(2024, 3, 2)) == (5, 5)


def test_same_day_keeps_streak():
    assert next_streak(3, 7, date(2024, 3, 2), date(2024, 3, 2)) == (3, 7)


def test_gap_resets_streak_but_keeps_longest():
    assert next_streak(6, 6, date(2024, 3, 1), date(2024, 3, 5)) == (1, 6)


def test_streak_follows_workout_date_not_log_time():
    # logged two days after the last one, but dated the next day
    assert next_streak(3, 3, date(2024, 3, 1), date(2024, 3, 2)) == (4, 4)


def test_backdated_workout_leaves_streak_alone():
    assert next_streak(2, 5, date(2024, 3, 10), date(2024, 3, 1)) == (2, 5)


def test_current_streak_counts_back_from_today():
    today = date(2024, 5, 10)
    days = [today, today - timedelta(days=1), today - timedelta(days=2), today - timedelta(days=5)]
    assert current_streak(days, today) == 3


def test_current_streak_allows_yesterday_as_latest():
    today = date(2024, 5, 10)
    assert current_streak([today - timedelta(days=1), today - timedelta(days=2)], today) == 2


def test_current_streak_broken_when_last_workout_older_than_yesterday():
    today = date(2024, 5, 10)
    assert current_streak([today - timedelta(days=3)], today) == 0
    assert current_streak([], today) == 0


def test_longest_streak_ignores_duplicates():
    start = date(2024, 1, 1)
    days = [start, start, start + timedelta(days=1), start + timedelta(days=2),
            start + timedelta(days=10), start + timedelta(days=11)]
    assert longest_streak(days) == 3
    assert longest_streak([]) == 0


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------

def test_period_start_week_begins_on_monday():
    # 2024-05-16 is a Thursday
    assert period_start(LeaderboardPeriodEnum.weekly, date(2024, 5, 16)) == date(2024, 5, 13)


def test_period_start_month_and_all_time():
    assert period_start(LeaderboardPeriodEnum.monthly, date(2024, 5, 16)) == date(2024, 5, 1)
    assert period_start(LeaderboardPeriodEnum.all_time, date(2024, 5, 16)) is None


# ---------------------------------------------------------------------------
# Challenges and feed
# ---------------------------------------------------------------------------

def test_completion_percentage_is_capped_and_rounded():
    assert completion_percentage(1, 3) == 33.3
    assert completion_percentage(150, 100) == 100.0
    assert completion_percentage(5, 0) == 0.0


@pytest.mark.parametrize("duration,calories,expected", [
    (60, 0, True),
    (30, 500, True),
    (59, 499, False),
    (None, None, False),
])
def test_is_significant_workout(duration, calories, expected):
    assert is_significant_workout(duration, calories) is expected
