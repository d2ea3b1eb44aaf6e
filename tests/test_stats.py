"""Tests for weekly stats, streaks and weekly history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from fitcoach.models import WorkoutLog
from fitcoach.services.stats import (
    WeeklyStats,
    completion_history,
    compute_streak,
    expected_days_for_week,
    week_bounds,
    weekly_stats,
)

TODAY = date(2026, 1, 14)  # Wednesday


@dataclass
class Slot:
    day_of_week: int
    week: int


PLAN = [Slot(1, 1), Slot(1, 1), Slot(3, 1), Slot(1, 2)]


def _done(day: date, set_number: int = 1, plan_exercise_id: int = 1) -> WorkoutLog:
    return WorkoutLog(client_id=1, plan_exercise_id=plan_exercise_id, set_number=set_number, completed_sets=1, day=day)


def _note(day: date) -> WorkoutLog:
    return WorkoutLog(client_id=1, plan_exercise_id=1, set_number=1, completed_sets=None, notes="felt heavy", day=day)


class TestStreak:
    def test_three_consecutive_days(self):
        days = [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2)]
        assert compute_streak(days, TODAY) == 3

    def test_gap_breaks_chain(self):
        assert compute_streak([TODAY, TODAY - timedelta(days=3)], TODAY) == 1

    def test_empty(self):
        assert compute_streak([], TODAY) == 0

    def test_alive_when_last_workout_was_yesterday(self):
        days = [TODAY - timedelta(days=1), TODAY - timedelta(days=2)]
        assert compute_streak(days, TODAY) == 2

    def test_stale_streak_is_zero(self):
        days = [TODAY - timedelta(days=2), TODAY - timedelta(days=3), TODAY - timedelta(days=4)]
        assert compute_streak(days, TODAY) == 0

    def test_duplicates_and_order_ignored(self):
        days = [TODAY - timedelta(days=2), TODAY, TODAY, TODAY - timedelta(days=1)]
        assert compute_streak(days, TODAY) == 3

    def test_days_after_today_are_ignored(self):
        days = [TODAY + timedelta(days=1), TODAY]
        assert compute_streak(days, TODAY) == 1

    def test_only_future_days_is_zero(self):
        days = [TODAY + timedelta(days=1), TODAY + timedelta(days=2)]
        assert compute_streak(days, TODAY) == 0


class TestWeeklyStats:
    def test_week_bounds_monday_to_sunday(self):
        assert week_bounds(TODAY) == (date(2026, 1, 12), date(2026, 1, 18))
        assert week_bounds(date(2026, 1, 18)) == (date(2026, 1, 12), date(2026, 1, 18))
        assert week_bounds(date(2026, 1, 12)) == (date(2026, 1, 12), date(2026, 1, 18))

    def test_counts_distinct_completed_days_in_week(self):
        entries = [
            _done(date(2026, 1, 12), 1),
            _done(date(2026, 1, 12), 2),
            _done(date(2026, 1, 12), 1, plan_exercise_id=2),
            _done(date(2026, 1, 14), 1),
            _done(date(2026, 1, 11), 1),  # previous week
            _note(date(2026, 1, 13)),
        ]
        out = weekly_stats(entries, expected_days=3, today=TODAY)
        assert out == WeeklyStats(completed_days=2, expected_days=3, week_start=date(2026, 1, 12), week_end=date(2026, 1, 18))
        assert out.completion_ratio == 0.67

    def test_ratio_without_expected_days(self):
        assert weekly_stats([], 0, TODAY).completion_ratio == 0.0

    def test_expected_days_uses_one_cycle_week(self):
        assert expected_days_for_week(PLAN, 1) == 2
        assert expected_days_for_week(PLAN, 2) == 1
        assert expected_days_for_week(PLAN, None) == 0


class TestCompletionHistory:
    def test_weekly_rollup(self):
        entries = [
            _done(date(2026, 1, 5), 1),
            _done(date(2026, 1, 5), 2),
            _done(date(2026, 1, 7), 1),
            _done(date(2026, 1, 12), 1),
            _note(date(2026, 1, 13)),
        ]
        df = completion_history(entries)
        assert list(df.columns) == ["week", "completed_days", "completed_sets"]
        assert df["completed_days"].tolist() == [2, 1]
        assert df["completed_sets"].tolist() == [3, 1]
        assert df["week"].iloc[0].startswith("2026-01-05")

    def test_empty(self):
        df = completion_history([_note(TODAY)])
        assert df.empty
        assert list(df.columns) == ["week", "completed_days", "completed_sets"]
