"""Derived workout metrics: weekly completion, streaks and weekly history.

All figures are computed from ledger entries on every call; nothing here is
persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import pandas as pd

from fitcoach.models import WorkoutLog
from fitcoach.services.cycle import DateLike, as_day
from fitcoach.services.plan_index import ScheduledExercise, workout_days


@dataclass(frozen=True)
class WeeklyStats:
    completed_days: int
    expected_days: int
    week_start: date
    week_end: date

    @property
    def completion_ratio(self) -> float:
        if self.expected_days <= 0:
            return 0.0
        return round(min(1.0, self.completed_days / self.expected_days), 2)


def week_bounds(today: DateLike) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``today``."""
    day = as_day(today)
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def expected_days_for_week(assignments: Iterable[ScheduledExercise], week_in_cycle: Optional[int]) -> int:
    """Distinct scheduled weekdays in one week of the cycle.

    ``week_in_cycle=None`` (no resolvable week) counts nothing.
    """
    if week_in_cycle is None:
        return 0
    return len(workout_days(assignments, week_in_cycle))


def weekly_stats(entries: Iterable[WorkoutLog], expected_days: int, today: DateLike) -> WeeklyStats:
    """Count distinct days this Monday-to-Sunday week with at least one completed set."""
    start, end = week_bounds(today)
    days = {e.day for e in entries if e.is_completed and start <= e.day <= end}
    return WeeklyStats(completed_days=len(days), expected_days=expected_days, week_start=start, week_end=end)


def compute_streak(workout_dates: Iterable[date], today: DateLike) -> int:
    """Compute the current workout streak counted backward from ``today``.

    The streak is alive if the most recent workout day is today or yesterday.
    From there it walks back over distinct days while each step is at most
    one day.

    Days after ``today`` are ignored. Returns 0 when there are no workout
    days up to today or the last one is older.
    """
    ref = as_day(today)
    unique_dates = sorted({d for d in workout_dates if d <= ref}, reverse=True)
    if not unique_dates:
        return 0
    if (ref - unique_dates[0]).days > 1:
        return 0

    streak = 0
    current = unique_dates[0]
    for d in unique_dates:
        if (current - d).days <= 1:
            streak += 1
            current = d
        else:
            break
    return streak


def completion_history(entries: Iterable[WorkoutLog]) -> pd.DataFrame:
    """Aggregate completed sets into weekly totals.

    Returns a DataFrame with columns: week, completed_days, completed_sets.
    """
    rows = [{"day": e.day, "plan_exercise_id": e.plan_exercise_id} for e in entries if e.is_completed]
    if not rows:
        return pd.DataFrame(columns=["week", "completed_days", "completed_sets"])
    d = pd.DataFrame(rows)
    d["day"] = pd.to_datetime(d["day"])
    d["week"] = d["day"].dt.to_period("W-SUN").astype(str)
    out = d.groupby("week", as_index=False).agg(
        completed_days=("day", "nunique"),
        completed_sets=("plan_exercise_id", "count"),
    )
    return out.sort_values("week").reset_index(drop=True)
