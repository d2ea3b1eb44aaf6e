"""Week-cycle resolution: which weekday and which week of a repeating plan a date falls on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Union

from fitcoach.errors import InvalidInputError

DateLike = Union[date, datetime]
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class CycleResolution:
    started: bool
    day_of_week: Optional[int] = None
    week_in_cycle: Optional[int] = None
    days_since_start: Optional[int] = None

    @property
    def plan_week_number(self) -> Optional[int]:
        if self.days_since_start is None:
            return None
        return self.days_since_start // DAYS_PER_WEEK + 1


NOT_STARTED = CycleResolution(started=False)


def as_day(value: DateLike) -> date:
    """Truncate a date or datetime to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInputError(f"expected a date, got {type(value).__name__}")


def day_of_week(value: DateLike) -> int:
    """Monday=1 ... Sunday=7."""
    return as_day(value).isoweekday()


def validate_week_cycle(week_cycle) -> int:
    if isinstance(week_cycle, bool) or not isinstance(week_cycle, int) or week_cycle < 1:
        raise InvalidInputError(f"week_cycle must be a positive integer, got {week_cycle!r}")
    return week_cycle


def resolve_cycle(start_date: DateLike, week_cycle: int, target_date: DateLike) -> CycleResolution:
    """Map a plan start date and a target date to (day_of_week, week_in_cycle).

    Returns NOT_STARTED when the target day precedes the start day.
    """
    cycle = validate_week_cycle(week_cycle)
    start = as_day(start_date)
    target = as_day(target_date)
    if target < start:
        return NOT_STARTED

    days_since_start = (target - start).days
    weeks_since_start = days_since_start // DAYS_PER_WEEK
    return CycleResolution(
        started=True,
        day_of_week=target.isoweekday(),
        week_in_cycle=weeks_since_start % cycle + 1,
        days_since_start=days_since_start,
    )


def plan_end_date(start_date: DateLike, duration_weeks: int) -> Optional[date]:
    """Last day of a fixed-length plan, or None for an open-ended ("until goal met") plan."""
    if not duration_weeks:
        return None
    return as_day(start_date) + timedelta(days=duration_weeks * DAYS_PER_WEEK - 1)
