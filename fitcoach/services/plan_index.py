from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Optional, Protocol, Sequence, TypeVar

from fitcoach.services.cycle import CycleResolution


class ScheduledExercise(Protocol):
    day_of_week: int
    week: int


T = TypeVar("T", bound=ScheduledExercise)


def exercises_for_slot(assignments: Iterable[T], day_of_week: int, week_in_cycle: int) -> list[T]:
    """Assignments due on a weekday of a given cycle week, in insertion order.

    An empty list is a rest day, not an error.
    """
    return [a for a in assignments if a.day_of_week == day_of_week and a.week == week_in_cycle]


def exercises_for_resolution(assignments: Iterable[T], resolution: CycleResolution) -> list[T]:
    if not resolution.started:
        return []
    return exercises_for_slot(assignments, resolution.day_of_week, resolution.week_in_cycle)


def workout_days(assignments: Iterable[ScheduledExercise], week_in_cycle: Optional[int] = None) -> set[int]:
    """Distinct weekdays with at least one exercise, optionally limited to one cycle week."""
    return {
        a.day_of_week
        for a in assignments
        if week_in_cycle is None or a.week == week_in_cycle
    }


def group_by_slot(assignments: Sequence[T]) -> dict[tuple[int, int], list[T]]:
    """Index the whole cycle as {(week, day_of_week): [assignments]}, keeping insertion order."""
    slots: dict[tuple[int, int], list[T]] = defaultdict(list)
    for a in assignments:
        slots[(a.week, a.day_of_week)].append(a)
    return dict(sorted(slots.items()))
