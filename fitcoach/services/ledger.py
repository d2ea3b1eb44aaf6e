"""Workout-completion ledger.

Per (client, plan exercise, calendar day) every set number is either absent
or recorded. The database unique constraint ``uq_workout_log_set_daily`` is
the authority on that invariant; the lookups here only decide between the
normal paths (insert, promote a note-only entry, report a conflict), and a
lost race still ends in ``ConflictError`` rather than a duplicate row.

All functions take the reference date explicitly. A datetime is kept as the
entry's ``completed_at``; its calendar day is the bucket used for matching.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from fitcoach import storage
from fitcoach.errors import ConflictError, InvalidInputError, NotFoundError
from fitcoach.models import WorkoutLog
from fitcoach.services.cycle import DateLike, as_day

logger = logging.getLogger(__name__)


@dataclass
class RemainingSetsResult:
    created_count: int
    total_sets: int
    entries: list[WorkoutLog] = field(default_factory=list)


def _timestamp(on: DateLike) -> dt.datetime:
    if isinstance(on, dt.datetime):
        return on
    return dt.datetime.combine(on, dt.time.min)


def _completion_values(
    *,
    reps: Optional[int],
    weight: Optional[float],
    duration: Optional[int],
    notes: Optional[str],
    at: dt.datetime,
) -> dict:
    values = {
        "completed_sets": 1,
        "completed_reps": reps,
        "actual_weight": weight,
        "actual_duration": duration,
        "completed_at": at,
    }
    if notes is not None:
        values["notes"] = notes
    return values


def _record_set(
    s: Session,
    client_id: int,
    plan_exercise_id: int,
    set_number: int,
    *,
    on: DateLike,
    reps: Optional[int] = None,
    weight: Optional[float] = None,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
) -> WorkoutLog:
    day = as_day(on)
    at = _timestamp(on)
    values = _completion_values(reps=reps, weight=weight, duration=duration, notes=notes, at=at)
    existing = storage.find_workout_log(s, client_id, plan_exercise_id, set_number, day)
    if existing is not None:
        # A note-only entry holds the slot; completing the set promotes it,
        # but only while the row is still uncompleted in the database.
        if existing.is_completed or not storage.promote_note_entry(s, existing, {**values, "updated_at": at}):
            raise ConflictError(f"Set {set_number} already completed for exercise {plan_exercise_id} on {day.isoformat()}")
        return existing

    entry = WorkoutLog(
        client_id=client_id,
        plan_exercise_id=plan_exercise_id,
        set_number=set_number,
        day=day,
        **values,
    )
    return storage.create_workout_log(s, entry)


def complete_set(
    s: Session,
    client_id: int,
    plan_exercise_id: int,
    set_number: int,
    *,
    on: DateLike,
    reps: Optional[int] = None,
    weight: Optional[float] = None,
    notes: Optional[str] = None,
) -> WorkoutLog:
    """Record one completed set; ConflictError if it is already recorded for that day."""
    if set_number < 1:
        raise InvalidInputError("set_number must be >= 1")
    entry = _record_set(s, client_id, plan_exercise_id, set_number, on=on, reps=reps, weight=weight, notes=notes)
    logger.info(
        "set_completed",
        extra={
            "ctx_client_id": client_id,
            "ctx_plan_exercise_id": plan_exercise_id,
            "ctx_set_number": set_number,
            "ctx_day": entry.day.isoformat(),
            "ctx_workout_log_id": entry.id,
        },
    )
    return entry


def uncheck_set(s: Session, client_id: int, plan_exercise_id: int, set_number: int, *, on: DateLike) -> None:
    """Remove a completed set for that day; NotFoundError if it was never completed."""
    day = as_day(on)
    existing = storage.find_workout_log(s, client_id, plan_exercise_id, set_number, day)
    if existing is None or not existing.is_completed:
        raise NotFoundError(f"Set {set_number} not completed for exercise {plan_exercise_id} on {day.isoformat()}")
    entry_id = existing.id
    storage.delete_workout_log(s, entry_id)
    logger.info(
        "set_unchecked",
        extra={
            "ctx_client_id": client_id,
            "ctx_plan_exercise_id": plan_exercise_id,
            "ctx_set_number": set_number,
            "ctx_day": day.isoformat(),
            "ctx_workout_log_id": entry_id,
        },
    )


def complete_remaining_sets(
    s: Session,
    client_id: int,
    plan_exercise_id: int,
    total_sets: int,
    *,
    on: DateLike,
    reps: Optional[int] = None,
    weight: Optional[float] = None,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
) -> RemainingSetsResult:
    """Fill every set in 1..total_sets not yet completed that day.

    Sets already completed are left untouched. Runs in the caller's
    transaction, so either all missing sets are written or none are.
    """
    if total_sets < 1:
        raise InvalidInputError("total_sets must be >= 1")
    day = as_day(on)
    done = {
        e.set_number
        for e in entries_for_day(s, client_id, day)
        if e.plan_exercise_id == plan_exercise_id and e.is_completed
    }
    created: list[WorkoutLog] = []
    for set_number in range(1, total_sets + 1):
        if set_number in done:
            continue
        try:
            created.append(
                _record_set(
                    s,
                    client_id,
                    plan_exercise_id,
                    set_number,
                    on=on,
                    reps=reps,
                    weight=weight,
                    duration=duration,
                    notes=notes,
                )
            )
        except ConflictError:
            logger.info(
                "set_already_completed",
                extra={"ctx_client_id": client_id, "ctx_plan_exercise_id": plan_exercise_id, "ctx_set_number": set_number},
            )
    logger.info(
        "remaining_sets_completed",
        extra={
            "ctx_client_id": client_id,
            "ctx_plan_exercise_id": plan_exercise_id,
            "ctx_day": day.isoformat(),
            "ctx_created": len(created),
            "ctx_total_sets": total_sets,
        },
    )
    return RemainingSetsResult(created_count=len(created), total_sets=total_sets, entries=created)


def save_exercise_notes(s: Session, client_id: int, plan_exercise_id: int, notes: str, *, on: DateLike) -> WorkoutLog:
    """Attach notes to the day's set 1 without marking anything as completed."""
    if not notes or not notes.strip():
        raise InvalidInputError("notes cannot be empty")
    day = as_day(on)
    entry, created = storage.upsert_note_entry(s, client_id, plan_exercise_id, day, notes.strip(), _timestamp(on))
    logger.info(
        "exercise_notes_saved",
        extra={
            "ctx_client_id": client_id,
            "ctx_plan_exercise_id": plan_exercise_id,
            "ctx_day": day.isoformat(),
            "ctx_created": created,
        },
    )
    return entry


# -- Read paths --

def entries_for_range(s: Session, client_id: int, start: DateLike, end: DateLike) -> list[WorkoutLog]:
    start_day, end_day = as_day(start), as_day(end)
    if end_day < start_day:
        raise InvalidInputError("end must not precede start")
    return storage.get_workout_logs(s, client_id, start_day, end_day)


def entries_for_day(s: Session, client_id: int, on: DateLike) -> list[WorkoutLog]:
    day = as_day(on)
    return storage.get_workout_logs(s, client_id, day, day)


def entries_for_assignment(s: Session, client_id: int, plan_exercise_id: int) -> list[WorkoutLog]:
    return storage.get_workout_logs_for_exercise(s, client_id, plan_exercise_id)


def entries_for_client(s: Session, client_id: int) -> list[WorkoutLog]:
    return storage.get_all_workout_logs(s, client_id)


def completed_days(entries: Iterable[WorkoutLog]) -> set[dt.date]:
    """Distinct calendar days with at least one completed set."""
    return {e.day for e in entries if e.is_completed}
