"""Storage collaborator for the scheduler and the workout ledger.

Every function works inside the caller's session; the caller owns the
transaction boundary (see ``fitcoach.db.session_scope``).
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitcoach.errors import ConflictError, NotFoundError
from fitcoach.models import ClientPlan, PlanExercise, TrainingPlan, WorkoutLog

logger = logging.getLogger(__name__)

NOTE_SET_NUMBER = 1


# -- Plans and assignments --

def get_training_plan(s: Session, plan_id: int) -> Optional[TrainingPlan]:
    return s.get(TrainingPlan, plan_id)


def get_plan_exercise(s: Session, plan_exercise_id: int) -> Optional[PlanExercise]:
    return s.get(PlanExercise, plan_exercise_id)


def get_plan_exercises(s: Session, plan_id: int) -> list[PlanExercise]:
    return list(s.execute(select(PlanExercise).where(PlanExercise.plan_id == plan_id).order_by(PlanExercise.id)).scalars())


def get_client_plans(s: Session, client_id: int) -> list[ClientPlan]:
    q = select(ClientPlan).where(ClientPlan.client_id == client_id).order_by(ClientPlan.start_date.desc(), ClientPlan.id.desc())
    return list(s.execute(q).scalars())


def get_active_client_plan(s: Session, client_id: int) -> Optional[ClientPlan]:
    """The client's active assignment; with several active rows the latest start wins."""
    q = (
        select(ClientPlan)
        .where(ClientPlan.client_id == client_id, ClientPlan.is_active.is_(True))
        .order_by(ClientPlan.start_date.desc(), ClientPlan.created_at.desc(), ClientPlan.id.desc())
        .limit(1)
    )
    return s.execute(q).scalar_one_or_none()


def assign_plan(s: Session, client_id: int, plan_id: int, start_date: dt.date) -> ClientPlan:
    """Create the client's new active assignment and close any previous active one."""
    if get_training_plan(s, plan_id) is None:
        raise NotFoundError(f"Training plan {plan_id} not found")
    closed = s.execute(
        update(ClientPlan)
        .where(ClientPlan.client_id == client_id, ClientPlan.is_active.is_(True))
        .values(is_active=False, end_date=start_date)
    ).rowcount
    row = ClientPlan(client_id=client_id, plan_id=plan_id, start_date=start_date, is_active=True)
    s.add(row)
    s.flush()
    logger.info(
        "client_plan_assigned",
        extra={"ctx_client_id": client_id, "ctx_plan_id": plan_id, "ctx_client_plan_id": row.id, "ctx_closed": closed},
    )
    return row


# -- Workout log reads --

def get_workout_logs(s: Session, client_id: int, start_day: dt.date, end_day: dt.date) -> list[WorkoutLog]:
    """Entries whose day bucket lies in [start_day, end_day], newest first."""
    q = (
        select(WorkoutLog)
        .where(WorkoutLog.client_id == client_id, WorkoutLog.day >= start_day, WorkoutLog.day <= end_day)
        .order_by(WorkoutLog.completed_at.desc(), WorkoutLog.id.desc())
    )
    return list(s.execute(q).scalars())


def get_workout_logs_for_exercise(s: Session, client_id: int, plan_exercise_id: int) -> list[WorkoutLog]:
    q = (
        select(WorkoutLog)
        .where(WorkoutLog.client_id == client_id, WorkoutLog.plan_exercise_id == plan_exercise_id)
        .order_by(WorkoutLog.completed_at.desc(), WorkoutLog.id.desc())
    )
    return list(s.execute(q).scalars())


def get_all_workout_logs(s: Session, client_id: int) -> list[WorkoutLog]:
    q = select(WorkoutLog).where(WorkoutLog.client_id == client_id).order_by(WorkoutLog.completed_at.desc(), WorkoutLog.id.desc())
    return list(s.execute(q).scalars())


def find_workout_log(s: Session, client_id: int, plan_exercise_id: int, set_number: int, day: dt.date) -> Optional[WorkoutLog]:
    q = select(WorkoutLog).where(
        WorkoutLog.client_id == client_id,
        WorkoutLog.plan_exercise_id == plan_exercise_id,
        WorkoutLog.set_number == set_number,
        WorkoutLog.day == day,
    )
    return s.execute(q).scalar_one_or_none()


# -- Workout log writes --

def create_workout_log(s: Session, entry: WorkoutLog) -> WorkoutLog:
    """Insert one entry under a savepoint; a uniqueness violation becomes ConflictError."""
    try:
        with s.begin_nested():
            s.add(entry)
            s.flush()
    except IntegrityError as exc:
        raise ConflictError(
            f"Set {entry.set_number} already recorded for exercise {entry.plan_exercise_id} on {entry.day.isoformat()}"
        ) from exc
    return entry


def delete_workout_log(s: Session, entry_id: int) -> None:
    deleted = s.execute(delete(WorkoutLog).where(WorkoutLog.id == entry_id)).rowcount
    if not deleted:
        raise NotFoundError(f"Workout log {entry_id} not found")


def promote_note_entry(s: Session, entry: WorkoutLog, values: dict) -> bool:
    """Write completion data onto a note-only entry in one conditional UPDATE.

    Returns False when the row was already completed, including by another
    transaction this session has not seen yet.
    """
    promoted = s.execute(
        update(WorkoutLog)
        .where(WorkoutLog.id == entry.id, WorkoutLog.completed_sets.is_(None))
        .values(**values)
        .execution_options(synchronize_session=False)
    ).rowcount
    if promoted:
        s.refresh(entry)
    return bool(promoted)


def upsert_note_entry(
    s: Session,
    client_id: int,
    plan_exercise_id: int,
    day: dt.date,
    notes: str,
    at: dt.datetime,
) -> tuple[WorkoutLog, bool]:
    """Write notes onto the day's set-1 entry, creating a note-only entry if there is none.

    Returns (entry, created). Completion fields of an existing entry are left alone.
    """
    existing = find_workout_log(s, client_id, plan_exercise_id, NOTE_SET_NUMBER, day)
    if existing is None:
        entry = WorkoutLog(
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
            set_number=NOTE_SET_NUMBER,
            completed_sets=None,
            completed_reps=None,
            notes=notes,
            completed_at=at,
            day=day,
        )
        try:
            return create_workout_log(s, entry), True
        except ConflictError:
            # Lost a race with a concurrent writer; fall through and update its row.
            existing = find_workout_log(s, client_id, plan_exercise_id, NOTE_SET_NUMBER, day)
            if existing is None:
                raise
    existing.notes = notes
    existing.updated_at = at
    s.flush()
    return existing, False
