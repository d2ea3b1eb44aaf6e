"""Entry points used by request handlers.

Each call runs in one ``session_scope()`` transaction. "Today" comes from
the injected clock, read once at the top of a call; every lower layer gets
the date as an argument.
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fitcoach import storage
from fitcoach.db import session_scope
from fitcoach.errors import InvalidInputError, NotFoundError
from fitcoach.logging_config import setup_logging
from fitcoach.models import ClientPlan, PlanExercise, TrainingPlan, WorkoutLog
from fitcoach.services import ledger, stats
from fitcoach.services.cycle import DateLike, as_day, plan_end_date, resolve_cycle
from fitcoach.services.ledger import RemainingSetsResult
from fitcoach.services.plan_index import exercises_for_resolution, workout_days
from fitcoach.validators import (
    ExerciseNotesInput,
    PlanAssignmentInput,
    RemainingSetsInput,
    SetCompletionInput,
    UncheckSetInput,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class WorkoutStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    REST_DAY = "REST_DAY"
    SCHEDULED = "SCHEDULED"


@dataclass
class WorkoutForDate:
    status: WorkoutStatus
    date: dt.date
    plan_id: int
    plan_name: str
    day_of_week: Optional[int] = None
    week_in_cycle: Optional[int] = None
    exercises: list[PlanExercise] = field(default_factory=list)


@dataclass(frozen=True)
class Streak:
    days: int


@dataclass
class AssignedPlanSummary:
    client_plan_id: int
    plan_id: int
    name: str
    goal: str
    duration_weeks: int
    week_cycle: int
    start_date: dt.date
    end_date: Optional[dt.date]
    is_active: bool
    sessions_per_week: int


def _validate(model: type[M], **data) -> M:
    try:
        return model(**data)
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc


class WorkoutService:
    def __init__(
        self,
        session_factory: Callable[[], AbstractContextManager[Session]] = session_scope,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
        configure_logging: bool = True,
    ) -> None:
        if configure_logging:
            setup_logging()
        self._session_factory = session_factory
        self._clock = clock

    def _now(self, on: Optional[DateLike] = None) -> DateLike:
        return on if on is not None else self._clock()

    def _run(self, op: str, fn: Callable[[Session], object], **ctx):
        try:
            with self._session_factory() as s:
                return fn(s)
        except SQLAlchemyError:
            logger.exception("workout_storage_failure", extra={"ctx_op": op, **{f"ctx_{k}": v for k, v in ctx.items()}})
            raise

    # -- Scheduling --

    def _active_plan(self, s: Session, client_id: int) -> tuple[ClientPlan, TrainingPlan]:
        assignment = storage.get_active_client_plan(s, client_id)
        if assignment is None:
            raise NotFoundError(f"No active training plan assigned to client {client_id}")
        plan = storage.get_training_plan(s, assignment.plan_id)
        if plan is None:
            raise NotFoundError(f"Training plan {assignment.plan_id} not found")
        return assignment, plan

    def resolve_workout_for_date(self, client_id: int, on: Optional[DateLike] = None) -> WorkoutForDate:
        target = as_day(self._now(on))

        def _resolve(s: Session) -> WorkoutForDate:
            assignment, plan = self._active_plan(s, client_id)
            resolution = resolve_cycle(assignment.start_date, plan.week_cycle, target)
            base = dict(date=target, plan_id=plan.id, plan_name=plan.name)
            if not resolution.started:
                return WorkoutForDate(status=WorkoutStatus.NOT_STARTED, **base)
            exercises = exercises_for_resolution(storage.get_plan_exercises(s, plan.id), resolution)
            return WorkoutForDate(
                status=WorkoutStatus.SCHEDULED if exercises else WorkoutStatus.REST_DAY,
                day_of_week=resolution.day_of_week,
                week_in_cycle=resolution.week_in_cycle,
                exercises=exercises,
                **base,
            )

        return self._run("resolve_workout_for_date", _resolve, client_id=client_id)

    def today_workout(self, client_id: int) -> WorkoutForDate:
        return self.resolve_workout_for_date(client_id)

    def assign_plan(self, client_id: int, plan_id: int, start_date: DateLike) -> ClientPlan:
        data = _validate(PlanAssignmentInput, client_id=client_id, plan_id=plan_id, start_date=start_date)
        return self._run(
            "assign_plan",
            lambda s: storage.assign_plan(s, data.client_id, data.plan_id, data.start_date),
            client_id=client_id,
        )

    def assigned_plans(self, client_id: int) -> list[AssignedPlanSummary]:
        def _list(s: Session) -> list[AssignedPlanSummary]:
            out: list[AssignedPlanSummary] = []
            for cp in storage.get_client_plans(s, client_id):
                plan = storage.get_training_plan(s, cp.plan_id)
                if plan is None:
                    continue
                out.append(
                    AssignedPlanSummary(
                        client_plan_id=cp.id,
                        plan_id=plan.id,
                        name=plan.name,
                        goal=plan.goal or "",
                        duration_weeks=plan.duration_weeks,
                        week_cycle=plan.week_cycle,
                        start_date=cp.start_date,
                        end_date=cp.end_date or plan_end_date(cp.start_date, plan.duration_weeks),
                        is_active=cp.is_active,
                        sessions_per_week=len(workout_days(storage.get_plan_exercises(s, plan.id))),
                    )
                )
            return out

        return self._run("assigned_plans", _list, client_id=client_id)

    # -- Ledger --

    def _require_exercise(self, s: Session, plan_exercise_id: int) -> PlanExercise:
        pe = storage.get_plan_exercise(s, plan_exercise_id)
        if pe is None:
            raise NotFoundError(f"Plan exercise {plan_exercise_id} not found")
        return pe

    def complete_set(
        self,
        client_id: int,
        plan_exercise_id: int,
        set_number: int,
        *,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
        notes: Optional[str] = None,
        on: Optional[DateLike] = None,
    ) -> WorkoutLog:
        data = _validate(
            SetCompletionInput,
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
            set_number=set_number,
            reps=reps,
            weight=weight,
            notes=notes,
            on=self._now(on),
        )

        def _complete(s: Session) -> WorkoutLog:
            self._require_exercise(s, data.plan_exercise_id)
            return ledger.complete_set(
                s,
                data.client_id,
                data.plan_exercise_id,
                data.set_number,
                on=data.on,
                reps=data.reps,
                weight=data.weight,
                notes=data.notes,
            )

        return self._run("complete_set", _complete, client_id=client_id, plan_exercise_id=plan_exercise_id)

    def uncheck_set(self, client_id: int, plan_exercise_id: int, set_number: int, *, on: Optional[DateLike] = None) -> None:
        data = _validate(
            UncheckSetInput,
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
            set_number=set_number,
            on=self._now(on),
        )
        self._run(
            "uncheck_set",
            lambda s: ledger.uncheck_set(s, data.client_id, data.plan_exercise_id, data.set_number, on=data.on),
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
        )

    def complete_remaining_sets(
        self,
        client_id: int,
        plan_exercise_id: int,
        total_sets: Optional[int] = None,
        *,
        reps: Optional[int] = None,
        weight: Optional[float] = None,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
        on: Optional[DateLike] = None,
    ) -> RemainingSetsResult:
        """Complete every missing set; ``total_sets`` defaults to the prescription's set count."""
        data = _validate(
            RemainingSetsInput,
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
            total_sets=total_sets,
            reps=reps,
            weight=weight,
            duration=duration,
            notes=notes,
            on=self._now(on),
        )

        def _complete(s: Session) -> RemainingSetsResult:
            pe = self._require_exercise(s, data.plan_exercise_id)
            count = data.resolve_total_sets(pe.sets)
            return ledger.complete_remaining_sets(
                s,
                data.client_id,
                data.plan_exercise_id,
                count,
                on=data.on,
                reps=data.reps,
                weight=data.weight,
                duration=data.duration,
                notes=data.notes,
            )

        return self._run("complete_remaining_sets", _complete, client_id=client_id, plan_exercise_id=plan_exercise_id)

    def save_notes(self, client_id: int, plan_exercise_id: int, notes: str, *, on: Optional[DateLike] = None) -> WorkoutLog:
        data = _validate(
            ExerciseNotesInput,
            client_id=client_id,
            plan_exercise_id=plan_exercise_id,
            notes=notes,
            on=self._now(on),
        )

        def _save(s: Session) -> WorkoutLog:
            self._require_exercise(s, data.plan_exercise_id)
            return ledger.save_exercise_notes(s, data.client_id, data.plan_exercise_id, data.notes, on=data.on)

        return self._run("save_notes", _save, client_id=client_id, plan_exercise_id=plan_exercise_id)

    def workout_logs(
        self,
        client_id: int,
        *,
        on: Optional[DateLike] = None,
        plan_exercise_id: Optional[int] = None,
    ) -> list[WorkoutLog]:
        """Ledger lookup by exercise, by day, or the client's whole history."""
        def _query(s: Session) -> list[WorkoutLog]:
            if plan_exercise_id is not None:
                return ledger.entries_for_assignment(s, client_id, plan_exercise_id)
            if on is not None:
                return ledger.entries_for_day(s, client_id, on)
            return ledger.entries_for_client(s, client_id)

        return self._run("workout_logs", _query, client_id=client_id)

    def workout_logs_between(self, client_id: int, start: DateLike, end: DateLike) -> list[WorkoutLog]:
        return self._run("workout_logs_between", lambda s: ledger.entries_for_range(s, client_id, start, end), client_id=client_id)

    # -- Stats --

    def weekly_stats(self, client_id: int, today: Optional[DateLike] = None) -> stats.WeeklyStats:
        ref = as_day(self._now(today))

        def _stats(s: Session) -> stats.WeeklyStats:
            start, end = stats.week_bounds(ref)
            entries = ledger.entries_for_range(s, client_id, start, end)
            expected = 0
            assignment = storage.get_active_client_plan(s, client_id)
            plan = storage.get_training_plan(s, assignment.plan_id) if assignment else None
            if plan is not None:
                resolution = resolve_cycle(assignment.start_date, plan.week_cycle, ref)
                # Before the plan starts, show what its first week will ask for.
                week = resolution.week_in_cycle if resolution.started else 1
                expected = stats.expected_days_for_week(storage.get_plan_exercises(s, plan.id), week)
            return stats.weekly_stats(entries, expected, ref)

        return self._run("weekly_stats", _stats, client_id=client_id)

    def streak(self, client_id: int, today: Optional[DateLike] = None) -> Streak:
        ref = as_day(self._now(today))

        def _streak(s: Session) -> Streak:
            days = ledger.completed_days(ledger.entries_for_client(s, client_id))
            return Streak(days=stats.compute_streak(days, ref))

        return self._run("streak", _streak, client_id=client_id)

    def completion_history(self, client_id: int) -> pd.DataFrame:
        return self._run(
            "completion_history",
            lambda s: stats.completion_history(ledger.entries_for_client(s, client_id)),
            client_id=client_id,
        )
