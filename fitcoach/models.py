from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class TrainingPlan(Base):
    __tablename__ = "training_plans"
    id: Mapped[int] = mapped_column(primary_key=True)
    trainer_id: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(200))
    goal: Mapped[str | None] = mapped_column(Text)
    # 0 means "until the goal is met"
    duration_weeks: Mapped[int] = mapped_column(Integer, default=0)
    week_cycle: Mapped[int] = mapped_column(Integer, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)

    exercises: Mapped[list["PlanExercise"]] = relationship(
        back_populates="plan", order_by="PlanExercise.id", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("week_cycle >= 1", name="ck_training_plan_week_cycle"),
        CheckConstraint("duration_weeks >= 0", name="ck_training_plan_duration"),
    )


class PlanExercise(Base):
    """One exercise prescription pinned to a weekday and a week of the cycle."""

    __tablename__ = "plan_exercises"
    id: Mapped[int] = mapped_column(primary_key=True)
    plan_id: Mapped[int] = mapped_column(ForeignKey("training_plans.id", ondelete="CASCADE"), index=True)
    exercise_id: Mapped[int | None] = mapped_column(Integer)
    exercise_name: Mapped[str] = mapped_column(String(180))
    day_of_week: Mapped[int] = mapped_column(Integer)
    week: Mapped[int] = mapped_column(Integer, default=1)
    sets: Mapped[int | None] = mapped_column(Integer)
    reps: Mapped[int | None] = mapped_column(Integer)
    weight: Mapped[float | None] = mapped_column(Float)
    duration_min: Mapped[int | None] = mapped_column(Integer)
    rest_seconds: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)

    plan: Mapped[TrainingPlan] = relationship(back_populates="exercises")

    __table_args__ = (
        CheckConstraint("day_of_week between 1 and 7", name="ck_plan_exercise_day"),
        CheckConstraint("week >= 1", name="ck_plan_exercise_week"),
        Index("ix_plan_exercises_slot", "plan_id", "week", "day_of_week"),
    )


class ClientPlan(Base):
    __tablename__ = "client_plans"
    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, index=True)
    plan_id: Mapped[int] = mapped_column(ForeignKey("training_plans.id", ondelete="CASCADE"), index=True)
    start_date: Mapped[dt.date] = mapped_column(Date)
    end_date: Mapped[dt.date | None] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)


class WorkoutLog(Base):
    """A single ledger row: one completed set, or a note-only placeholder on set 1."""

    __tablename__ = "workout_logs"
    id: Mapped[int] = mapped_column(primary_key=True)
    client_id: Mapped[int] = mapped_column(Integer, index=True)
    plan_exercise_id: Mapped[int] = mapped_column(ForeignKey("plan_exercises.id", ondelete="CASCADE"), index=True)
    set_number: Mapped[int | None] = mapped_column(Integer)
    # NULL marks a note-only entry
    completed_sets: Mapped[int | None] = mapped_column(Integer)
    completed_reps: Mapped[int | None] = mapped_column(Integer)
    actual_weight: Mapped[float | None] = mapped_column(Float)
    actual_duration: Mapped[int | None] = mapped_column(Integer)
    notes: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
    day: Mapped[dt.date] = mapped_column(Date)
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime)

    __table_args__ = (
        UniqueConstraint("client_id", "plan_exercise_id", "set_number", "day", name="uq_workout_log_set_daily"),
        CheckConstraint("set_number IS NULL OR set_number >= 0", name="ck_workout_log_set_number"),
        Index("ix_workout_logs_client_day", "client_id", "day"),
    )

    @property
    def is_completed(self) -> bool:
        return bool(self.set_number) and self.set_number > 0 and self.completed_sets is not None
