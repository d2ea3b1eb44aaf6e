"""Pydantic validation models for every ledger and scheduling entry point."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from fitcoach.config import get_settings
from fitcoach.errors import InvalidInputError

DateLike = Union[datetime, date]


def _within_set_limit(v: int) -> int:
    limit = get_settings().max_set_number
    if v > limit:
        raise ValueError(f"must be <= {limit}")
    return v


def _notes_length(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    limit = get_settings().max_notes_length
    if len(v) > limit:
        raise ValueError(f"notes must be at most {limit} characters")
    return v or None


class _ExerciseTarget(BaseModel):
    client_id: int = Field(gt=0)
    plan_exercise_id: int = Field(gt=0)
    on: Optional[DateLike] = None


class SetCompletionInput(_ExerciseTarget):
    set_number: int = Field(ge=1)
    reps: Optional[int] = Field(default=None, ge=0, le=1000)
    weight: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("set_number")
    @classmethod
    def set_number_in_range(cls, v):
        return _within_set_limit(v)

    @field_validator("notes")
    @classmethod
    def trim_notes(cls, v):
        return _notes_length(v)


class UncheckSetInput(_ExerciseTarget):
    set_number: int = Field(ge=1)

    @field_validator("set_number")
    @classmethod
    def set_number_in_range(cls, v):
        return _within_set_limit(v)


class RemainingSetsInput(_ExerciseTarget):
    total_sets: Optional[int] = Field(default=None, ge=1)
    reps: Optional[int] = Field(default=None, ge=0, le=1000)
    weight: Optional[float] = Field(default=None, ge=0)
    duration: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("total_sets")
    @classmethod
    def total_sets_in_range(cls, v):
        if v is None:
            return v
        return _within_set_limit(v)

    @field_validator("notes")
    @classmethod
    def trim_notes(cls, v):
        return _notes_length(v)

    def resolve_total_sets(self, prescribed: Optional[int]) -> int:
        """Explicit total, else the exercise's prescribed set count."""
        total = self.total_sets if self.total_sets is not None else prescribed
        if total is None or total < 1:
            raise InvalidInputError("total_sets is required when the exercise prescribes no sets")
        try:
            return _within_set_limit(total)
        except ValueError as exc:
            raise InvalidInputError(f"total_sets {exc}") from exc


class ExerciseNotesInput(_ExerciseTarget):
    notes: str

    @field_validator("notes")
    @classmethod
    def notes_not_blank(cls, v):
        v = _notes_length(v)
        if not v:
            raise ValueError("notes cannot be empty")
        return v


class PlanAssignmentInput(BaseModel):
    client_id: int = Field(gt=0)
    plan_id: int = Field(gt=0)
    start_date: date

    @field_validator("start_date", mode="before")
    @classmethod
    def drop_time_of_day(cls, v):
        if isinstance(v, datetime):
            return v.date()
        return v
