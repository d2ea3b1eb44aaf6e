from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest

# Monday
PLAN_START = date(2026, 1, 5)
CLIENT_ID = 1


def _reset_runtime_caches() -> None:
    from fitcoach.config import get_settings
    from fitcoach.db import reset_engine

    get_settings.cache_clear()
    reset_engine()


@pytest.fixture
def db(tmp_path: Path, monkeypatch):
    """Fresh SQLite file database with the full schema."""
    db_path = tmp_path / "fitcoach_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("APP_ENV", "test")
    _reset_runtime_caches()

    from fitcoach.db import get_engine
    from fitcoach.models import Base

    Base.metadata.create_all(bind=get_engine())
    yield
    _reset_runtime_caches()


@pytest.fixture
def seeded(db):
    """Two-week cycle plan assigned to client 1 from Monday 2026-01-05.

    Week 1: Mon squat + bench, Wed deadlift. Week 2: Mon lunge, Fri row, Sat plank.
    """
    from fitcoach.db import session_scope
    from fitcoach.models import ClientPlan, PlanExercise, TrainingPlan

    with session_scope() as s:
        s.add(TrainingPlan(id=1, trainer_id=10, name="Strength Block", goal="Build base", duration_weeks=8, week_cycle=2))
        s.add(TrainingPlan(id=2, trainer_id=10, name="Conditioning", goal="Engine", duration_weeks=0, week_cycle=1))
        s.flush()
        s.add_all(
            [
                PlanExercise(id=1, plan_id=1, exercise_name="Back Squat", day_of_week=1, week=1, sets=3, reps=5, weight=100.0),
                PlanExercise(id=2, plan_id=1, exercise_name="Bench Press", day_of_week=1, week=1, sets=3, reps=8, weight=70.0),
                PlanExercise(id=3, plan_id=1, exercise_name="Deadlift", day_of_week=3, week=1, sets=2, reps=5),
                PlanExercise(id=4, plan_id=1, exercise_name="Walking Lunge", day_of_week=1, week=2, sets=3, reps=12),
                PlanExercise(id=5, plan_id=1, exercise_name="Barbell Row", day_of_week=5, week=2, sets=4, reps=10),
                PlanExercise(id=6, plan_id=1, exercise_name="Plank", day_of_week=6, week=2, duration_min=2),
                PlanExercise(id=7, plan_id=2, exercise_name="Bike Intervals", day_of_week=2, week=1, sets=6),
            ]
        )
        s.flush()
        s.add(ClientPlan(id=1, client_id=CLIENT_ID, plan_id=1, start_date=PLAN_START, is_active=True))
    return PLAN_START


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 1, 7, 18, 30))


@pytest.fixture
def service(seeded, clock):
    from fitcoach.services.workouts import WorkoutService

    return WorkoutService(clock=clock)
