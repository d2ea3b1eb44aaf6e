from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[1]
VERSIONS = ROOT / "alembic" / "versions"


def test_initial_revision_file_exists():
    assert (VERSIONS / "20261019_0001_initial.py").exists()


def test_migration_contains_required_tables():
    text = (VERSIONS / "20261019_0001_initial.py").read_text(encoding="utf-8")
    for t in ["training_plans", "plan_exercises", "client_plans", "workout_logs"]:
        assert f'"{t}"' in text
    assert "uq_workout_log_set_daily" in text


def test_migrations_avoid_dialect_specific_defaults():
    for path in VERSIONS.glob("*.py"):
        assert "now()" not in path.read_text(encoding="utf-8")


def test_upgrade_head_on_sqlite(tmp_path, monkeypatch):
    from fitcoach.config import get_settings

    db_path = tmp_path / "migrated.db"
    url = f"sqlite+pysqlite:///{db_path}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()

    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    try:
        command.upgrade(cfg, "head")
    finally:
        get_settings.cache_clear()

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        assert {"training_plans", "plan_exercises", "client_plans", "workout_logs"} <= tables
        uniques = {u["name"] for u in insp.get_unique_constraints("workout_logs")}
        assert "uq_workout_log_set_daily" in uniques
    finally:
        engine.dispose()
