"""initial schema: plans, plan exercises, client plans, workout ledger

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "training_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("trainer_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("goal", sa.Text(), nullable=True),
        sa.Column("duration_weeks", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("week_cycle", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("week_cycle >= 1", name="ck_training_plan_week_cycle"),
        sa.CheckConstraint("duration_weeks >= 0", name="ck_training_plan_duration"),
    )
    op.create_index("ix_training_plans_trainer_id", "training_plans", ["trainer_id"])

    op.create_table(
        "plan_exercises",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("plan_id", sa.Integer(), sa.ForeignKey("training_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exercise_id", sa.Integer(), nullable=True),
        sa.Column("exercise_name", sa.String(length=180), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("sets", sa.Integer(), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("duration_min", sa.Integer(), nullable=True),
        sa.Column("rest_seconds", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.CheckConstraint("day_of_week between 1 and 7", name="ck_plan_exercise_day"),
        sa.CheckConstraint("week >= 1", name="ck_plan_exercise_week"),
    )
    op.create_index("ix_plan_exercises_plan_id", "plan_exercises", ["plan_id"])
    op.create_index("ix_plan_exercises_slot", "plan_exercises", ["plan_id", "week", "day_of_week"])

    op.create_table(
        "client_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Integer(), sa.ForeignKey("training_plans.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_client_plans_client_id", "client_plans", ["client_id"])
    op.create_index("ix_client_plans_plan_id", "client_plans", ["plan_id"])

    op.create_table(
        "workout_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), nullable=False),
        sa.Column("plan_exercise_id", sa.Integer(), sa.ForeignKey("plan_exercises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("set_number", sa.Integer(), nullable=True),
        sa.Column("completed_sets", sa.Integer(), nullable=True),
        sa.Column("completed_reps", sa.Integer(), nullable=True),
        sa.Column("actual_weight", sa.Float(), nullable=True),
        sa.Column("actual_duration", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("client_id", "plan_exercise_id", "set_number", "day", name="uq_workout_log_set_daily"),
        sa.CheckConstraint("set_number IS NULL OR set_number >= 0", name="ck_workout_log_set_number"),
    )
    op.create_index("ix_workout_logs_client_id", "workout_logs", ["client_id"])
    op.create_index("ix_workout_logs_plan_exercise_id", "workout_logs", ["plan_exercise_id"])
    op.create_index("ix_workout_logs_client_day", "workout_logs", ["client_id", "day"])


def downgrade() -> None:
    op.drop_table("workout_logs")
    op.drop_table("client_plans")
    op.drop_table("plan_exercises")
    op.drop_table("training_plans")
