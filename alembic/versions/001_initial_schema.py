"""Initial schema: lift_types, workouts, exercises, sets.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "lift_types",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_lift_types")),
    )
    op.create_index(op.f("ix_lift_types_name"), "lift_types", ["name"], unique=True)

    op.create_table(
        "workouts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_workouts")),
    )
    op.create_index("ix_workouts_user_date", "workouts", ["user_id", "date"], unique=False)

    op.create_table(
        "exercises",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workout_id", sa.Uuid(), nullable=False),
        sa.Column("lift_type_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ["workout_id"], ["workouts.id"], name=op.f("fk_exercises_workout_id_workouts"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["lift_type_id"], ["lift_types.id"], name=op.f("fk_exercises_lift_type_id_lift_types"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_exercises")),
    )
    op.create_index("ix_exercises_workout_id", "exercises", ["workout_id"], unique=False)
    op.create_index("ix_exercises_lift_type_id", "exercises", ["lift_type_id"], unique=False)

    op.create_table(
        "sets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("exercise_id", sa.Uuid(), nullable=False),
        sa.Column("weight", sa.Numeric(precision=8, scale=2), nullable=False, server_default="0"),
        sa.Column("reps", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ["exercise_id"], ["exercises.id"], name=op.f("fk_sets_exercise_id_exercises"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sets")),
    )
    op.create_index("ix_sets_exercise_id", "sets", ["exercise_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sets_exercise_id", table_name="sets")
    op.drop_table("sets")
    op.drop_index("ix_exercises_lift_type_id", table_name="exercises")
    op.drop_index("ix_exercises_workout_id", table_name="exercises")
    op.drop_table("exercises")
    op.drop_index("ix_workouts_user_date", table_name="workouts")
    op.drop_table("workouts")
    op.drop_index(op.f("ix_lift_types_name"), table_name="lift_types")
    op.drop_table("lift_types")
