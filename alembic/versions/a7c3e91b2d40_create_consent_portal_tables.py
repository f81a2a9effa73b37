"""create consent portal tables

Revision ID: a7c3e91b2d40
Revises:
Create Date: 2026-10-19 12:00:00.000000

This migration creates:
1. students - one row per committed submission (unique email)
2. student_images - one row per stored image, deleted with its student
3. otps - hashed one-time verification codes, independent of students
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a7c3e91b2d40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create students, student_images and otps tables."""
    op.create_table(
        "students",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("gender", sa.Text(), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("consent_given", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_students_email"),
    )
    op.create_index("idx_students_email", "students", ["email"])

    op.create_table(
        "student_images",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("image_age", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name="fk_student_images_student_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("idx_student_images_student_id", "student_images", ["student_id"])

    op.create_table(
        "otps",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("otp_hash", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_otps_email", "otps", ["email"])
    op.create_index("idx_otps_expires_at", "otps", ["expires_at"])


def downgrade() -> None:
    """Drop all consent portal tables."""
    op.drop_index("idx_otps_expires_at", table_name="otps")
    op.drop_index("idx_otps_email", table_name="otps")
    op.drop_table("otps")

    op.drop_index("idx_student_images_student_id", table_name="student_images")
    op.drop_table("student_images")

    op.drop_index("idx_students_email", table_name="students")
    op.drop_table("students")
