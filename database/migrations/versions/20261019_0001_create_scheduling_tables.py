"""create scheduling tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

ROOM_TYPES = ("lecture", "laboratory")
SEMESTERS = ("first", "second", "whole")
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def upgrade() -> None:
    room_type = sa.Enum(*ROOM_TYPES, name="room_type")
    semester = sa.Enum(*SEMESTERS, name="semester")
    weekday = sa.Enum(*WEEKDAYS, name="weekday")

    op.create_table(
        "rooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", room_type, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("units", sa.Integer(), nullable=False),
        sa.Column("type", room_type, nullable=False),
        sa.Column("semester", semester, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    op.create_table(
        "course_subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), nullable=False),
        sa.UniqueConstraint("course_id", "year", "subject_id", name="uq_course_subjects_course_year_subject"),
    )
    op.create_index("ix_course_subjects_course_id", "course_subjects", ["course_id"])

    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("semester", semester, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("course_id", "year", "name", name="uq_sections_course_year_name"),
    )

    op.create_table(
        "scheduled_subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("day", weekday, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("sections.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_scheduled_subjects_day", "scheduled_subjects", ["day"])
    op.create_index("ix_scheduled_subjects_room_id", "scheduled_subjects", ["room_id"])
    op.create_index("ix_scheduled_subjects_section_id", "scheduled_subjects", ["section_id"])
    op.create_index("ix_scheduled_subjects_subject_id", "scheduled_subjects", ["subject_id"])

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=100), primary_key=True, nullable=False),
        sa.Column("value", sa.String(length=200), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_table("scheduled_subjects")
    op.drop_table("sections")
    op.drop_table("course_subjects")
    op.drop_table("subjects")
    op.drop_table("rooms")
    bind = op.get_bind()
    for name in ("weekday", "semester", "room_type"):
        sa.Enum(name=name).drop(bind, checkfirst=True)
