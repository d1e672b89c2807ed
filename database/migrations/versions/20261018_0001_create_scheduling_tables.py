"""create scheduling tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_SCHEDULE_PREDICATE = sa.text("status != 'archived'")


def upgrade() -> None:
    employment_type = sa.Enum("full-time", "part-time", name="employment_type")
    faculty_status = sa.Enum("active", "inactive", name="faculty_status")
    classroom_type = sa.Enum("lecture", "laboratory", "computer-lab", "conference", "other", name="classroom_type")
    classroom_status = sa.Enum("available", "maintenance", "reserved", name="classroom_status")
    session_type = sa.Enum("lecture", "laboratory", name="session_type")
    schedule_status = sa.Enum("draft", "published", "archived", name="schedule_status")

    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("code", sa.String(length=10), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("units", sa.Float(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("department_id", "code", name="uq_courses_department_code"),
    )
    op.create_index("ix_courses_code", "courses", ["code"])
    op.create_index("ix_courses_department_id", "courses", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("lecture_units", sa.Float(), nullable=False, server_default="0"),
        sa.Column("lab_units", sa.Float(), nullable=False, server_default="0"),
        sa.Column("description", sa.String(length=1000), nullable=True),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("year_level", sa.String(length=20), nullable=True),
        sa.Column("semester", sa.String(length=30), nullable=True),
        sa.Column("is_laboratory", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("prerequisite_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("course_id", "code", name="uq_subjects_course_code"),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"])
    op.create_index("ix_subjects_course_id", "subjects", ["course_id"])
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])
    op.create_index("ix_subjects_year_level", "subjects", ["year_level"])
    op.create_index("ix_subjects_semester", "subjects", ["semester"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("employment_type", employment_type, nullable=False),
        sa.Column("min_load", sa.Float(), nullable=False, server_default="18"),
        sa.Column("max_load", sa.Float(), nullable=False, server_default="26"),
        sa.Column("current_load", sa.Float(), nullable=False, server_default="0"),
        sa.Column("max_preparations", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("current_preparations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", faculty_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])
    op.create_index("ix_faculty_status", "faculty", ["status"])

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("building", sa.String(length=100), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("type", classroom_type, nullable=False),
        sa.Column("facilities", sa.JSON(), nullable=False),
        sa.Column("status", classroom_status, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("room_number", "building", name="uq_classrooms_room_building"),
    )
    op.create_index("ix_classrooms_room_number", "classrooms", ["room_number"])
    op.create_index("ix_classrooms_status", "classrooms", ["status"])

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("day", sa.String(length=20), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("session_type", session_type, nullable=False),
        sa.Column("semester", sa.String(length=30), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("year_level", sa.String(length=20), nullable=True),
        sa.Column("section", sa.String(length=10), nullable=True),
        sa.Column("status", schedule_status, nullable=False),
        sa.Column("is_generated", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_subject_id", "schedules", ["subject_id"])
    op.create_index("ix_schedules_faculty_id", "schedules", ["faculty_id"])
    op.create_index("ix_schedules_classroom_id", "schedules", ["classroom_id"])
    op.create_index("ix_schedules_department_id", "schedules", ["department_id"])
    op.create_index("ix_schedules_status", "schedules", ["status"])
    op.create_index("ix_schedules_term", "schedules", ["semester", "academic_year"])
    op.create_index(
        "uq_schedules_classroom_slot",
        "schedules",
        ["classroom_id", "day", "start_time", "semester", "academic_year"],
        unique=True,
        postgresql_where=ACTIVE_SCHEDULE_PREDICATE,
        sqlite_where=ACTIVE_SCHEDULE_PREDICATE,
    )
    op.create_index(
        "uq_schedules_faculty_slot",
        "schedules",
        ["faculty_id", "day", "start_time", "semester", "academic_year"],
        unique=True,
        postgresql_where=ACTIVE_SCHEDULE_PREDICATE,
        sqlite_where=ACTIVE_SCHEDULE_PREDICATE,
    )


def downgrade() -> None:
    op.drop_index("uq_schedules_faculty_slot", table_name="schedules")
    op.drop_index("uq_schedules_classroom_slot", table_name="schedules")
    op.drop_table("schedules")
    op.drop_table("classrooms")
    op.drop_table("faculty")
    op.drop_table("subjects")
    op.drop_table("courses")
    op.drop_table("departments")

    bind = op.get_bind()
    for enum_name in (
        "schedule_status",
        "session_type",
        "classroom_status",
        "classroom_type",
        "faculty_status",
        "employment_type",
    ):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
