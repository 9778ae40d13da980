from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from schedcore.db.base import Base
from schedcore.models.room import RoomType


class Semester(str, Enum):
    first = "First_Semester"
    second = "Second_Semester"
    whole = "Whole_Semester"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    units: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    type: Mapped[RoomType] = mapped_column(SAEnum(RoomType, name="room_type"), nullable=False)
    semester: Mapped[Semester] = mapped_column(SAEnum(Semester, name="semester"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class CourseSubject(Base):
    """Curriculum link: a subject taught to a course's sections in a given year."""

    __tablename__ = "course_subjects"
    __table_args__ = (
        UniqueConstraint("course_id", "year", "subject_id", name="uq_course_subjects_course_year_subject"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_id: Mapped[int] = mapped_column(Integer, nullable=False)
