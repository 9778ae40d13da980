"""Snapshot loading and batch commit against the scheduling tables.

The placement engine never touches the database; these helpers fetch the
inputs it needs as plain values and persist a batch once it has been accepted.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Collection, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from schedcore.core.exceptions import ResourceNotFoundError, SchedulerError
from schedcore.models.room import Room
from schedcore.models.scheduled_subject import ScheduledSubject
from schedcore.models.section import Section
from schedcore.models.setting import CURRENT_SEMESTER_KEY, Setting
from schedcore.models.subject import CourseSubject, Semester, Subject
from schedcore.services.batch_validator import Catalog, SubjectInfo
from schedcore.services.duration import SubjectDemand, build_demand
from schedcore.services.timegrid import Interval, ScheduledSession, Weekday

logger = logging.getLogger(__name__)


def get_current_semester(db: Session) -> Semester:
    setting = db.get(Setting, CURRENT_SEMESTER_KEY)
    if setting is None:
        raise SchedulerError("Semester setting not found")
    try:
        return Semester(setting.value)
    except ValueError as exc:
        raise SchedulerError(f"Unknown semester setting {setting.value!r}") from exc


def term_semesters(current: Semester) -> frozenset[Semester]:
    # Whole-semester subjects occupy their rooms in either term.
    return frozenset({current, Semester.whole})


def to_session(row: ScheduledSubject) -> ScheduledSession:
    return ScheduledSession(
        day=row.day,
        interval=Interval.from_strings(row.start_time, row.end_time),
        room_id=row.room_id,
        section_id=row.section_id,
        subject_id=row.subject_id,
        id=row.id,
    )


def _scheduled_in_terms(semesters: Collection[Semester]):
    return (
        select(ScheduledSubject)
        .join(Subject, Subject.id == ScheduledSubject.subject_id)
        .where(Subject.semester.in_(list(semesters)))
    )


def fetch_existing_sessions_for_room_and_day(
    db: Session, room_id: int, day: Weekday, semesters: Collection[Semester]
) -> list[ScheduledSession]:
    stmt = _scheduled_in_terms(semesters).where(ScheduledSubject.room_id == room_id, ScheduledSubject.day == day)
    return [to_session(row) for row in db.execute(stmt).scalars()]


def fetch_existing_sessions_for_section_and_day(
    db: Session, section_id: int, day: Weekday, semesters: Collection[Semester]
) -> list[ScheduledSession]:
    stmt = _scheduled_in_terms(semesters).where(
        ScheduledSubject.section_id == section_id, ScheduledSubject.day == day
    )
    return [to_session(row) for row in db.execute(stmt).scalars()]


def fetch_existing_sessions_for_subject_and_section(
    db: Session, subject_id: int, section_id: int, semesters: Collection[Semester]
) -> list[ScheduledSession]:
    stmt = _scheduled_in_terms(semesters).where(
        ScheduledSubject.subject_id == subject_id, ScheduledSubject.section_id == section_id
    )
    return [to_session(row) for row in db.execute(stmt).scalars()]


def fetch_term_sessions(db: Session, semesters: Collection[Semester]) -> list[ScheduledSession]:
    return [to_session(row) for row in db.execute(_scheduled_in_terms(semesters)).scalars()]


def fetch_all_sessions(db: Session) -> list[ScheduledSession]:
    return [to_session(row) for row in db.execute(select(ScheduledSubject)).scalars()]


def fetch_room_catalog(db: Session, room_ids: Iterable[int] | None = None) -> list[Room]:
    stmt = select(Room).order_by(Room.id)
    if room_ids is not None:
        stmt = stmt.where(Room.id.in_(list(room_ids)))
    return list(db.execute(stmt).scalars())


def get_section(db: Session, section_id: int) -> Section:
    section = db.get(Section, section_id)
    if section is None:
        raise ResourceNotFoundError("Section", str(section_id))
    return section


def get_subject(db: Session, subject_id: int) -> Subject:
    subject = db.get(Subject, subject_id)
    if subject is None:
        raise ResourceNotFoundError("Subject", str(subject_id))
    return subject


def fetch_section_subject_demand(db: Session, section_id: int) -> list[SubjectDemand]:
    """Curriculum subjects of the section's course, year and term that still need minutes."""
    section = get_section(db, section_id)
    subjects = list(
        db.execute(
            select(Subject)
            .join(CourseSubject, CourseSubject.subject_id == Subject.id)
            .where(
                CourseSubject.course_id == section.course_id,
                CourseSubject.year == section.year,
                Subject.semester == section.semester,
            )
            .order_by(CourseSubject.id)
        ).scalars()
    )
    if not subjects:
        return []

    sessions_by_subject: dict[int, list[ScheduledSession]] = defaultdict(list)
    rows = db.execute(
        select(ScheduledSubject).where(
            ScheduledSubject.section_id == section.id,
            ScheduledSubject.subject_id.in_([subject.id for subject in subjects]),
        )
    ).scalars()
    for row in rows:
        sessions_by_subject[row.subject_id].append(to_session(row))

    demands = [
        build_demand(
            subject.id,
            subject.units,
            subject.type,
            sessions_by_subject[subject.id],
            code=subject.code,
            name=subject.name,
        )
        for subject in subjects
    ]
    return [demand for demand in demands if demand.scheduled_minutes < demand.required_minutes]


def fetch_catalog(db: Session) -> Catalog:
    return Catalog(
        room_ids=set(db.execute(select(Room.id)).scalars()),
        section_ids=set(db.execute(select(Section.id)).scalars()),
        subjects={
            subject.id: SubjectInfo(id=subject.id, units=subject.units, semester=subject.semester)
            for subject in db.execute(select(Subject)).scalars()
        },
    )


def commit_sessions(db: Session, sessions: Sequence[ScheduledSession]) -> list[ScheduledSubject]:
    """Persist an accepted batch in one transaction; either every row is written or none is."""
    rows = [
        ScheduledSubject(
            day=session.day,
            start_time=session.start_time,
            end_time=session.end_time,
            room_id=session.room_id,
            section_id=session.section_id,
            subject_id=session.subject_id,
        )
        for session in sessions
    ]
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to commit %d scheduled session(s)", len(rows))
        raise
    for row in rows:
        db.refresh(row)
    logger.info("Committed %d scheduled session(s)", len(rows))
    return rows
