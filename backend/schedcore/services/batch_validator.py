from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field

from schedcore.core.exceptions import BatchValidationError, InvalidWeekday
from schedcore.models.subject import Semester
from schedcore.services.conflict_service import ConflictService, find_conflict
from schedcore.services.duration import required_minutes
from schedcore.services.timegrid import (
    DEFAULT_WINDOW,
    OperatingWindow,
    ScheduledSession,
    is_valid_range,
    is_valid_time,
    parse_interval,
    parse_weekday,
    to_hours,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProposedSession:
    """A caller-submitted session, still in its boundary (text) form."""

    day: str
    start_time: str
    end_time: str
    room_id: int
    section_id: int
    subject_id: int


@dataclass(frozen=True)
class SubjectInfo:
    id: int
    units: int
    semester: Semester | None = None


@dataclass
class Catalog:
    room_ids: set[int] = field(default_factory=set)
    section_ids: set[int] = field(default_factory=set)
    subjects: dict[int, SubjectInfo] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    indices: tuple[int, ...] = ()
    field: str | None = None
    resolutions: tuple[dict, ...] = ()


@dataclass
class BatchValidation:
    sessions: list[ScheduledSession] = field(default_factory=list)
    issue: ValidationIssue | None = None

    @property
    def ok(self) -> bool:
        return self.issue is None

    def raise_for_issue(self) -> list[ScheduledSession]:
        if self.issue is not None:
            raise BatchValidationError(
                self.issue.message,
                code=self.issue.code,
                indices=list(self.issue.indices),
                field=self.issue.field,
                resolutions=list(self.issue.resolutions),
            )
        return self.sessions


def _reject(
    code: str,
    message: str,
    indices: Sequence[int] = (),
    field: str | None = None,
    resolutions: Sequence[dict] = (),
) -> BatchValidation:
    logger.info("Rejected schedule batch (%s): %s", code, message)
    return BatchValidation(issue=ValidationIssue(
        code=code,
        message=message,
        indices=tuple(indices),
        field=field,
        resolutions=tuple(resolutions),
    ))


def _check_structure(
    proposed: Sequence[ProposedSession],
    window: OperatingWindow,
) -> tuple[list[ScheduledSession], BatchValidation | None]:
    sessions: list[ScheduledSession] = []
    for index, item in enumerate(proposed):
        try:
            day = parse_weekday(item.day)
        except InvalidWeekday as exc:
            return [], _reject("invalid_day", f"Invalid day in schedule at index {index}. {exc.message}", [index], "day")
        if not is_valid_time(item.start_time, window) or not is_valid_time(item.end_time, window):
            field_name = "startTime" if not is_valid_time(item.start_time, window) else "endTime"
            return [], _reject(
                "invalid_time",
                f"Invalid time format in schedule at index {index}.",
                [index],
                field_name,
            )
        if not is_valid_range(item.start_time, item.end_time, window):
            return [], _reject("invalid_range", f"Invalid time range in schedule at index {index}.", [index], "endTime")
        sessions.append(ScheduledSession(
            day=day,
            interval=parse_interval(item.start_time, item.end_time, window),
            room_id=item.room_id,
            section_id=item.section_id,
            subject_id=item.subject_id,
        ))
    return sessions, None


def validate_batch(
    proposed: Sequence[ProposedSession],
    persisted: Sequence[ScheduledSession],
    catalog: Catalog,
    semesters: Collection[Semester] | None = None,
    window: OperatingWindow = DEFAULT_WINDOW,
) -> BatchValidation:
    """Accept or reject a whole batch of proposed sessions.

    Checks run in order and stop at the first failure: structure of each
    entry, overlaps inside the batch, catalog references, the subject's unit
    budget for the section, then overlaps with persisted sessions of the same
    term. There is no partial acceptance.

    ``persisted`` should hold every committed session. All of them count
    towards a subject's unit budget; when ``semesters`` is given, only
    sessions whose subject belongs to one of those terms can clash.
    """
    if not proposed:
        return _reject("empty_batch", "Schedules must be a non-empty array")

    sessions, failure = _check_structure(proposed, window)
    if failure is not None:
        return failure

    detector = ConflictService(sessions)
    internal = detector.first_conflict()
    if internal is not None:
        i, j = internal.affected_slots
        return _reject(
            internal.conflict_type,
            f"Conflict detected between schedules at index {i} and {j} on {internal.day}. {internal.description}",
            [i, j],
            resolutions=[action.model_dump() for action in detector.generate_resolutions(internal)],
        )

    # The unit budget spans every term; only the overlap check is term-scoped.
    scheduled_by_subject_section: dict[tuple[int, int], int] = defaultdict(int)
    for item in persisted:
        scheduled_by_subject_section[(item.subject_id, item.section_id)] += item.duration

    bookable = list(persisted)
    if semesters is not None:
        bookable = [
            item for item in persisted
            if item.subject_id in catalog.subjects and catalog.subjects[item.subject_id].semester in semesters
        ]

    for index, session in enumerate(sessions):
        if session.room_id not in catalog.room_ids:
            return _reject("room_not_found", f"Room not found for schedule at index {index}.", [index], "roomId")
        if session.section_id not in catalog.section_ids:
            return _reject("section_not_found", f"Section not found for schedule at index {index}.", [index], "sectionId")
        subject = catalog.subjects.get(session.subject_id)
        if subject is None:
            return _reject("subject_not_found", f"Subject not found for schedule at index {index}.", [index], "subjectId")

        # Earlier entries of the same batch count against the budget too.
        key = (session.subject_id, session.section_id)
        remaining = max(0, required_minutes(subject.units) - scheduled_by_subject_section[key])
        if session.duration > remaining:
            return _reject(
                "duration_exceeded",
                f"Duration must not exceed remaining units for subjectId {session.subject_id}. "
                f"Remaining: {to_hours(remaining):g}",
                [index],
                "endTime",
            )
        scheduled_by_subject_section[key] += session.duration

        related = sorted(
            (
                item for item in bookable
                if item.day == session.day
                and (item.room_id == session.room_id or item.section_id == session.section_id)
            ),
            key=lambda item: item.start,
        )
        clash = find_conflict(session, related)
        if clash is not None:
            resource = "room" if clash.room_id == session.room_id else "section"
            return _reject(
                "persisted_conflict",
                f"Conflict detected for subjectId {session.subject_id} on {session.day.value}: "
                f"{session.interval} overlaps existing {resource} booking {clash.interval}.",
                [index],
            )

    logger.debug("Accepted schedule batch of %d session(s)", len(sessions))
    return BatchValidation(sessions=sessions)
