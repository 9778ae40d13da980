"""Randomized bulk placement of a section's unscheduled subjects.

Each subject is handled on its own, in the order given. Its remaining minutes
are split into blocks and every block gets a bounded number of random
(day, start, room) draws; the first draw that double-books neither the room
nor the section is accepted. A block that runs out of draws ends the work on
that subject. Nothing is undone across subjects, so the search can report a
shortfall even when some other arrangement would have fitted everything.
"""
from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from schedcore.core.exceptions import SchedulerError
from schedcore.services.conflict_service import conflicts
from schedcore.services.duration import SubjectDemand
from schedcore.services.session_splitter import split_into_sessions
from schedcore.services.timegrid import (
    AVAILABLE_DAYS,
    DEFAULT_WINDOW,
    Interval,
    OperatingWindow,
    ScheduledSession,
    Weekday,
)

logger = logging.getLogger(__name__)

RoomPicker = Callable[[Any, SubjectDemand], bool]


def default_room_picker(room: Any, subject: SubjectDemand) -> bool:
    return room.type == subject.room_type


@dataclass
class AutoScheduleOptions:
    step_minutes: int = 30
    attempts_per_session: int = 200
    days: Sequence[Weekday] | None = None
    room_picker: RoomPicker | None = None
    window: OperatingWindow = DEFAULT_WINDOW
    # Absolute time.monotonic() value after which no further subject is started.
    deadline: float | None = None
    should_stop: Callable[[], bool] | None = None


@dataclass(frozen=True)
class SubjectReport:
    subject_id: int
    scheduled_minutes_before: int
    scheduled_minutes_after: int
    created_sessions: int
    failed: str | None = None


@dataclass
class AutoScheduleResult:
    created: list[ScheduledSession] = field(default_factory=list)
    report: list[SubjectReport] = field(default_factory=list)
    cancelled: bool = False


class AutoScheduler:
    def __init__(
        self,
        options: AutoScheduleOptions | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.options = options or AutoScheduleOptions()
        self.random = rng or random.Random()
        self.clock = clock
        self.days: tuple[Weekday, ...] = tuple(self.options.days) if self.options.days is not None else AVAILABLE_DAYS
        self.room_picker = self.options.room_picker or default_room_picker

        if self.options.step_minutes <= 0:
            raise SchedulerError("stepMinutes must be positive", details={"step_minutes": self.options.step_minutes})
        if self.options.attempts_per_session < 1:
            raise SchedulerError(
                "attemptsPerSession must be at least 1",
                details={"attempts_per_session": self.options.attempts_per_session},
            )
        if not self.days:
            raise SchedulerError("No candidate days provided")

    def possible_starts(self, session_minutes: int) -> list[int]:
        window = self.options.window
        latest_start = window.end - session_minutes
        return list(range(window.start, latest_start + 1, self.options.step_minutes))

    def _should_stop(self) -> bool:
        if self.options.should_stop is not None and self.options.should_stop():
            return True
        return self.options.deadline is not None and self.clock() >= self.options.deadline

    def run(
        self,
        subjects: Sequence[SubjectDemand],
        existing: Sequence[ScheduledSession],
        rooms: Sequence[Any],
        section_id: int,
    ) -> AutoScheduleResult:
        # Caller snapshots stay untouched; placements accumulate in run-local lists.
        placed: list[ScheduledSession] = list(existing)
        result = AutoScheduleResult()

        for position, subject in enumerate(subjects):
            if self._should_stop():
                result.cancelled = True
                self._report_cancelled(subjects[position:], result)
                logger.warning(
                    "Auto-schedule for section %s stopped early; %d subject(s) not attempted",
                    section_id,
                    len(subjects) - position,
                )
                break

            remaining = subject.remaining_minutes
            if remaining <= 0:
                continue
            result.report.append(self._schedule_subject(subject, remaining, rooms, section_id, placed, result.created))

        logger.info(
            "Auto-schedule for section %s created %d session(s) across %d subject(s)",
            section_id,
            len(result.created),
            len(result.report),
        )
        return result

    def _schedule_subject(
        self,
        subject: SubjectDemand,
        remaining: int,
        rooms: Sequence[Any],
        section_id: int,
        placed: list[ScheduledSession],
        created: list[ScheduledSession],
    ) -> SubjectReport:
        before = subject.scheduled_minutes
        matching_rooms = [room for room in rooms if self.room_picker(room, subject)]
        if not matching_rooms:
            room_type = getattr(subject.room_type, "value", subject.room_type)
            logger.warning("No rooms for type %s (subject %s)", room_type, subject.subject_id)
            return SubjectReport(
                subject_id=subject.subject_id,
                scheduled_minutes_before=before,
                scheduled_minutes_after=before,
                created_sessions=0,
                failed=f"No rooms for type {room_type}",
            )

        created_count = 0
        scheduled_now = 0
        for session_minutes in split_into_sessions(remaining):
            session = self._place_block(subject, session_minutes, matching_rooms, section_id, placed)
            if session is None:
                logger.debug(
                    "Gave up on a %d-minute block for subject %s after %d attempt(s)",
                    session_minutes,
                    subject.subject_id,
                    self.options.attempts_per_session,
                )
                break
            placed.append(session)
            created.append(session)
            created_count += 1
            scheduled_now += session_minutes
            remaining -= session_minutes

        return SubjectReport(
            subject_id=subject.subject_id,
            scheduled_minutes_before=before,
            scheduled_minutes_after=before + scheduled_now,
            created_sessions=created_count,
            failed=f"{remaining} mins not scheduled" if remaining > 0 else None,
        )

    def _place_block(
        self,
        subject: SubjectDemand,
        session_minutes: int,
        rooms: Sequence[Any],
        section_id: int,
        placed: Sequence[ScheduledSession],
    ) -> ScheduledSession | None:
        starts = self.possible_starts(session_minutes)
        if not starts:
            return None
        for _ in range(self.options.attempts_per_session):
            day = self.random.choice(self.days)
            start = self.random.choice(starts)
            room = self.random.choice(rooms)
            candidate = ScheduledSession(
                day=day,
                interval=Interval(start, start + session_minutes),
                room_id=room.id,
                section_id=section_id,
                subject_id=subject.subject_id,
            )
            if not conflicts(candidate, placed):
                return candidate
        return None

    @staticmethod
    def _report_cancelled(subjects: Sequence[SubjectDemand], result: AutoScheduleResult) -> None:
        for subject in subjects:
            if subject.remaining_minutes <= 0:
                continue
            result.report.append(SubjectReport(
                subject_id=subject.subject_id,
                scheduled_minutes_before=subject.scheduled_minutes,
                scheduled_minutes_after=subject.scheduled_minutes,
                created_sessions=0,
                failed=f"Cancelled: {subject.remaining_minutes} mins not scheduled",
            ))


def auto_schedule(
    subjects: Sequence[SubjectDemand],
    existing: Sequence[ScheduledSession],
    rooms: Sequence[Any],
    section_id: int,
    options: AutoScheduleOptions | None = None,
    rng: random.Random | None = None,
) -> AutoScheduleResult:
    return AutoScheduler(options, rng=rng).run(subjects, existing, rooms, section_id)
