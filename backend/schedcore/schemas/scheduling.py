from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from schedcore.services.auto_scheduler import SubjectReport
from schedcore.services.batch_validator import ProposedSession
from schedcore.services.slot_finder import SlotOption
from schedcore.services.timegrid import Interval, ScheduledSession, format_time


class SessionPayload(BaseModel):
    day: str = Field(min_length=1, max_length=20)
    startTime: str = Field(min_length=1, max_length=5)
    endTime: str = Field(min_length=1, max_length=5)
    roomId: int = Field(ge=1)
    sectionId: int = Field(ge=1)
    subjectId: int = Field(ge=1)

    def to_proposed(self) -> ProposedSession:
        return ProposedSession(
            day=self.day,
            start_time=self.startTime,
            end_time=self.endTime,
            room_id=self.roomId,
            section_id=self.sectionId,
            subject_id=self.subjectId,
        )


class SessionOut(BaseModel):
    id: int | None = None
    day: str
    startTime: str
    endTime: str
    roomId: int
    sectionId: int
    subjectId: int

    @classmethod
    def from_session(cls, session: ScheduledSession, session_id: int | None = None) -> "SessionOut":
        return cls(
            id=session_id if session_id is not None else session.id,
            day=session.day.value,
            startTime=session.start_time,
            endTime=session.end_time,
            roomId=session.room_id,
            sectionId=session.section_id,
            subjectId=session.subject_id,
        )


class BulkScheduleRequest(BaseModel):
    schedules: list[SessionPayload] = Field(min_length=1, max_length=500)
    commit: bool = False


class BulkScheduleResponse(BaseModel):
    schedules: list[SessionOut]
    committed: bool


class SlotOut(BaseModel):
    startTime: str
    endTime: str
    duration: float
    label: str

    @classmethod
    def from_interval(cls, interval: Interval, duration_hours: float | None = None) -> "SlotOut":
        hours = duration_hours if duration_hours is not None else interval.duration / 60
        return cls(
            startTime=interval.start_time,
            endTime=interval.end_time,
            duration=hours,
            label=f"{format_time(interval.start)} - {format_time(interval.end)}",
        )

    @classmethod
    def from_option(cls, option: SlotOption) -> "SlotOut":
        return cls.from_interval(option.interval, option.duration_hours)


class FindSlotRequest(BaseModel):
    sectionId: int = Field(ge=1)
    subjectId: int = Field(ge=1)
    roomId: int = Field(ge=1)
    day: str = Field(min_length=1, max_length=20)
    hoursToSched: float = Field(gt=0, le=12)


class FindSlotResponse(BaseModel):
    slots: list[SlotOut]
    earliest: SlotOut | None = None


class AutoScheduleRequest(BaseModel):
    sectionId: int = Field(ge=1)
    days: list[str] = Field(min_length=1, max_length=7)
    roomIds: list[int] = Field(min_length=1)
    seed: int | None = None

    @field_validator("days")
    @classmethod
    def dedupe_days(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(day.strip() for day in value if day.strip()))

    @field_validator("roomIds")
    @classmethod
    def dedupe_room_ids(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(value))


class SubjectReportOut(BaseModel):
    subjectId: int
    scheduledMinutesBefore: int
    scheduledMinutesAfter: int
    createdSessions: int
    failed: str | None = None

    @classmethod
    def from_report(cls, report: SubjectReport) -> "SubjectReportOut":
        return cls(
            subjectId=report.subject_id,
            scheduledMinutesBefore=report.scheduled_minutes_before,
            scheduledMinutesAfter=report.scheduled_minutes_after,
            createdSessions=report.created_sessions,
            failed=report.failed,
        )


class AutoScheduleResponse(BaseModel):
    newSchedules: list[SessionOut]
    report: list[SubjectReportOut]
    cancelled: bool = False
