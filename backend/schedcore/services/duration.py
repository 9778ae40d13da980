from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from schedcore.models.room import RoomType
from schedcore.services.timegrid import MINUTES_PER_HOUR, Interval, ScheduledSession

MINUTES_PER_UNIT = MINUTES_PER_HOUR


def required_minutes(units: float) -> int:
    return round(units * MINUTES_PER_UNIT)


def scheduled_minutes(sessions: Iterable[ScheduledSession | Interval]) -> int:
    return sum(session.duration for session in sessions)


def remaining_minutes(units: float, sessions: Iterable[ScheduledSession | Interval]) -> int:
    # Over-scheduled subjects floor at zero; the excess is only a display concern.
    return max(0, required_minutes(units) - scheduled_minutes(sessions))


def remaining_units(units: float, sessions: Iterable[ScheduledSession | Interval]) -> float:
    return remaining_minutes(units, sessions) / MINUTES_PER_UNIT


def is_excess(units: float, sessions: Iterable[ScheduledSession | Interval]) -> bool:
    return scheduled_minutes(sessions) > required_minutes(units)


@dataclass(frozen=True)
class SubjectDemand:
    subject_id: int
    room_type: RoomType
    required_minutes: int
    scheduled_minutes: int = 0
    code: str | None = None
    name: str | None = None

    @property
    def remaining_minutes(self) -> int:
        return max(0, self.required_minutes - self.scheduled_minutes)

    @property
    def is_excess(self) -> bool:
        return self.scheduled_minutes > self.required_minutes


def build_demand(
    subject_id: int,
    units: float,
    room_type: RoomType,
    sessions: Iterable[ScheduledSession],
    *,
    code: str | None = None,
    name: str | None = None,
) -> SubjectDemand:
    """Derive a subject's demand from its unit count and the sessions it already has for one section."""
    return SubjectDemand(
        subject_id=subject_id,
        room_type=room_type,
        required_minutes=required_minutes(units),
        scheduled_minutes=scheduled_minutes(sessions),
        code=code,
        name=name,
    )
