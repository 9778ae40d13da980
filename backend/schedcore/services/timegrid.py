"""Time-of-day, interval and weekday primitives.

Times are carried as integer minutes after midnight. Text in "H:MM" or
"HH:MM" form is parsed and formatted only at the edges of the engine.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from schedcore.core.exceptions import InvalidTimeFormat, InvalidWeekday, SchedulerError

DAY_START = "7:30"
DAY_END = "19:30"
TIME_GRID_MINUTES = 15
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class Weekday(str, Enum):
    monday = "Monday"
    tuesday = "Tuesday"
    wednesday = "Wednesday"
    thursday = "Thursday"
    friday = "Friday"
    saturday = "Saturday"


AVAILABLE_DAYS: tuple[Weekday, ...] = tuple(Weekday)
DAY_ORDER: dict[Weekday, int] = {day: index for index, day in enumerate(AVAILABLE_DAYS)}


def parse_weekday(value: object) -> Weekday:
    if isinstance(value, Weekday):
        return value
    if isinstance(value, str):
        try:
            return Weekday(value.strip().capitalize())
        except ValueError:
            pass
    raise InvalidWeekday(value, [day.value for day in AVAILABLE_DAYS])


def is_valid_day(value: object) -> bool:
    try:
        parse_weekday(value)
    except InvalidWeekday:
        return False
    return True


def to_minutes(time: str) -> int:
    if not isinstance(time, str):
        raise InvalidTimeFormat(time)
    match = TIME_PATTERN.match(time.strip())
    if match is None:
        raise InvalidTimeFormat(time)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(time)
    return hours * MINUTES_PER_HOUR + minutes


def to_time(minutes: int) -> str:
    """Format minutes after midnight as unpadded "H:MM" text (450 -> "7:30")."""
    if minutes < 0 or minutes >= MINUTES_PER_DAY:
        raise InvalidTimeFormat(minutes, "Minutes outside of a day")
    return f"{minutes // MINUTES_PER_HOUR}:{minutes % MINUTES_PER_HOUR:02d}"


def to_hours(minutes: int) -> float:
    return minutes / MINUTES_PER_HOUR


def diff_minutes(start: str, end: str) -> int:
    return to_minutes(end) - to_minutes(start)


def normalize_time(value: str | None) -> str:
    """Zero-pad a time value: "7:30" -> "07:30". Empty input gives an empty string."""
    if not value:
        return ""
    minutes = to_minutes(value)
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def format_time(time: str | int) -> str:
    """Twelve-hour display form: "19:30" -> "7:30 PM"."""
    minutes = time if isinstance(time, int) else to_minutes(time)
    hour, minute = divmod(minutes, MINUTES_PER_HOUR)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


@dataclass(frozen=True)
class OperatingWindow:
    start: int
    end: int
    grid_minutes: int = TIME_GRID_MINUTES

    def __post_init__(self) -> None:
        if self.grid_minutes <= 0:
            raise SchedulerError("Time grid must be a positive number of minutes")
        if not 0 <= self.start < self.end <= MINUTES_PER_DAY:
            raise InvalidTimeFormat(f"{self.start}-{self.end}", "Operating window must start before it ends")

    @classmethod
    def from_strings(cls, start: str, end: str, grid_minutes: int = TIME_GRID_MINUTES) -> "OperatingWindow":
        return cls(start=to_minutes(start), end=to_minutes(end), grid_minutes=grid_minutes)

    @property
    def start_time(self) -> str:
        return to_time(self.start)

    @property
    def end_time(self) -> str:
        return to_time(self.end)

    def contains(self, minutes: int) -> bool:
        return self.start <= minutes <= self.end

    def on_grid(self, minutes: int) -> bool:
        return minutes % self.grid_minutes == 0


DEFAULT_WINDOW = OperatingWindow.from_strings(DAY_START, DAY_END)
DAY_START_MINUTES = DEFAULT_WINDOW.start
DAY_END_MINUTES = DEFAULT_WINDOW.end


def is_valid_time(value: str, window: OperatingWindow = DEFAULT_WINDOW) -> bool:
    """True for grid-aligned times inside the window, e.g. "7:30", "08:15", "19:30"."""
    try:
        minutes = to_minutes(value)
    except InvalidTimeFormat:
        return False
    return window.contains(minutes) and window.on_grid(minutes)


def is_valid_range(start: str, end: str, window: OperatingWindow = DEFAULT_WINDOW) -> bool:
    if not is_valid_time(start, window) or not is_valid_time(end, window):
        return False
    return to_minutes(end) > to_minutes(start)


def parse_time(value: str, window: OperatingWindow = DEFAULT_WINDOW, field: str | None = None) -> int:
    try:
        minutes = to_minutes(value)
    except InvalidTimeFormat:
        minutes = None
    if minutes is None or not window.contains(minutes) or not window.on_grid(minutes):
        raise InvalidTimeFormat(
            value,
            f"Time must be on the {window.grid_minutes}-minute grid between "
            f"{window.start_time} and {window.end_time}",
            field=field,
        )
    return minutes


@dataclass(frozen=True, order=True)
class Interval:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidTimeFormat(f"{self.start}-{self.end}", "Interval end must be after its start")

    @classmethod
    def from_strings(cls, start: str, end: str) -> "Interval":
        return cls(to_minutes(start), to_minutes(end))

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return to_time(self.start)

    @property
    def end_time(self) -> str:
        return to_time(self.end)

    def overlaps(self, other: "Interval") -> bool:
        # Open intervals: touching endpoints do not overlap.
        return self.start < other.end and self.end > other.start

    def within(self, window: OperatingWindow) -> bool:
        return window.start <= self.start and self.end <= window.end

    def __str__(self) -> str:
        return f"{self.start_time}-{self.end_time}"


def parse_interval(
    start: str,
    end: str,
    window: OperatingWindow = DEFAULT_WINDOW,
) -> Interval:
    start_minutes = parse_time(start, window, field="startTime")
    end_minutes = parse_time(end, window, field="endTime")
    if end_minutes <= start_minutes:
        raise InvalidTimeFormat(f"{start}-{end}", "End time must be after start time", field="endTime")
    return Interval(start_minutes, end_minutes)


@dataclass(frozen=True)
class ScheduledSession:
    """One occurrence of a subject for a section, in a room, on a weekday."""

    day: Weekday
    interval: Interval
    room_id: int
    section_id: int
    subject_id: int
    id: int | None = field(default=None, compare=False)

    @property
    def start(self) -> int:
        return self.interval.start

    @property
    def end(self) -> int:
        return self.interval.end

    @property
    def start_time(self) -> str:
        return self.interval.start_time

    @property
    def end_time(self) -> str:
        return self.interval.end_time

    @property
    def duration(self) -> int:
        return self.interval.duration


def session_sort_key(session: ScheduledSession) -> tuple[int, int]:
    return DAY_ORDER[session.day], session.start


def sort_sessions(sessions: Iterable[ScheduledSession]) -> list[ScheduledSession]:
    return sorted(sessions, key=session_sort_key)
