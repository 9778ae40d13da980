from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from schedcore.core.exceptions import SchedulerError
from schedcore.services.timegrid import (
    AVAILABLE_DAYS,
    DEFAULT_WINDOW,
    MINUTES_PER_HOUR,
    Interval,
    OperatingWindow,
    ScheduledSession,
    Weekday,
)

logger = logging.getLogger(__name__)

# Offered session lengths, in hours, when listing free slots.
STANDARD_DURATIONS: tuple[float, ...] = (1, 1.5, 2, 3, 4, 6)
SLIDE_STEP_MINUTES = 15


@dataclass(frozen=True)
class SlotOption:
    interval: Interval
    duration_hours: float


def find_slot(
    required_minutes: int,
    existing: Iterable[Interval],
    window: OperatingWindow = DEFAULT_WINDOW,
) -> Interval | None:
    """Earliest-fit search over one room's or one section's bookings for a day.

    Bookings are scanned in start order between zero-length markers at the
    start and end of the window; the first gap that can hold
    ``required_minutes`` wins and the slot is placed at the start of that gap.
    Returns ``None`` when no gap is large enough.
    """
    if required_minutes <= 0:
        raise SchedulerError("Required minutes must be positive", details={"required_minutes": required_minutes})

    ordered = sorted(existing, key=lambda item: (item.start, item.end))
    cursor = window.start
    for booking in ordered:
        if min(booking.start, window.end) - cursor >= required_minutes:
            return Interval(cursor, cursor + required_minutes)
        # Overlapping bookings must not reopen time that an earlier one still covers.
        cursor = max(cursor, booking.end)
    if window.end - cursor >= required_minutes:
        return Interval(cursor, cursor + required_minutes)
    return None


def find_slot_across_days(
    required_minutes: int,
    sessions: Iterable[ScheduledSession],
    days: Sequence[Weekday] = AVAILABLE_DAYS,
    window: OperatingWindow = DEFAULT_WINDOW,
) -> tuple[Weekday, Interval] | None:
    by_day: dict[Weekday, list[Interval]] = {day: [] for day in days}
    for session in sessions:
        if session.day in by_day:
            by_day[session.day].append(session.interval)
    for day in days:
        slot = find_slot(required_minutes, by_day[day], window)
        if slot is not None:
            return day, slot
    return None


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    merged: list[Interval] = []
    for interval in sorted(intervals):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def free_gaps(occupied: Iterable[Interval], window: OperatingWindow = DEFAULT_WINDOW) -> list[Interval]:
    """Invert bookings into the free stretches of the window."""
    gaps: list[Interval] = []
    cursor = window.start
    for booked in merge_intervals(occupied):
        if booked.end <= window.start:
            continue
        if booked.start >= window.end:
            break
        gap_end = min(booked.start, window.end)
        if gap_end > cursor:
            gaps.append(Interval(cursor, gap_end))
        cursor = max(cursor, min(booked.end, window.end))
    if cursor < window.end:
        gaps.append(Interval(cursor, window.end))
    return gaps


def candidate_slots(gap: Interval, duration_minutes: int, step_minutes: int = SLIDE_STEP_MINUTES) -> list[Interval]:
    if step_minutes <= 0:
        raise SchedulerError("Step minutes must be positive")
    return [
        Interval(start, start + duration_minutes)
        for start in range(gap.start, gap.end - duration_minutes + 1, step_minutes)
    ]


def list_free_slots(
    occupied: Iterable[Interval],
    max_hours: float,
    window: OperatingWindow = DEFAULT_WINDOW,
    step_minutes: int = SLIDE_STEP_MINUTES,
) -> list[SlotOption]:
    """Every standard-length slot that fits in the free time, ordered by duration then start."""
    gaps = free_gaps(occupied, window)
    options: list[SlotOption] = []
    for hours in STANDARD_DURATIONS:
        if hours > max_hours:
            continue
        duration = round(hours * MINUTES_PER_HOUR)
        slots: list[Interval] = []
        for gap in gaps:
            slots.extend(candidate_slots(gap, duration, step_minutes))
        slots.sort(key=lambda item: item.start)
        options.extend(SlotOption(interval=slot, duration_hours=hours) for slot in slots)
    logger.debug("Listed %d free slot option(s) across %d gap(s)", len(options), len(gaps))
    return options
