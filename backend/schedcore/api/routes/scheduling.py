import logging
import random
import time

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schedcore.api.deps import get_db
from schedcore.core.config import get_settings
from schedcore.core.exceptions import ResourceNotFoundError
from schedcore.models.room import Room
from schedcore.schemas.scheduling import (
    AutoScheduleRequest,
    AutoScheduleResponse,
    FindSlotRequest,
    FindSlotResponse,
    SessionOut,
    SlotOut,
    SubjectReportOut,
)
from schedcore.services import repository
from schedcore.services.auto_scheduler import AutoScheduleOptions, AutoScheduler
from schedcore.services.slot_finder import find_slot, list_free_slots, merge_intervals
from schedcore.services.timegrid import MINUTES_PER_HOUR, parse_weekday, sort_sessions

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


@router.post("/find-slot", response_model=FindSlotResponse)
def find_free_slots(payload: FindSlotRequest, db: Session = Depends(get_db)) -> FindSlotResponse:
    day = parse_weekday(payload.day)
    semesters = repository.term_semesters(repository.get_current_semester(db))
    subject = repository.get_subject(db, payload.subjectId)
    repository.get_section(db, payload.sectionId)
    if db.get(Room, payload.roomId) is None:
        raise ResourceNotFoundError("Room", str(payload.roomId))

    room_sessions = repository.fetch_existing_sessions_for_room_and_day(db, payload.roomId, day, semesters)
    section_sessions = repository.fetch_existing_sessions_for_section_and_day(db, payload.sectionId, day, semesters)
    occupied = merge_intervals(session.interval for session in [*room_sessions, *section_sessions])

    window = settings.operating_window()
    max_hours = min(payload.hoursToSched, subject.units)
    options = list_free_slots(occupied, max_hours, window=window, step_minutes=settings.find_slot_step_minutes)
    earliest = find_slot(round(max_hours * MINUTES_PER_HOUR), occupied, window=window)

    logger.info(
        "Found %d free slot option(s) for section %s in room %s on %s",
        len(options),
        payload.sectionId,
        payload.roomId,
        day.value,
    )
    return FindSlotResponse(
        slots=[SlotOut.from_option(option) for option in options],
        earliest=SlotOut.from_interval(earliest) if earliest is not None else None,
    )


@router.post("/auto", response_model=AutoScheduleResponse)
def auto_schedule_section(payload: AutoScheduleRequest, db: Session = Depends(get_db)) -> AutoScheduleResponse:
    days = [parse_weekday(day) for day in payload.days]
    section = repository.get_section(db, payload.sectionId)
    rooms = repository.fetch_room_catalog(db, payload.roomIds)
    missing = sorted(set(payload.roomIds) - {room.id for room in rooms})
    if missing:
        raise ResourceNotFoundError("Room", ", ".join(str(room_id) for room_id in missing))

    semesters = repository.term_semesters(repository.get_current_semester(db))
    demands = repository.fetch_section_subject_demand(db, section.id)
    existing = repository.fetch_term_sessions(db, semesters)

    timeout = settings.auto_schedule_timeout_seconds
    options = AutoScheduleOptions(
        step_minutes=settings.search_step_minutes,
        attempts_per_session=settings.bulk_attempts_per_session,
        days=days,
        window=settings.operating_window(),
        deadline=time.monotonic() + timeout if timeout else None,
    )
    scheduler = AutoScheduler(options, rng=random.Random(payload.seed))
    result = scheduler.run(demands, existing, rooms, section.id)

    return AutoScheduleResponse(
        newSchedules=[SessionOut.from_session(session) for session in sort_sessions(result.created)],
        report=[SubjectReportOut.from_report(item) for item in result.report],
        cancelled=result.cancelled,
    )
