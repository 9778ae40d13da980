import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schedcore.api.deps import get_db
from schedcore.core.config import get_settings
from schedcore.schemas.scheduling import BulkScheduleRequest, BulkScheduleResponse, SessionOut, SessionPayload
from schedcore.services import repository
from schedcore.services.batch_validator import BatchValidation, ProposedSession, validate_batch

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


def _validate_against_term(db: Session, proposed: list[ProposedSession]) -> BatchValidation:
    semesters = repository.term_semesters(repository.get_current_semester(db))
    return validate_batch(
        proposed,
        persisted=repository.fetch_all_sessions(db),
        catalog=repository.fetch_catalog(db),
        semesters=semesters,
        window=settings.operating_window(),
    )


@router.post("", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def create_scheduled_subject(payload: SessionPayload, db: Session = Depends(get_db)) -> SessionOut:
    sessions = _validate_against_term(db, [payload.to_proposed()]).raise_for_issue()
    [row] = repository.commit_sessions(db, sessions)
    return SessionOut.from_session(sessions[0], session_id=row.id)


@router.post("/bulk", response_model=BulkScheduleResponse)
def bulk_schedule(payload: BulkScheduleRequest, db: Session = Depends(get_db)) -> BulkScheduleResponse:
    sessions = _validate_against_term(db, [item.to_proposed() for item in payload.schedules]).raise_for_issue()
    if not payload.commit:
        return BulkScheduleResponse(schedules=[SessionOut.from_session(item) for item in sessions], committed=False)

    rows = repository.commit_sessions(db, sessions)
    logger.info("Bulk scheduled %d session(s)", len(rows))
    return BulkScheduleResponse(
        schedules=[SessionOut.from_session(item, session_id=row.id) for item, row in zip(sessions, rows)],
        committed=True,
    )
