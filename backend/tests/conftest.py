import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import schedcore.models  # noqa: F401
from schedcore.api.deps import get_db
from schedcore.db.base import Base
from schedcore.main import app
from schedcore.models import CourseSubject, Room, RoomType, Section, Semester, Setting, Subject
from schedcore.models.setting import CURRENT_SEMESTER_KEY


@pytest.fixture()
def session_factory():
    engine = create_engine( #create isolated DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine) #every model imported through schedcore.models gets a table in the in-memory db
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory): #fake http client
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def seeded(db_session):
    """Two lecture rooms, one lab, a first-year section and its first-semester curriculum."""
    db_session.add(Setting(key=CURRENT_SEMESTER_KEY, value=Semester.first.value))
    rooms = [
        Room(name="R101", type=RoomType.lecture),
        Room(name="R102", type=RoomType.lecture),
        Room(name="LAB1", type=RoomType.laboratory),
    ]
    section = Section(name="BSCS 1A", course_id=1, year=1, semester=Semester.first)
    other_section = Section(name="BSCS 1B", course_id=1, year=1, semester=Semester.first)
    subjects = [
        Subject(code="CS101", name="Intro to Computing", units=3, type=RoomType.lecture, semester=Semester.first),
        Subject(code="CS101L", name="Intro to Computing Lab", units=2, type=RoomType.laboratory, semester=Semester.first),
        Subject(code="PE1", name="Physical Education", units=2, type=RoomType.lecture, semester=Semester.whole),
        Subject(code="CS102", name="Programming 2", units=3, type=RoomType.lecture, semester=Semester.second),
    ]
    db_session.add_all([*rooms, section, other_section, *subjects])
    db_session.flush()
    db_session.add_all([
        CourseSubject(course_id=1, year=1, subject_id=subjects[0].id),
        CourseSubject(course_id=1, year=1, subject_id=subjects[1].id),
        CourseSubject(course_id=1, year=1, subject_id=subjects[3].id),
    ])
    db_session.commit()
    return {
        "rooms": {room.name: room.id for room in rooms},
        "section": section.id,
        "other_section": other_section.id,
        "subjects": {subject.code: subject.id for subject in subjects},
    }
