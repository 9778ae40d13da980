from sqlalchemy import func, select

from schedcore.models import ScheduledSubject, Setting
from schedcore.services.timegrid import Weekday, to_minutes


def book(db, seeded, room, subject, start, end, day=Weekday.monday, section=None):
    db.add(ScheduledSubject(
        day=day,
        start_time=start,
        end_time=end,
        room_id=seeded["rooms"][room],
        section_id=section or seeded["section"],
        subject_id=seeded["subjects"][subject],
    ))
    db.commit()


def count_rows(db):
    db.expire_all()
    return db.execute(select(func.count()).select_from(ScheduledSubject)).scalar_one()


def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"


def test_find_slot_returns_earliest_and_standard_options(client, db_session, seeded):
    book(db_session, seeded, "R101", "CS101", "9:00", "10:30", section=seeded["other_section"])
    book(db_session, seeded, "R102", "PE1", "12:00", "13:00")

    response = client.post("/api/schedule/find-slot", json={
        "sectionId": seeded["section"],
        "subjectId": seeded["subjects"]["CS101"],
        "roomId": seeded["rooms"]["R101"],
        "day": "monday",
        "hoursToSched": 2,
    })

    assert response.status_code == 200
    payload = response.json()
    assert payload["earliest"] == {
        "startTime": "13:00",
        "endTime": "15:00",
        "duration": 2.0,
        "label": "1:00 PM - 3:00 PM",
    }
    assert {slot["duration"] for slot in payload["slots"]} == {1.0, 1.5, 2.0}
    assert payload["slots"][0]["startTime"] == "7:30"
    for slot in payload["slots"]:
        start, end = to_minutes(slot["startTime"]), to_minutes(slot["endTime"])
        assert not (start < to_minutes("10:30") and end > to_minutes("9:00"))
        assert not (start < to_minutes("13:00") and end > to_minutes("12:00"))


def test_find_slot_ignores_other_term_and_caps_by_units(client, db_session, seeded):
    book(db_session, seeded, "R101", "CS102", "7:30", "19:30")

    response = client.post("/api/schedule/find-slot", json={
        "sectionId": seeded["section"],
        "subjectId": seeded["subjects"]["CS101L"],
        "roomId": seeded["rooms"]["R101"],
        "day": "Monday",
        "hoursToSched": 6,
    })

    assert response.status_code == 200
    payload = response.json()
    assert payload["earliest"]["startTime"] == "7:30"
    assert payload["earliest"]["endTime"] == "9:30"
    assert max(slot["duration"] for slot in payload["slots"]) == 2.0


def test_find_slot_rejects_unknown_day(client, seeded):
    response = client.post("/api/schedule/find-slot", json={
        "sectionId": seeded["section"],
        "subjectId": seeded["subjects"]["CS101"],
        "roomId": seeded["rooms"]["R101"],
        "day": "Sunday",
        "hoursToSched": 1,
    })
    assert response.status_code == 400
    assert "Invalid day" in response.json()["message"]


def test_find_slot_unknown_room(client, seeded):
    response = client.post("/api/schedule/find-slot", json={
        "sectionId": seeded["section"],
        "subjectId": seeded["subjects"]["CS101"],
        "roomId": 999,
        "day": "Monday",
        "hoursToSched": 1,
    })
    assert response.status_code == 404
    assert response.json()["message"] == "Room with id 999 not found"


def test_find_slot_requires_semester_setting(client, db_session, seeded):
    db_session.delete(db_session.get(Setting, "semester"))
    db_session.commit()

    response = client.post("/api/schedule/find-slot", json={
        "sectionId": seeded["section"],
        "subjectId": seeded["subjects"]["CS101"],
        "roomId": seeded["rooms"]["R101"],
        "day": "Monday",
        "hoursToSched": 1,
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Semester setting not found"


def test_auto_schedule_proposes_without_persisting(client, db_session, seeded):
    response = client.post("/api/schedule/auto", json={
        "sectionId": seeded["section"],
        "days": ["Monday", "Tuesday", "Wednesday"],
        "roomIds": list(seeded["rooms"].values()),
        "seed": 11,
    })

    assert response.status_code == 200
    payload = response.json()
    assert payload["cancelled"] is False
    report = {item["subjectId"]: item for item in payload["report"]}
    assert set(report) == {seeded["subjects"]["CS101"], seeded["subjects"]["CS101L"]}
    assert all(item["failed"] is None for item in report.values())
    assert report[seeded["subjects"]["CS101"]]["scheduledMinutesAfter"] == 180
    assert report[seeded["subjects"]["CS101L"]]["scheduledMinutesAfter"] == 120

    order = ["Monday", "Tuesday", "Wednesday"]
    keys = [(order.index(item["day"]), to_minutes(item["startTime"])) for item in payload["newSchedules"]]
    assert keys == sorted(keys)
    assert all(item["id"] is None for item in payload["newSchedules"])
    assert count_rows(db_session) == 0


def test_auto_schedule_reports_missing_room_type(client, seeded):
    response = client.post("/api/schedule/auto", json={
        "sectionId": seeded["section"],
        "days": ["Monday"],
        "roomIds": [seeded["rooms"]["R101"], seeded["rooms"]["R102"]],
        "seed": 1,
    })

    assert response.status_code == 200
    report = {item["subjectId"]: item for item in response.json()["report"]}
    lab = report[seeded["subjects"]["CS101L"]]
    assert lab["failed"] == "No rooms for type Laboratory"
    assert lab["createdSessions"] == 0


def test_auto_schedule_unknown_room(client, seeded):
    response = client.post("/api/schedule/auto", json={
        "sectionId": seeded["section"],
        "days": ["Monday"],
        "roomIds": [seeded["rooms"]["R101"], 999],
    })
    assert response.status_code == 404


def test_auto_schedule_unknown_section(client, seeded):
    response = client.post("/api/schedule/auto", json={"sectionId": 999, "days": ["Monday"], "roomIds": [1]})
    assert response.status_code == 404
    assert response.json()["message"] == "Section with id 999 not found"


def _entry(seeded, start, end, day="Monday", room="R101", subject="CS101", section=None):
    return {
        "day": day,
        "startTime": start,
        "endTime": end,
        "roomId": seeded["rooms"][room],
        "sectionId": section or seeded["section"],
        "subjectId": seeded["subjects"][subject],
    }


def test_bulk_dry_run_validates_only(client, db_session, seeded):
    response = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:00", "10:30"), _entry(seeded, "09:00", "10:30", day="wednesday")],
    })

    assert response.status_code == 200
    payload = response.json()
    assert payload["committed"] is False
    assert [item["day"] for item in payload["schedules"]] == ["Monday", "Wednesday"]
    assert payload["schedules"][1]["startTime"] == "9:00"
    assert count_rows(db_session) == 0


def test_bulk_commit_persists_all(client, db_session, seeded):
    response = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:00", "10:30"), _entry(seeded, "13:00", "15:00", room="LAB1", subject="CS101L")],
        "commit": True,
    })

    assert response.status_code == 200
    payload = response.json()
    assert payload["committed"] is True
    assert all(isinstance(item["id"], int) for item in payload["schedules"])
    assert count_rows(db_session) == 2


def test_bulk_internal_conflict_rejects_everything(client, db_session, seeded):
    response = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [
            _entry(seeded, "9:00", "10:00"),
            _entry(seeded, "9:30", "10:30", room="LAB1", subject="CS101L"),
        ],
        "commit": True,
    })

    assert response.status_code == 400
    body = response.json()
    assert body["message"].startswith("Conflict detected between schedules at index 0 and 1")
    assert body["details"]["code"] == "section_conflict"
    assert body["details"]["indices"] == [0, 1]
    assert [action["action_type"] for action in body["details"]["resolutions"]] == ["move_slot"]
    assert count_rows(db_session) == 0


def test_bulk_rejects_excess_duration(client, seeded):
    response = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:00", "13:00")],
    })
    assert response.status_code == 400
    assert response.json()["details"]["code"] == "duration_exceeded"


def test_bulk_rejects_conflict_with_persisted(client, db_session, seeded):
    book(db_session, seeded, "R101", "PE1", "9:00", "10:00", section=seeded["other_section"])

    response = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:30", "10:30")],
        "commit": True,
    })
    assert response.status_code == 400
    assert response.json()["details"]["code"] == "persisted_conflict"
    assert count_rows(db_session) == 1


def test_bulk_requires_schedules(client, seeded):
    response = client.post("/api/scheduled-subjects/bulk", json={"schedules": []})
    assert response.status_code == 422


def test_create_single_scheduled_subject(client, db_session, seeded):
    response = client.post("/api/scheduled-subjects", json=_entry(seeded, "7:30", "9:00", day="friday"))

    assert response.status_code == 201
    payload = response.json()
    assert isinstance(payload["id"], int)
    assert payload["day"] == "Friday"
    assert payload["startTime"] == "7:30"
    assert payload["endTime"] == "9:00"
    assert count_rows(db_session) == 1


def test_create_single_rejects_off_grid_time(client, seeded):
    response = client.post("/api/scheduled-subjects", json=_entry(seeded, "7:40", "9:00"))
    assert response.status_code == 400
    assert response.json()["details"] == {"code": "invalid_time", "indices": [0], "field": "startTime"}


def test_bulk_budget_includes_sessions_from_another_term(client, db_session, seeded):
    first = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:00", "11:00", subject="CS102")],
        "commit": True,
    })
    assert first.status_code == 200

    second = client.post("/api/scheduled-subjects/bulk", json={
        "schedules": [_entry(seeded, "9:00", "11:00", day="Tuesday", subject="CS102")],
        "commit": True,
    })
    assert second.status_code == 400
    assert second.json()["details"]["code"] == "duration_exceeded"
    assert "Remaining: 1" in second.json()["message"]
    assert count_rows(db_session) == 1
