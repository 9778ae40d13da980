import pytest

from schedcore.core.exceptions import InvalidTimeFormat, InvalidWeekday, SchedulerError
from schedcore.services.timegrid import (
    DEFAULT_WINDOW,
    Interval,
    OperatingWindow,
    ScheduledSession,
    Weekday,
    diff_minutes,
    format_time,
    is_valid_day,
    is_valid_range,
    is_valid_time,
    normalize_time,
    parse_interval,
    parse_time,
    parse_weekday,
    sort_sessions,
    to_hours,
    to_minutes,
    to_time,
)


def test_time_conversions():
    assert to_minutes("7:30") == 450
    assert to_minutes("07:30") == 450
    assert to_minutes("19:30") == 1170
    assert to_time(450) == "7:30"
    assert to_time(1170) == "19:30"
    assert diff_minutes("9:00", "10:30") == 90
    assert to_hours(90) == 1.5


@pytest.mark.parametrize("value", ["", "7", "7:3", "ab:cd", "24:00", "12:60", "7:30pm"])
def test_to_minutes_rejects_malformed_text(value):
    with pytest.raises(InvalidTimeFormat):
        to_minutes(value)


def test_normalize_and_format_time():
    assert normalize_time("7:30") == "07:30"
    assert normalize_time("13:05") == "13:05"
    assert normalize_time("") == ""
    assert normalize_time(None) == ""
    assert format_time("7:30") == "7:30 AM"
    assert format_time("12:00") == "12:00 PM"
    assert format_time("19:30") == "7:30 PM"
    assert format_time(15) == "12:15 AM"


def test_valid_time_requires_grid_and_window():
    assert is_valid_time("7:30")
    assert is_valid_time("08:15")
    assert is_valid_time("19:30")
    assert not is_valid_time("7:15")  # before opening
    assert not is_valid_time("19:45")  # after closing
    assert not is_valid_time("8:10")  # off the 15-minute grid
    assert not is_valid_time("noon")


def test_valid_range_requires_end_after_start():
    assert is_valid_range("9:00", "10:30")
    assert not is_valid_range("9:00", "9:00")
    assert not is_valid_range("10:00", "9:00")
    assert not is_valid_range("9:00", "20:00")


def test_parse_time_rejects_instead_of_clamping():
    assert parse_time("8:45") == 525
    with pytest.raises(InvalidTimeFormat) as exc:
        parse_time("20:00", field="endTime")
    assert exc.value.field == "endTime"
    assert exc.value.status_code == 400


def test_parse_interval_reports_the_end_field():
    assert parse_interval("9:00", "10:30") == Interval(540, 630)
    with pytest.raises(InvalidTimeFormat) as exc:
        parse_interval("10:00", "9:00")
    assert exc.value.field == "endTime"


def test_custom_window():
    window = OperatingWindow.from_strings("8:00", "17:00", grid_minutes=30)
    assert window.start_time == "8:00"
    assert window.end_time == "17:00"
    assert is_valid_time("8:30", window)
    assert not is_valid_time("8:15", window)
    assert not is_valid_time("7:30", window)


def test_window_must_be_ordered():
    with pytest.raises(InvalidTimeFormat):
        OperatingWindow.from_strings("19:30", "7:30")
    with pytest.raises(SchedulerError):
        OperatingWindow(start=450, end=1170, grid_minutes=0)


def test_parse_weekday_is_case_insensitive():
    assert parse_weekday("monday") == Weekday.monday
    assert parse_weekday(" FRIDAY ") == Weekday.friday
    assert parse_weekday(Weekday.saturday) == Weekday.saturday
    assert is_valid_day("Tuesday")
    assert not is_valid_day("Sunday")
    with pytest.raises(InvalidWeekday) as exc:
        parse_weekday("Sunday")
    assert "Monday" in exc.value.details["allowed"]


def test_interval_invariants():
    with pytest.raises(InvalidTimeFormat):
        Interval(600, 600)
    interval = Interval.from_strings("9:00", "10:30")
    assert interval.duration == 90
    assert str(interval) == "9:00-10:30"
    assert interval.within(DEFAULT_WINDOW)
    assert not Interval(420, 480).within(DEFAULT_WINDOW)


def test_overlap_is_open_and_symmetric():
    a = Interval(540, 600)
    b = Interval(570, 630)
    touching = Interval(600, 660)
    assert a.overlaps(b) and b.overlaps(a)
    assert a.overlaps(Interval(540, 600))
    assert not a.overlaps(touching)
    assert not touching.overlaps(a)


def test_sort_sessions_by_weekday_then_start():
    def make(day, start):
        return ScheduledSession(day=day, interval=Interval(start, start + 60), room_id=1, section_id=1, subject_id=1)

    sessions = [make(Weekday.wednesday, 450), make(Weekday.monday, 600), make(Weekday.monday, 480)]
    ordered = sort_sessions(sessions)
    assert [(item.day, item.start) for item in ordered] == [
        (Weekday.monday, 480),
        (Weekday.monday, 600),
        (Weekday.wednesday, 450),
    ]
    assert sessions[0].day == Weekday.wednesday
