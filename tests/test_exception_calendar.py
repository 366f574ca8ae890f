# tests/test_exception_calendar.py

from datetime import date, time

import pytest
from pydantic import TypeAdapter, ValidationError

from salonbook.exception_calendar import ExceptionCalendar, break_applies_to, break_rule
from salonbook.models import Break, Vacation
from salonbook.schemas import BreakRule, DailyBreak, DateRangeBreak, SpecificDateBreak, WeeklyBreak

MONDAY = date(2024, 7, 1)
TUESDAY = date(2024, 7, 2)


def lunch(**kw):
    return DailyBreak(title="Lunch", start_time="12:00", end_time="13:00", **kw)


def test_break_shapes_apply_to_the_right_days():
    assert break_applies_to(lunch(), MONDAY)
    weekly = WeeklyBreak(title="Team", start_time="08:00", end_time="09:00", days=["tuesday"])
    assert break_applies_to(weekly, TUESDAY)
    assert not break_applies_to(weekly, MONDAY)
    one_off = SpecificDateBreak(title="Doctor", start_time="10:00", end_time="11:00", date="01.07.2024")
    assert break_applies_to(one_off, MONDAY)
    assert not break_applies_to(one_off, TUESDAY)
    ranged = DateRangeBreak(title="Training", start_time="09:00", end_time="10:00",
                            start_date="2024-07-02", end_date="2024-07-04")
    assert break_applies_to(ranged, TUESDAY)
    assert not break_applies_to(ranged, MONDAY)


def test_invalid_break_shapes_are_rejected():
    adapter = TypeAdapter(BreakRule)
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "weekly", "title": "x", "start_time": "10:00", "end_time": "11:00"})
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "weekly", "title": "x", "start_time": "10:00",
                                 "end_time": "11:00", "days": []})
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "daily", "title": "x", "start_time": "11:00", "end_time": "10:00"})
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "date_range", "title": "x", "start_time": "10:00", "end_time": "11:00",
                                 "start_date": "2024-07-05", "end_date": "2024-07-01"})
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "hourly", "title": "x", "start_time": "10:00", "end_time": "11:00"})


def test_break_rule_rebuilds_stored_row():
    row = Break(staff_id=1, title="Team", type="weekly", start_time=time(8), end_time=time(9), days=["monday"])
    rule = break_rule(row)
    assert isinstance(rule, WeeklyBreak)
    assert [d.value for d in rule.days] == ["monday"]


def test_breaks_block_only_overlapping_intervals():
    cal = ExceptionCalendar([lunch()])
    assert cal.is_blocked(MONDAY, time(12, 30), time(13))
    assert cal.is_blocked(MONDAY, time(11, 30), time(12, 30))
    assert not cal.is_blocked(MONDAY, time(11), time(12))  # ends as the break starts
    assert not cal.is_blocked(MONDAY, time(13), time(13, 30))


def test_inactive_entries_are_ignored():
    cal = ExceptionCalendar(
        [lunch(is_active=False)],
        [Vacation(title="Off", start_date=MONDAY, end_date=MONDAY, is_active=False)],
    )
    assert not cal.is_blocked(MONDAY, time(12), time(12, 30))


def test_vacation_blocks_whole_inclusive_range():
    vacation = Vacation(title="Summer", start_date=date(2024, 7, 1), end_date=date(2024, 7, 10))
    cal = ExceptionCalendar(vacations=[vacation])
    for day in (date(2024, 7, 1), date(2024, 7, 5), date(2024, 7, 10)):
        assert cal.blocking_entry(day, time(0), time(0, 30)) is vacation
    assert cal.vacation_on(date(2024, 7, 11)) is None
