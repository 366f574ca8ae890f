# salonbook/exception_calendar.py

from datetime import date
from typing import Iterable, Optional, Union

from pydantic import TypeAdapter

from .core import overlaps, to_minutes, weekday_name
from .models import Break, Vacation
from .schemas import (
    BreakRule,
    DailyBreak,
    DateRangeBreak,
    SpecificDateBreak,
    WeeklyBreak,
)

_break_rule = TypeAdapter(BreakRule)


def break_rule(row: Break) -> BreakRule:
    """Rebuild the typed break shape from its stored row."""
    return _break_rule.validate_python(
        {
            "title": row.title,
            "type": row.type,
            "start_time": row.start_time,
            "end_time": row.end_time,
            "days": row.days,
            "date": row.date,
            "start_date": row.start_date,
            "end_date": row.end_date,
            "is_active": row.is_active,
        }
    )


def break_applies_to(rule: BreakRule, day: date) -> bool:
    if isinstance(rule, DailyBreak):
        return True
    if isinstance(rule, WeeklyBreak):
        return weekday_name(day) in {d.value for d in rule.days}
    if isinstance(rule, SpecificDateBreak):
        return rule.date == day
    if isinstance(rule, DateRangeBreak):
        return rule.start_date <= day <= rule.end_date
    return False


def vacation_covers(vacation: Vacation, day: date) -> bool:
    return vacation.start_date <= day <= vacation.end_date


def _minutes(value) -> int:
    return value if isinstance(value, int) else to_minutes(value)


class ExceptionCalendar:
    """Breaks and vacations that take time out of a staff member's hours.

    Breaks block the part of the day they cover, vacations block whole
    days. Inactive entries are ignored. One matching entry is enough to
    block a slot.
    """

    def __init__(
        self,
        breaks: Iterable[Union[Break, BreakRule]] = (),
        vacations: Iterable[Vacation] = (),
    ):
        rules = [break_rule(b) if isinstance(b, Break) else b for b in breaks]
        self.breaks = [r for r in rules if r.is_active]
        self.vacations = [v for v in vacations if v.is_active]

    def vacation_on(self, day: date) -> Optional[Vacation]:
        for vacation in self.vacations:
            if vacation_covers(vacation, day):
                return vacation
        return None

    def blocking_entry(self, day: date, start, end):
        """First vacation or break that intersects [start, end) on ``day``."""
        vacation = self.vacation_on(day)
        if vacation is not None:
            return vacation

        start_min, end_min = _minutes(start), _minutes(end)
        for rule in self.breaks:
            if not break_applies_to(rule, day):
                continue
            if overlaps(start_min, end_min, to_minutes(rule.start_time), to_minutes(rule.end_time)):
                return rule
        return None

    def is_blocked(self, day: date, start, end) -> bool:
        return self.blocking_entry(day, start, end) is not None
