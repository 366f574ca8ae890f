# salonbook/core.py

import re
from datetime import date, datetime, time

from .errors import ValidationError

MINUTES_PER_DAY = 24 * 60

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")
_EUROPEAN_DATE_RE = re.compile(r"^\d{2}\.\d{2}\.\d{4}$")


def overlaps(start_a, end_a, start_b, end_b) -> bool:
    """Half-open interval overlap: [start_a, end_a) vs [start_b, end_b).

    Intervals that only touch at a boundary do not overlap.
    """
    return start_a < end_b and start_b < end_a


def parse_time(value) -> time:
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM")
    return time.fromisoformat(value.strip())


def parse_date(value) -> date:
    """Accept ISO (YYYY-MM-DD) and European (DD.MM.YYYY) dates."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value = value.strip()
        try:
            if _EUROPEAN_DATE_RE.match(value):
                return datetime.strptime(value, "%d.%m.%Y").date()
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD or DD.MM.YYYY")


def to_minutes(value) -> int:
    t = parse_time(value)
    return t.hour * 60 + t.minute


def from_minutes(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")
