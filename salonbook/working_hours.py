# salonbook/working_hours.py

from datetime import date
from typing import Optional, Tuple, Union

from .core import WEEKDAYS, to_minutes

Weekday = Union[str, int, date]


def _weekday_key(weekday: Weekday) -> str:
    if isinstance(weekday, date):
        return WEEKDAYS[weekday.weekday()]
    if isinstance(weekday, int):
        return WEEKDAYS[weekday]
    return getattr(weekday, "value", weekday).lower()


class WorkingHoursCalendar:
    """Weekly opening hours of a salon or a staff member.

    ``hours`` maps a weekday name to ``{"open": "HH:MM", "close": "HH:MM",
    "is_open": bool}``. A weekday without an entry is closed.
    """

    def __init__(self, hours: Optional[dict]):
        self.hours = hours or {}

    @property
    def defined(self) -> bool:
        return bool(self.hours)

    def window(self, weekday: Weekday) -> Optional[Tuple[int, int]]:
        """(open, close) in minutes after midnight, or None when closed."""
        entry = self.hours.get(_weekday_key(weekday))
        if not entry or not entry.get("is_open", True):
            return None
        return to_minutes(entry["open"]), to_minutes(entry["close"])

    def is_open(self, weekday: Weekday, start, end) -> bool:
        window = self.window(weekday)
        if window is None:
            return False
        start_min = start if isinstance(start, int) else to_minutes(start)
        end_min = end if isinstance(end, int) else to_minutes(end)
        open_min, close_min = window
        return open_min <= start_min and end_min <= close_min


def combined_window(salon: WorkingHoursCalendar, staff: WorkingHoursCalendar, weekday: Weekday):
    """Part of the day when both the salon and (if it has hours) the staff member work."""
    salon_window = salon.window(weekday)
    if salon_window is None:
        return None
    if not staff.defined:
        return salon_window
    staff_window = staff.window(weekday)
    if staff_window is None:
        return None
    start, end = max(salon_window[0], staff_window[0]), min(salon_window[1], staff_window[1])
    if start >= end:
        return None
    return start, end
