# salonbook/slots.py

from datetime import date, datetime, time
from typing import Iterable, List, Optional

from sqlalchemy import or_
from sqlmodel import Session, col, select

from .core import MINUTES_PER_DAY, format_hhmm, from_minutes, overlaps, to_minutes, weekday_name
from .errors import BookingError, DoubleBooked, Excepted, OutOfHours
from .exception_calendar import ExceptionCalendar
from .lifecycle import ACTIVE_STATUSES
from .models import Appointment, Break, Salon, Service, Staff, Vacation
from .working_hours import WorkingHoursCalendar, combined_window


def check_slot(
    salon_hours: WorkingHoursCalendar,
    staff_hours: WorkingHoursCalendar,
    exceptions: ExceptionCalendar,
    appointments: Iterable[Appointment],
    day: date,
    start,
    duration: int,
) -> time:
    """Return the end time of [start, start + duration) on ``day`` if it can be booked.

    Raises OutOfHours, Excepted or DoubleBooked, checked in that order.
    ``appointments`` are the staff member's bookings that still hold time.
    """
    start_min = start if isinstance(start, int) else to_minutes(start)
    end_min = start_min + duration
    weekday = weekday_name(day)

    if end_min >= MINUTES_PER_DAY:
        raise OutOfHours("Appointment would run past midnight")
    if not salon_hours.is_open(weekday, start_min, end_min):
        raise OutOfHours(f"The salon is not open for {format_hhmm(from_minutes(start_min))} "
                         f"to {format_hhmm(from_minutes(end_min))} on {weekday}")
    if staff_hours.defined and not staff_hours.is_open(weekday, start_min, end_min):
        raise OutOfHours(f"The staff member does not work from {format_hhmm(from_minutes(start_min))} "
                         f"to {format_hhmm(from_minutes(end_min))} on {weekday}")

    entry = exceptions.blocking_entry(day, start_min, end_min)
    if entry is not None:
        raise Excepted(f"The requested time falls within '{entry.title}'")

    for a in appointments:
        if a.status not in ACTIVE_STATUSES or a.date != day:
            continue
        if overlaps(start_min, end_min, to_minutes(a.time), to_minutes(a.end_time)):
            raise DoubleBooked(
                f"The staff member already has an appointment from "
                f"{format_hhmm(a.time)} to {format_hhmm(a.end_time)}"
            )

    return from_minutes(end_min)


class SlotValidator:
    """Checks candidate slots for a staff member against stored schedules."""

    def __init__(self, session: Session, slot_interval_minutes: int = 30):
        self.session = session
        self.slot_interval_minutes = slot_interval_minutes

    def exceptions_for(self, salon: Salon, staff: Staff) -> ExceptionCalendar:
        # salon-wide breaks and vacations apply to every staff member
        breaks = self.session.exec(
            select(Break).where(or_(Break.staff_id == staff.id, Break.salon_id == salon.id))
        ).all()
        vacations = self.session.exec(
            select(Vacation).where(or_(Vacation.staff_id == staff.id, Vacation.salon_id == salon.id))
        ).all()
        return ExceptionCalendar(breaks, vacations)

    def booked(self, staff: Staff, day: date, exclude_appointment_id: Optional[int] = None) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.staff_id == staff.id)
            .where(Appointment.date == day)
            .where(col(Appointment.status).in_(ACTIVE_STATUSES))
        )
        if exclude_appointment_id is not None:
            stmt = stmt.where(Appointment.id != exclude_appointment_id)
        return list(self.session.exec(stmt).all())

    def validate(
        self,
        salon: Salon,
        staff: Staff,
        service: Service,
        day: date,
        start,
        exclude_appointment_id: Optional[int] = None,
    ) -> time:
        return check_slot(
            WorkingHoursCalendar(salon.working_hours),
            WorkingHoursCalendar(staff.working_hours),
            self.exceptions_for(salon, staff),
            self.booked(staff, day, exclude_appointment_id),
            day,
            start,
            service.duration,
        )

    def available_slots(
        self,
        salon: Salon,
        staff: Staff,
        service: Service,
        day: date,
        now: Optional[datetime] = None,
    ) -> List[str]:
        salon_hours = WorkingHoursCalendar(salon.working_hours)
        staff_hours = WorkingHoursCalendar(staff.working_hours)
        window = combined_window(salon_hours, staff_hours, weekday_name(day))
        if window is None:
            return []

        exceptions = self.exceptions_for(salon, staff)
        if exceptions.vacation_on(day) is not None:
            return []
        appointments = self.booked(staff, day)

        earliest = None
        if now is not None and now.date() == day:
            earliest = now.hour * 60 + now.minute

        available = []
        start, close = window
        for slot in range(start, close, self.slot_interval_minutes):
            if slot + service.duration > close:
                break
            if earliest is not None and slot <= earliest:
                continue
            try:
                check_slot(salon_hours, staff_hours, exceptions, appointments, day, slot, service.duration)
            except BookingError:
                continue
            available.append(format_hhmm(from_minutes(slot)))
        return available
