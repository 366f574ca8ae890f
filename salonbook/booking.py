# salonbook/booking.py

import logging
from datetime import datetime, time
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .config import Settings, get_settings
from .errors import BookingError, DoubleBooked, Forbidden, InvalidTransition, StorageError, ValidationError
from .lifecycle import (
    ADMIN,
    CANCELLED,
    CLIENT,
    OWNER,
    RESCHEDULABLE_STATUSES,
    STAFF,
    TERMINAL_STATUSES,
    AppointmentLifecycle,
    initial_status,
)
from .models import Appointment, Salon, Service, Staff, User
from .schemas import AppointmentCreate, AppointmentUpdate
from .slots import SlotValidator

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot has just been booked by someone else. Please choose a different time."


class BookingService:
    """Creates and changes appointments.

    Every write runs in one transaction: the staff row is locked, the slot
    is validated against the current data and the appointment is written
    before the lock is released. The partial unique index on
    (staff_id, date, time) catches whatever slips past the lock.
    """

    def __init__(
        self,
        session: Session,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.validator = SlotValidator(session, self.settings.slot_interval_minutes)
        self.lifecycle = AppointmentLifecycle()
        self.clock = clock or datetime.now

    # --- lookups -----------------------------------------------------------

    def _lock_staff(self, staff_id: int) -> Optional[Staff]:
        return self.session.exec(
            select(Staff).where(Staff.id == staff_id).with_for_update()
        ).first()

    def _lock_appointment(self, appointment_id: int) -> Optional[Appointment]:
        return self.session.exec(
            select(Appointment).where(Appointment.id == appointment_id).with_for_update()
        ).first()

    def _staff_profile(self, actor: dict) -> Optional[Staff]:
        return self.session.exec(select(Staff).where(Staff.user_id == actor["id"])).first()

    def _load_booking_targets(self, salon_id: int, staff_id: int, service_id: int) -> Tuple[Salon, Staff, Service]:
        staff = self._lock_staff(staff_id)
        if staff is None:
            raise ValidationError("Staff member not found")
        salon = self.session.get(Salon, salon_id)
        if salon is None:
            raise ValidationError("Salon not found")
        service = self.session.get(Service, service_id)
        if service is None:
            raise ValidationError("Service not found")

        if staff.salon_id != salon.id or service.salon_id != salon.id:
            raise ValidationError("Staff member and service must belong to the selected salon")
        if not staff.is_active:
            raise ValidationError("The selected staff member is not taking appointments")
        if staff.id not in (service.staff_ids or []):
            raise ValidationError("The selected staff cannot perform this service")
        return salon, staff, service

    def _reject_past(self, day, start: time) -> None:
        if datetime.combine(day, start) < self.clock():
            raise ValidationError("Cannot book an appointment in the past")

    # --- authorization -----------------------------------------------------

    def _acts_for_salon(self, actor: dict, salon: Salon) -> bool:
        role = actor["role"]
        if role == ADMIN:
            return True
        if role == OWNER:
            return salon.owner_id == actor["id"]
        if role == STAFF:
            profile = self._staff_profile(actor)
            return profile is not None and profile.salon_id == salon.id
        return False

    def authorize(self, actor: dict, appointment: Appointment) -> None:
        role = actor["role"]
        if role == ADMIN:
            return
        if role == CLIENT and appointment.client_id == actor["id"]:
            return
        if role == STAFF:
            profile = self._staff_profile(actor)
            if profile is not None and profile.id == appointment.staff_id:
                return
        if role == OWNER:
            salon = self.session.get(Salon, appointment.salon_id)
            if salon is not None and salon.owner_id == actor["id"]:
                return
        raise Forbidden("You cannot change this appointment")

    # --- transaction -------------------------------------------------------

    def _run(self, action: str, work: Callable[[], Appointment]) -> Appointment:
        try:
            appointment = work()
            self.session.commit()
        except BookingError:
            self.session.rollback()
            raise
        except IntegrityError:
            self.session.rollback()
            logger.warning("Double booking attempt prevented on %s", action)
            raise DoubleBooked(SLOT_TAKEN_MESSAGE)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Storage failure on %s", action)
            raise StorageError("The appointment could not be saved, please try again")
        self.session.refresh(appointment)
        return appointment

    # --- operations --------------------------------------------------------

    def book(self, actor: dict, request: AppointmentCreate) -> Appointment:
        """Create an appointment for ``request`` on behalf of ``actor``."""
        return self._run("book", lambda: self._book(actor, request))

    def _book(self, actor: dict, request: AppointmentCreate) -> Appointment:
        role = actor["role"]
        manual = role in (OWNER, STAFF, ADMIN)

        if manual and not (request.client_name and request.client_phone):
            raise ValidationError("client_name and client_phone are required for manual bookings")
        self._reject_past(request.date, request.time)

        salon, staff, service = self._load_booking_targets(request.salon_id, request.staff_id, request.service_id)
        if manual and not self._acts_for_salon(actor, salon):
            raise Forbidden("You can only enter bookings for your own salon")

        end_time = self.validator.validate(salon, staff, service, request.date, request.time)

        if manual:
            client = dict(
                client_id=None,
                client_name=request.client_name,
                client_email=request.client_email,
                client_phone=request.client_phone,
                is_guest=True,
            )
        else:
            user = self.session.get(User, actor["id"])
            client = dict(
                client_id=actor["id"],
                client_name=user.name if user else None,
                client_email=actor["email"],
                client_phone=user.phone if user else None,
                is_guest=False,
            )

        appointment = Appointment(
            salon_id=salon.id,
            staff_id=staff.id,
            service_id=service.id,
            date=request.date,
            time=request.time,
            end_time=end_time,
            status=initial_status(salon, staff, self.settings.auto_confirm_policy, manual=manual),
            total_price=service.final_price,
            payment_status="pending",
            notes=request.notes,
            **client,
        )
        self.session.add(appointment)
        self.session.flush()
        logger.info(
            "Booked appointment %s: staff=%s %s %s-%s status=%s",
            appointment.id, staff.id, request.date, request.time, end_time, appointment.status,
        )
        return appointment

    def transition(self, actor: dict, appointment_id: int, status) -> Appointment:
        return self.update(actor, appointment_id, AppointmentUpdate(status=status))

    def cancel(self, actor: dict, appointment_id: int) -> Appointment:
        return self.transition(actor, appointment_id, CANCELLED)

    def reschedule(self, actor: dict, appointment_id: int, date=None, time=None,
                   staff_id: Optional[int] = None, service_id: Optional[int] = None) -> Appointment:
        changes = AppointmentUpdate(date=date, time=time, staff_id=staff_id, service_id=service_id)
        return self.update(actor, appointment_id, changes)

    def update_details(self, actor: dict, appointment_id: int, notes: Optional[str] = None,
                       payment_status=None) -> Appointment:
        return self.update(actor, appointment_id, AppointmentUpdate(notes=notes, payment_status=payment_status))

    def update(self, actor: dict, appointment_id: int, changes: AppointmentUpdate) -> Appointment:
        """Apply a reschedule, detail edits and a status change as one write."""
        return self._run("update", lambda: self._update(actor, appointment_id, changes))

    def _update(self, actor: dict, appointment_id: int, changes: AppointmentUpdate) -> Appointment:
        appointment = self._lock_appointment(appointment_id)
        if appointment is None:
            raise InvalidTransition(f"Appointment {appointment_id} does not exist")
        self.authorize(actor, appointment)
        if appointment.status in TERMINAL_STATUSES:
            raise InvalidTransition(f"Appointment is already {appointment.status}")

        if changes.reschedules():
            self._reschedule(actor, appointment, changes)

        if changes.notes is not None:
            appointment.notes = changes.notes
        if changes.payment_status is not None:
            if actor["role"] == CLIENT:
                raise Forbidden("Clients cannot change the payment status")
            appointment.payment_status = changes.payment_status.value

        if changes.status is not None:
            self.lifecycle.transition(appointment, changes.status, actor["role"], now=self.clock())

        appointment.touch()
        self.session.add(appointment)
        return appointment

    def _reschedule(self, actor: dict, appointment: Appointment, changes: AppointmentUpdate) -> None:
        if actor["role"] not in (CLIENT, ADMIN):
            raise Forbidden("Only the client or an administrator can reschedule an appointment")
        if appointment.status not in RESCHEDULABLE_STATUSES:
            raise InvalidTransition(f"A {appointment.status} appointment cannot be rescheduled")

        day = changes.date or appointment.date
        start = changes.time or appointment.time
        staff_id = changes.staff_id or appointment.staff_id
        service_id = changes.service_id or appointment.service_id
        self._reject_past(day, start)

        salon, staff, service = self._load_booking_targets(appointment.salon_id, staff_id, service_id)
        end_time = self.validator.validate(
            salon, staff, service, day, start, exclude_appointment_id=appointment.id
        )

        if service.id != appointment.service_id:
            appointment.total_price = service.final_price
        appointment.date = day
        appointment.time = start
        appointment.end_time = end_time
        appointment.staff_id = staff.id
        appointment.service_id = service.id
        logger.info("Rescheduled appointment %s to staff=%s %s %s-%s", appointment.id, staff.id, day, start, end_time)
