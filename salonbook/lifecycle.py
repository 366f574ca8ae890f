# salonbook/lifecycle.py

import logging
from datetime import datetime
from typing import Optional

from .errors import InvalidTransition
from .models import Appointment, Salon, Staff
from .schemas import AppointmentStatus, UserRole

logger = logging.getLogger(__name__)

PENDING = AppointmentStatus.pending.value
CONFIRMED = AppointmentStatus.confirmed.value
IN_PROGRESS = AppointmentStatus.in_progress.value
COMPLETED = AppointmentStatus.completed.value
CANCELLED = AppointmentStatus.cancelled.value

# statuses that keep a slot taken
ACTIVE_STATUSES = (PENDING, CONFIRMED, IN_PROGRESS)
TERMINAL_STATUSES = (COMPLETED, CANCELLED)
RESCHEDULABLE_STATUSES = (PENDING, CONFIRMED)

CLIENT = UserRole.client.value
STAFF = UserRole.staff.value
OWNER = UserRole.salon.value
ADMIN = UserRole.admin.value

# (from, to) -> roles allowed to take that edge
TRANSITIONS = {
    (PENDING, CONFIRMED): {OWNER, STAFF, ADMIN},
    (CONFIRMED, IN_PROGRESS): {STAFF, ADMIN},
    (IN_PROGRESS, COMPLETED): {STAFF, ADMIN},
    (PENDING, CANCELLED): {CLIENT, STAFF, OWNER, ADMIN},
    (CONFIRMED, CANCELLED): {CLIENT, STAFF, OWNER, ADMIN},
    (IN_PROGRESS, CANCELLED): {CLIENT, STAFF, OWNER, ADMIN},
}

AUTO_CONFIRM_POLICIES = ("any", "all", "staff", "salon")


def initial_status(salon: Salon, staff: Staff, policy: str = "any", manual: bool = False) -> str:
    """Status a new appointment starts in.

    Bookings entered by the salon or its staff are confirmed straight
    away. Otherwise ``policy`` says how the salon and staff auto_confirm
    flags combine: ``any`` needs one of them, ``all`` needs both,
    ``staff``/``salon`` use that flag alone.
    """
    if manual:
        return CONFIRMED
    if policy == "any":
        auto = salon.auto_confirm or staff.auto_confirm
    elif policy == "all":
        auto = salon.auto_confirm and staff.auto_confirm
    elif policy == "staff":
        auto = staff.auto_confirm
    elif policy == "salon":
        auto = salon.auto_confirm
    else:
        raise ValueError(f"Unknown auto-confirm policy {policy!r}")
    return CONFIRMED if auto else PENDING


def starts_at(appointment: Appointment) -> datetime:
    return datetime.combine(appointment.date, appointment.time)


class AppointmentLifecycle:
    """Status state machine for a single appointment.

    pending -> confirmed -> in_progress -> completed, and any
    non-terminal status -> cancelled. Completed and cancelled are final.
    """

    def can_transition(self, current: str, target: str, role: Optional[str] = None) -> bool:
        allowed = TRANSITIONS.get((current, target))
        if allowed is None:
            return False
        return role is None or role in allowed

    def transition(
        self,
        appointment: Optional[Appointment],
        target,
        role: str,
        now: Optional[datetime] = None,
    ) -> Appointment:
        """Move ``appointment`` to ``target`` or raise InvalidTransition.

        Nothing on the appointment changes when the move is refused.
        """
        target = getattr(target, "value", target)
        if appointment is None:
            raise InvalidTransition("Appointment does not exist")

        current = appointment.status
        if current in TERMINAL_STATUSES:
            raise InvalidTransition(f"Appointment is already {current}")
        if (current, target) not in TRANSITIONS:
            raise InvalidTransition(f"Cannot change status from {current} to {target}")
        if not self.can_transition(current, target, role):
            raise InvalidTransition(f"A {role} cannot change status from {current} to {target}")

        if role == CLIENT and target == CANCELLED:
            now = now or datetime.now()
            if starts_at(appointment) <= now:
                raise InvalidTransition("Appointments can only be cancelled before they start")

        appointment.status = target
        appointment.touch()
        logger.info("Appointment %s: %s -> %s by %s", appointment.id, current, target, role)
        return appointment
