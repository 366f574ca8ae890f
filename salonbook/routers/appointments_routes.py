# salonbook/routers/appointments_routes.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, select

from salonbook.auth import get_current_user
from salonbook.booking import BookingService
from salonbook.core import parse_date
from salonbook.db import get_session
from salonbook.deps import get_booking_service
from salonbook.errors import BookingError
from salonbook.models import Appointment, Salon, Staff
from salonbook.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    AppointmentUpdate,
)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    booking: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    try:
        return booking.book(current_user, appt)
    except BookingError as e:
        raise e.to_http()


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    status: Optional[AppointmentStatus] = None,
    date: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    stmt = select(Appointment)

    # everyone sees only the appointments they take part in
    role = current_user["role"]
    if role == "client":
        stmt = stmt.where(Appointment.client_id == current_user["id"])
    elif role == "staff":
        profile = session.exec(select(Staff).where(Staff.user_id == current_user["id"])).first()
        if profile is None:
            return []
        stmt = stmt.where(Appointment.staff_id == profile.id)
    elif role == "salon":
        salon_ids = session.exec(select(Salon.id).where(Salon.owner_id == current_user["id"])).all()
        stmt = stmt.where(col(Appointment.salon_id).in_(salon_ids))

    if status is not None:
        stmt = stmt.where(Appointment.status == status.value)
    if date is not None:
        try:
            stmt = stmt.where(Appointment.date == parse_date(date))
        except BookingError as e:
            raise e.to_http()

    stmt = stmt.order_by(Appointment.date, Appointment.time)
    return session.exec(stmt).all()


@router.get("/{appt_id}", response_model=AppointmentPublic)
def get_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    target = booking.session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    try:
        booking.authorize(current_user, target)
    except BookingError as e:
        raise e.to_http()
    return target


@router.patch("/{appt_id}", response_model=AppointmentPublic)
def update_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    booking: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    try:
        return booking.update(current_user, appt_id, changes)
    except BookingError as e:
        raise e.to_http()


@router.put("/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    try:
        return booking.cancel(current_user, appt_id)
    except BookingError as e:
        raise e.to_http()
