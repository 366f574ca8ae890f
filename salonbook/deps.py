# salonbook/deps.py

from fastapi import Depends, HTTPException
from sqlmodel import Session

from .config import Settings, get_settings
from .db import get_session
from .booking import BookingService
from .models import Salon, Staff


def require_role(user: dict, *roles: str):
    if user["role"] not in roles:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_booking_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> BookingService:
    return BookingService(session, settings)


def get_salon_or_404(session: Session, salon_id: int) -> Salon:
    salon = session.get(Salon, salon_id)
    if salon is None:
        raise HTTPException(status_code=404, detail="Salon not found")
    return salon


def get_staff_or_404(session: Session, staff_id: int) -> Staff:
    staff = session.get(Staff, staff_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return staff


def require_salon_owner(user: dict, salon: Salon):
    """Salon owner of ``salon`` or an admin."""
    if user["role"] == "admin":
        return
    if user["role"] != "salon" or salon.owner_id != user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")


def require_staff_manager(user: dict, staff: Staff, session: Session):
    """The staff member themselves, their salon's owner, or an admin."""
    if user["role"] == "admin":
        return
    if user["role"] == "staff" and staff.user_id == user["id"]:
        return
    if user["role"] == "salon":
        salon = session.get(Salon, staff.salon_id)
        if salon is not None and salon.owner_id == user["id"]:
            return
    raise HTTPException(status_code=403, detail="Forbidden")
