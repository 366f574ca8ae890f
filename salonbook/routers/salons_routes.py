# salonbook/routers/salons_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlmodel import Session, select

from salonbook.auth import get_current_user, get_optional_user
from salonbook.core import parse_date
from salonbook.config import Settings, get_settings
from salonbook.db import get_session
from salonbook.deps import get_salon_or_404, get_staff_or_404, require_role, require_salon_owner
from salonbook.errors import ValidationError
from salonbook.models import Appointment, Salon, Service, Staff, User
from salonbook.schemas import (
    AvailabilityResponse,
    SalonCreate,
    SalonPublic,
    SalonStatus,
    SalonStatusUpdate,
    SalonUpdate,
    ServiceCreate,
    ServicePublic,
    ServiceUpdate,
    StaffCreate,
    StaffPublic,
)
from salonbook.slots import SlotValidator

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/salons",
    tags=["salons"],
)


@router.post("", response_model=SalonPublic, status_code=201)
def create_salon(
    salon: SalonCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "salon")

    # new salons wait for an administrator to approve them
    db_salon = Salon(owner_id=current_user["id"], status=SalonStatus.pending.value,
                     **salon.model_dump(mode="json"))
    session.add(db_salon)
    session.commit()
    session.refresh(db_salon)
    logger.info("Salon %s created by user %s", db_salon.id, current_user["id"])
    return db_salon


@router.get("", response_model=List[SalonPublic])
def list_salons(
    session: Session = Depends(get_session),
    current_user: Optional[dict] = Depends(get_optional_user),
):
    stmt = select(Salon).order_by(Salon.name)
    if current_user is None or current_user["role"] != "admin":
        stmt = stmt.where(Salon.status == SalonStatus.approved.value)
    return session.exec(stmt).all()


@router.get("/mine", response_model=List[SalonPublic])
def list_my_salons(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "salon")
    return session.exec(select(Salon).where(Salon.owner_id == current_user["id"])).all()


@router.get("/{salon_id}", response_model=SalonPublic)
def get_salon(
    salon_id: int,
    session: Session = Depends(get_session),
    current_user: Optional[dict] = Depends(get_optional_user),
):
    salon = session.get(Salon, salon_id)
    if salon is None:
        raise HTTPException(status_code=404, detail="Salon not found")

    # unapproved salons are only visible to their owner and admins
    visible = salon.status == SalonStatus.approved.value or (
        current_user is not None
        and (current_user["role"] == "admin" or current_user["id"] == salon.owner_id)
    )
    if not visible:
        raise HTTPException(status_code=404, detail="Salon not found")
    return salon


@router.put("/{salon_id}", response_model=SalonPublic)
def update_salon(
    salon_id: int,
    update: SalonUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_salon_or_404(session, salon_id)
    require_salon_owner(current_user, salon)

    for field, value in update.model_dump(mode="json", exclude_unset=True).items():
        setattr(salon, field, value)

    session.add(salon)
    session.commit()
    session.refresh(salon)
    return salon


@router.patch("/{salon_id}/status", response_model=SalonPublic)
def update_salon_status(
    salon_id: int,
    update: SalonStatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    salon = get_salon_or_404(session, salon_id)

    old_status = salon.status
    salon.status = update.status.value
    session.add(salon)
    session.commit()
    session.refresh(salon)
    logger.info("Salon %s status %s -> %s", salon.id, old_status, salon.status)
    return salon


# --- services ---------------------------------------------------------------

def _check_service_staff(session: Session, salon: Salon, staff_ids: List[int]):
    for staff_id in staff_ids:
        staff = session.get(Staff, staff_id)
        if staff is None or staff.salon_id != salon.id:
            raise HTTPException(status_code=422, detail=f"Staff member {staff_id} does not work at this salon")


def _get_service_or_404(session: Session, salon: Salon, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None or service.salon_id != salon.id:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("/{salon_id}/services", response_model=ServicePublic, status_code=201)
def create_service(
    salon_id: int,
    service: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_salon_or_404(session, salon_id)
    require_salon_owner(current_user, salon)
    _check_service_staff(session, salon, service.staff_ids)

    db_service = Service(salon_id=salon.id, **service.model_dump())
    session.add(db_service)
    session.commit()
    session.refresh(db_service)
    return db_service


@router.get("/{salon_id}/services", response_model=List[ServicePublic])
def list_services(salon_id: int, session: Session = Depends(get_session)):
    get_salon_or_404(session, salon_id)
    return session.exec(select(Service).where(Service.salon_id == salon_id).order_by(Service.name)).all()


@router.put("/{salon_id}/services/{service_id}", response_model=ServicePublic)
def update_service(
    salon_id: int,
    service_id: int,
    update: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_salon_or_404(session, salon_id)
    require_salon_owner(current_user, salon)
    service = _get_service_or_404(session, salon, service_id)

    # only the discount can be cleared with an explicit null
    changes = {
        field: value
        for field, value in update.model_dump(exclude_unset=True).items()
        if value is not None or field == "discount_price"
    }
    if "staff_ids" in changes:
        _check_service_staff(session, salon, changes["staff_ids"])

    # existing appointments keep the times and price they were booked with
    for field, value in changes.items():
        setattr(service, field, value)

    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("Service %s updated: %s", service.id, sorted(changes))
    return service


@router.delete("/{salon_id}/services/{service_id}", status_code=204)
def delete_service(
    salon_id: int,
    service_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_salon_or_404(session, salon_id)
    require_salon_owner(current_user, salon)
    service = _get_service_or_404(session, salon, service_id)

    # appointments reference their service, so a booked service stays
    booked = session.exec(select(Appointment.id).where(Appointment.service_id == service.id)).first()
    if booked is not None:
        raise HTTPException(status_code=409, detail="Service has appointments and cannot be deleted")

    session.delete(service)
    session.commit()
    logger.info("Service %s deleted from salon %s", service_id, salon.id)
    return Response(status_code=204)


# --- staff ------------------------------------------------------------------

@router.post("/{salon_id}/staff", response_model=StaffPublic, status_code=201)
def create_staff(
    salon_id: int,
    staff: StaffCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    salon = get_salon_or_404(session, salon_id)
    require_salon_owner(current_user, salon)

    if staff.user_id is not None:
        user = session.get(User, staff.user_id)
        if user is None or user.role != "staff":
            raise HTTPException(status_code=422, detail="user_id must reference a staff account")
        taken = session.exec(select(Staff).where(Staff.user_id == staff.user_id)).first()
        if taken is not None:
            raise HTTPException(status_code=409, detail="This account already has a staff profile")

    db_staff = Staff(salon_id=salon.id, **staff.model_dump(mode="json"))
    session.add(db_staff)
    session.commit()
    session.refresh(db_staff)
    return db_staff


@router.get("/{salon_id}/staff", response_model=List[StaffPublic])
def list_staff(salon_id: int, session: Session = Depends(get_session)):
    get_salon_or_404(session, salon_id)
    return session.exec(select(Staff).where(Staff.salon_id == salon_id).order_by(Staff.name)).all()


@router.get("/{salon_id}/available-slots", response_model=AvailabilityResponse)
def available_slots(
    salon_id: int,
    staff_id: int,
    service_id: int,
    date: str,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    try:
        day = parse_date(date)
    except ValidationError as e:
        raise e.to_http()

    salon = get_salon_or_404(session, salon_id)
    staff = get_staff_or_404(session, staff_id)
    service = session.get(Service, service_id)
    if service is None or service.salon_id != salon.id:
        raise HTTPException(status_code=404, detail="Service not found")
    if staff.salon_id != salon.id:
        raise HTTPException(status_code=404, detail="Staff member not found")

    starts = []
    if staff.is_active and staff.id in service.staff_ids:
        validator = SlotValidator(session, settings.slot_interval_minutes)
        starts = validator.available_slots(salon, staff, service, day, now=datetime.now())

    return {
        "salon_id": salon.id,
        "staff_id": staff.id,
        "service_id": service.id,
        "date": day,
        "available_starts": starts,
    }
