# salonbook/routers/schedule_routes.py

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from sqlmodel import Session, select

from salonbook.auth import get_current_user
from salonbook.db import get_session
from salonbook.deps import get_salon_or_404, get_staff_or_404, require_salon_owner, require_staff_manager
from salonbook.models import Break, Vacation
from salonbook.schemas import BreakPublic, BreakRule, BreakShape, VacationCreate, VacationPublic

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["schedule"],
)

BreakBody = Annotated[BreakShape, Body(discriminator="type")]

# every shape-specific column, cleared before a rule is written so that
# switching a break from weekly to daily leaves no stale days behind
_SHAPE_FIELDS = ("days", "date", "start_date", "end_date")


def _apply_rule(row: Break, rule: BreakRule) -> Break:
    for field in _SHAPE_FIELDS:
        setattr(row, field, None)
    data = rule.model_dump()
    if "days" in data:
        data["days"] = [d.value for d in rule.days]
    for field, value in data.items():
        setattr(row, field, value)
    return row


def _apply_vacation(row: Vacation, vacation: VacationCreate) -> Vacation:
    for field, value in vacation.model_dump().items():
        setattr(row, field, value)
    row.type = vacation.type.value
    return row


def _owner_filter(model, staff_id: Optional[int], salon_id: Optional[int]):
    if staff_id is not None:
        return model.staff_id == staff_id
    return model.salon_id == salon_id


def _get_owned(session: Session, model, entry_id: int, staff_id=None, salon_id=None):
    row = session.get(model, entry_id)
    if row is None or row.staff_id != staff_id or row.salon_id != salon_id:
        raise HTTPException(status_code=404, detail=f"{model.__name__} not found")
    return row


def _authorize(session: Session, user: dict, staff_id: Optional[int], salon_id: Optional[int]):
    if staff_id is not None:
        staff = get_staff_or_404(session, staff_id)
        require_staff_manager(user, staff, session)
    else:
        salon = get_salon_or_404(session, salon_id)
        require_salon_owner(user, salon)


# --- shared handlers ---------------------------------------------------------

def _list_breaks(session, user, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    return session.exec(
        select(Break).where(_owner_filter(Break, staff_id, salon_id)).order_by(Break.start_time)
    ).all()


def _create_break(session, user, rule, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    row = _apply_rule(Break(staff_id=staff_id, salon_id=salon_id, title=rule.title,
                            type=rule.type, start_time=rule.start_time, end_time=rule.end_time), rule)
    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info("Break %s (%s) added for staff=%s salon=%s", row.id, row.type, staff_id, salon_id)
    return row


def _update_break(session, user, break_id, rule, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    row = _apply_rule(_get_owned(session, Break, break_id, staff_id, salon_id), rule)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


def _delete_entry(session, user, model, entry_id, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    row = _get_owned(session, model, entry_id, staff_id, salon_id)
    session.delete(row)
    session.commit()
    logger.info("%s %s removed for staff=%s salon=%s", model.__name__, entry_id, staff_id, salon_id)
    return Response(status_code=204)


def _list_vacations(session, user, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    return session.exec(
        select(Vacation).where(_owner_filter(Vacation, staff_id, salon_id)).order_by(Vacation.start_date)
    ).all()


def _create_vacation(session, user, vacation, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    row = _apply_vacation(Vacation(staff_id=staff_id, salon_id=salon_id, title=vacation.title,
                                   start_date=vacation.start_date, end_date=vacation.end_date), vacation)
    session.add(row)
    session.commit()
    session.refresh(row)
    logger.info("Vacation %s (%s to %s) added for staff=%s salon=%s",
                row.id, row.start_date, row.end_date, staff_id, salon_id)
    return row


def _update_vacation(session, user, vacation_id, vacation, staff_id=None, salon_id=None):
    _authorize(session, user, staff_id, salon_id)
    row = _apply_vacation(_get_owned(session, Vacation, vacation_id, staff_id, salon_id), vacation)
    session.add(row)
    session.commit()
    session.refresh(row)
    return row


# --- staff breaks ------------------------------------------------------------

@router.get("/staff/{staff_id}/breaks", response_model=List[BreakPublic])
def list_staff_breaks(staff_id: int, session: Session = Depends(get_session),
                      current_user: dict = Depends(get_current_user)):
    return _list_breaks(session, current_user, staff_id=staff_id)


@router.post("/staff/{staff_id}/breaks", response_model=BreakPublic, status_code=201)
def create_staff_break(staff_id: int, rule: BreakBody, session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _create_break(session, current_user, rule, staff_id=staff_id)


@router.put("/staff/{staff_id}/breaks/{break_id}", response_model=BreakPublic)
def update_staff_break(staff_id: int, break_id: int, rule: BreakBody,
                       session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _update_break(session, current_user, break_id, rule, staff_id=staff_id)


@router.delete("/staff/{staff_id}/breaks/{break_id}", status_code=204)
def delete_staff_break(staff_id: int, break_id: int, session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _delete_entry(session, current_user, Break, break_id, staff_id=staff_id)


# --- staff vacations ---------------------------------------------------------

@router.get("/staff/{staff_id}/vacations", response_model=List[VacationPublic])
def list_staff_vacations(staff_id: int, session: Session = Depends(get_session),
                         current_user: dict = Depends(get_current_user)):
    return _list_vacations(session, current_user, staff_id=staff_id)


@router.post("/staff/{staff_id}/vacations", response_model=VacationPublic, status_code=201)
def create_staff_vacation(staff_id: int, vacation: VacationCreate, session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _create_vacation(session, current_user, vacation, staff_id=staff_id)


@router.put("/staff/{staff_id}/vacations/{vacation_id}", response_model=VacationPublic)
def update_staff_vacation(staff_id: int, vacation_id: int, vacation: VacationCreate,
                          session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _update_vacation(session, current_user, vacation_id, vacation, staff_id=staff_id)


@router.delete("/staff/{staff_id}/vacations/{vacation_id}", status_code=204)
def delete_staff_vacation(staff_id: int, vacation_id: int, session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _delete_entry(session, current_user, Vacation, vacation_id, staff_id=staff_id)


# --- salon breaks ------------------------------------------------------------

@router.get("/salons/{salon_id}/breaks", response_model=List[BreakPublic])
def list_salon_breaks(salon_id: int, session: Session = Depends(get_session),
                      current_user: dict = Depends(get_current_user)):
    return _list_breaks(session, current_user, salon_id=salon_id)


@router.post("/salons/{salon_id}/breaks", response_model=BreakPublic, status_code=201)
def create_salon_break(salon_id: int, rule: BreakBody, session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _create_break(session, current_user, rule, salon_id=salon_id)


@router.put("/salons/{salon_id}/breaks/{break_id}", response_model=BreakPublic)
def update_salon_break(salon_id: int, break_id: int, rule: BreakBody,
                       session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _update_break(session, current_user, break_id, rule, salon_id=salon_id)


@router.delete("/salons/{salon_id}/breaks/{break_id}", status_code=204)
def delete_salon_break(salon_id: int, break_id: int, session: Session = Depends(get_session),
                       current_user: dict = Depends(get_current_user)):
    return _delete_entry(session, current_user, Break, break_id, salon_id=salon_id)


# --- salon vacations ---------------------------------------------------------

@router.get("/salons/{salon_id}/vacations", response_model=List[VacationPublic])
def list_salon_vacations(salon_id: int, session: Session = Depends(get_session),
                         current_user: dict = Depends(get_current_user)):
    return _list_vacations(session, current_user, salon_id=salon_id)


@router.post("/salons/{salon_id}/vacations", response_model=VacationPublic, status_code=201)
def create_salon_vacation(salon_id: int, vacation: VacationCreate, session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _create_vacation(session, current_user, vacation, salon_id=salon_id)


@router.put("/salons/{salon_id}/vacations/{vacation_id}", response_model=VacationPublic)
def update_salon_vacation(salon_id: int, vacation_id: int, vacation: VacationCreate,
                          session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _update_vacation(session, current_user, vacation_id, vacation, salon_id=salon_id)


@router.delete("/salons/{salon_id}/vacations/{vacation_id}", status_code=204)
def delete_salon_vacation(salon_id: int, vacation_id: int, session: Session = Depends(get_session),
                          current_user: dict = Depends(get_current_user)):
    return _delete_entry(session, current_user, Vacation, vacation_id, salon_id=salon_id)
