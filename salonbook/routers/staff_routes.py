# salonbook/routers/staff_routes.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from salonbook.auth import get_current_user
from salonbook.db import get_session
from salonbook.deps import get_staff_or_404, require_staff_manager
from salonbook.schemas import StaffPublic, StaffUpdate

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
)


@router.get("/{staff_id}", response_model=StaffPublic)
def get_staff(staff_id: int, session: Session = Depends(get_session)):
    return get_staff_or_404(session, staff_id)


@router.put("/{staff_id}", response_model=StaffPublic)
def update_staff(
    staff_id: int,
    update: StaffUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    staff = get_staff_or_404(session, staff_id)
    require_staff_manager(current_user, staff, session)

    changes = update.model_dump(mode="json", exclude_unset=True)
    # staff members manage their own hours; taking someone off the books is the owner's call
    if "is_active" in changes and current_user["role"] == "staff":
        raise HTTPException(status_code=403, detail="Forbidden")

    for field, value in changes.items():
        setattr(staff, field, value)

    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff
