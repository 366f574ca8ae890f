# salonbook/routers/reviews_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from salonbook.auth import get_current_user
from salonbook.db import get_session
from salonbook.deps import get_salon_or_404, require_role, require_salon_owner
from salonbook.models import Appointment, Review, Salon, Staff
from salonbook.schemas import ReviewCreate, ReviewPublic, ReviewResponseCreate

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["reviews"],
)


def _recalculate_rating(session: Session, target, column) -> None:
    avg, count = session.exec(
        select(func.avg(Review.rating), func.count(Review.id)).where(column == target.id)
    ).one()
    target.rating = round(float(avg or 0.0), 2)
    target.review_count = count
    session.add(target)


@router.post("/reviews", response_model=ReviewPublic, status_code=201)
def create_review(
    review: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    appt = session.get(Appointment, review.appointment_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if appt.client_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")
    if appt.status != "completed":
        raise HTTPException(status_code=422, detail="Only completed appointments can be reviewed")

    db_review = Review(
        client_id=current_user["id"],
        salon_id=appt.salon_id,
        staff_id=appt.staff_id,
        appointment_id=appt.id,
        rating=review.rating,
        comment=review.comment,
    )
    session.add(db_review)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail="This appointment has already been reviewed")

    _recalculate_rating(session, session.get(Salon, appt.salon_id), Review.salon_id)
    staff = session.get(Staff, appt.staff_id)
    if staff is not None:
        _recalculate_rating(session, staff, Review.staff_id)

    session.commit()
    session.refresh(db_review)
    logger.info("Review %s (%s stars) for appointment %s", db_review.id, db_review.rating, appt.id)
    return db_review


@router.post("/reviews/{review_id}/response", response_model=ReviewPublic)
def respond_to_review(
    review_id: int,
    body: ReviewResponseCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    review = session.get(Review, review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    require_salon_owner(current_user, get_salon_or_404(session, review.salon_id))

    review.response = body.response
    session.add(review)
    session.commit()
    session.refresh(review)
    return review


@router.get("/salons/{salon_id}/reviews", response_model=List[ReviewPublic])
def list_salon_reviews(salon_id: int, session: Session = Depends(get_session)):
    get_salon_or_404(session, salon_id)
    return session.exec(
        select(Review).where(Review.salon_id == salon_id).order_by(col(Review.created_at).desc())
    ).all()
