# salonbook/models.py

from typing import Optional, List
from datetime import datetime, timezone, date as Date, time as Time

from sqlalchemy import Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

# statuses that hold a staff member's time slot
ACTIVE_STATUS_SQL = "status IN ('pending', 'confirmed', 'in_progress')"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str = ""
    phone: Optional[str] = None
    password_hash: str
    role: str  # client, staff, salon or admin


class Salon(SQLModel, table=True):
    __tablename__ = "salons"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    name: str
    address: Optional[str] = None
    status: str = "pending"  # pending, approved, suspended
    # {"monday": {"open": "09:00", "close": "17:00", "is_open": true}, ...}
    working_hours: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    auto_confirm: bool = False
    rating: float = 0.0
    review_count: int = 0
    created_at: datetime = Field(default_factory=_utcnow)


class Staff(SQLModel, table=True):
    __tablename__ = "staff"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    salon_id: int = Field(foreign_key="salons.id", index=True)
    name: str
    role: str = "stylist"
    working_hours: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    auto_confirm: bool = False
    rating: float = 0.0
    review_count: int = 0
    specialties: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    is_active: bool = True


class Service(SQLModel, table=True):
    __tablename__ = "services"

    id: Optional[int] = Field(default=None, primary_key=True)
    salon_id: int = Field(foreign_key="salons.id", index=True)
    name: str
    duration: int  # minutes
    price: float
    discount_price: Optional[float] = None
    category: Optional[str] = None
    staff_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    @property
    def final_price(self) -> float:
        return self.discount_price if self.discount_price is not None else self.price


class Break(SQLModel, table=True):
    """A recurring or one-off break, owned by a staff member or a whole salon."""

    __tablename__ = "breaks"

    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: Optional[int] = Field(default=None, foreign_key="staff.id", index=True)
    salon_id: Optional[int] = Field(default=None, foreign_key="salons.id", index=True)
    title: str
    type: str  # daily, weekly, specific_date, date_range
    start_time: Time
    end_time: Time
    days: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))  # weekly
    date: Optional[Date] = None  # specific_date
    start_date: Optional[Date] = None  # date_range
    end_date: Optional[Date] = None  # date_range
    is_active: bool = True


class Vacation(SQLModel, table=True):
    __tablename__ = "vacations"

    id: Optional[int] = Field(default=None, primary_key=True)
    staff_id: Optional[int] = Field(default=None, foreign_key="staff.id", index=True)
    salon_id: Optional[int] = Field(default=None, foreign_key="salons.id", index=True)
    title: str
    type: str = "vacation"  # vacation, sick_leave, personal, other
    start_date: Date
    end_date: Date
    notes: Optional[str] = None
    is_active: bool = True


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "appointments_no_double_booking",
            "staff_id", "date", "time",
            unique=True,
            sqlite_where=text(ACTIVE_STATUS_SQL),
            postgresql_where=text(ACTIVE_STATUS_SQL),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    salon_id: int = Field(foreign_key="salons.id", index=True)
    staff_id: int = Field(foreign_key="staff.id", index=True)
    service_id: int = Field(foreign_key="services.id")

    client_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    is_guest: bool = False

    date: Date = Field(index=True)
    time: Time
    end_time: Time
    status: str = "pending"
    total_price: float = 0.0
    payment_status: str = "pending"  # pending, paid, refunded
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def touch(self) -> None:
        self.updated_at = _utcnow()


class Review(SQLModel, table=True):
    __tablename__ = "reviews"

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: int = Field(foreign_key="users.id", index=True)
    salon_id: int = Field(foreign_key="salons.id", index=True)
    staff_id: Optional[int] = Field(default=None, foreign_key="staff.id", index=True)
    appointment_id: int = Field(foreign_key="appointments.id", unique=True)
    rating: int
    comment: Optional[str] = None
    response: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
