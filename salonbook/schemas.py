# salonbook/schemas.py

from datetime import date as Date, datetime, time as Time
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)

from .core import format_hhmm, parse_date, parse_time

# "HH:MM" in and out; dates accept YYYY-MM-DD or DD.MM.YYYY
HHMM = Annotated[
    Time,
    BeforeValidator(parse_time),
    PlainSerializer(format_hhmm, return_type=str, when_used="json"),
]
FlexDate = Annotated[Date, BeforeValidator(parse_date)]


class UserRole(str, Enum):
    client = "client"
    staff = "staff"
    salon = "salon"  # salon owner
    admin = "admin"


class SalonStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    suspended = "suspended"


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class VacationType(str, Enum):
    vacation = "vacation"
    sick_leave = "sick_leave"
    personal = "personal"
    other = "other"


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    name: str = ""
    phone: Optional[str] = None


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str = ""
    role: UserRole


# --- working hours ---------------------------------------------------------

class DayHours(BaseModel):
    open: HHMM
    close: HHMM
    is_open: bool = True

    @model_validator(mode="after")
    def _close_after_open(self):
        if self.is_open and self.close <= self.open:
            raise ValueError("close must be later than open")
        return self


WorkingHours = Dict[Weekday, DayHours]


class SalonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    address: Optional[str] = None
    working_hours: Optional[WorkingHours] = None
    auto_confirm: bool = False


class SalonUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    address: Optional[str] = None
    working_hours: Optional[WorkingHours] = None
    auto_confirm: Optional[bool] = None


class SalonStatusUpdate(BaseModel):
    status: SalonStatus


class SalonPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    name: str
    address: Optional[str] = None
    status: SalonStatus
    working_hours: Optional[dict] = None
    auto_confirm: bool
    rating: float
    review_count: int


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    duration: int = Field(gt=0, le=24 * 60)
    price: float = Field(ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    staff_ids: List[int] = []


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    duration: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    price: Optional[float] = Field(default=None, ge=0)
    discount_price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    staff_ids: Optional[List[int]] = None


class ServicePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    salon_id: int
    name: str
    duration: int
    price: float
    discount_price: Optional[float] = None
    category: Optional[str] = None
    staff_ids: List[int] = []


class StaffCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    user_id: Optional[int] = None
    role: str = "stylist"
    working_hours: Optional[WorkingHours] = None
    auto_confirm: bool = False
    specialties: List[str] = []


class StaffUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[str] = None
    working_hours: Optional[WorkingHours] = None
    auto_confirm: Optional[bool] = None
    specialties: Optional[List[str]] = None
    is_active: Optional[bool] = None


class StaffPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    salon_id: int
    name: str
    role: str
    working_hours: Optional[dict] = None
    auto_confirm: bool
    rating: float
    review_count: int
    specialties: List[str] = []
    is_active: bool


# --- breaks & vacations ----------------------------------------------------
# A break is one of four shapes, told apart by ``type``. Each shape only
# carries the fields it needs, so a weekly break without days or a date
# range without an end cannot be built.

class _BreakBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    start_time: HHMM
    end_time: HHMM
    is_active: bool = True

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self


class DailyBreak(_BreakBase):
    type: Literal["daily"] = "daily"


class WeeklyBreak(_BreakBase):
    type: Literal["weekly"] = "weekly"
    days: List[Weekday] = Field(min_length=1)


class SpecificDateBreak(_BreakBase):
    type: Literal["specific_date"] = "specific_date"
    date: FlexDate


class DateRangeBreak(_BreakBase):
    type: Literal["date_range"] = "date_range"
    start_date: FlexDate
    end_date: FlexDate

    @model_validator(mode="after")
    def _range_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


BreakShape = Union[DailyBreak, WeeklyBreak, SpecificDateBreak, DateRangeBreak]
BreakRule = Annotated[BreakShape, Field(discriminator="type")]


class BreakPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    staff_id: Optional[int] = None
    salon_id: Optional[int] = None
    title: str
    type: str
    start_time: HHMM
    end_time: HHMM
    days: Optional[List[str]] = None
    date: Optional[Date] = None
    start_date: Optional[Date] = None
    end_date: Optional[Date] = None
    is_active: bool


class VacationCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    type: VacationType = VacationType.vacation
    start_date: FlexDate
    end_date: FlexDate
    notes: Optional[str] = None
    is_active: bool = True

    @model_validator(mode="after")
    def _range_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class VacationPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    staff_id: Optional[int] = None
    salon_id: Optional[int] = None
    title: str
    type: VacationType
    start_date: Date
    end_date: Date
    notes: Optional[str] = None
    is_active: bool


# --- appointments ----------------------------------------------------------

class AppointmentCreate(BaseModel):
    salon_id: int
    staff_id: int
    service_id: int
    date: FlexDate
    time: HHMM
    notes: Optional[str] = None
    # guest details, used when the salon or staff enters a booking by hand
    client_name: Optional[str] = Field(default=None, max_length=255)
    client_email: Optional[str] = Field(default=None, max_length=255)
    client_phone: Optional[str] = Field(default=None, max_length=20)


class AppointmentUpdate(BaseModel):
    status: Optional[AppointmentStatus] = None
    date: Optional[FlexDate] = None
    time: Optional[HHMM] = None
    staff_id: Optional[int] = None
    service_id: Optional[int] = None
    notes: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None

    def reschedules(self) -> bool:
        return any(v is not None for v in (self.date, self.time, self.staff_id, self.service_id))


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    salon_id: int
    staff_id: int
    service_id: int
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    is_guest: bool
    date: Date
    time: HHMM
    end_time: HHMM
    status: AppointmentStatus
    total_price: float
    payment_status: PaymentStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AvailabilityResponse(BaseModel):
    salon_id: int
    staff_id: int
    service_id: int
    date: Date
    available_starts: List[str]


# --- reviews ---------------------------------------------------------------

class ReviewCreate(BaseModel):
    appointment_id: int
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class ReviewResponseCreate(BaseModel):
    response: str = Field(min_length=1)


class ReviewPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    salon_id: int
    staff_id: Optional[int] = None
    appointment_id: int
    rating: int
    comment: Optional[str] = None
    response: Optional[str] = None
    created_at: datetime
