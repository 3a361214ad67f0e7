from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from app.models.booking import BookingStatusEnum, BookingPaymentStatusEnum
from app.models.fitness_class import ClassCategoryEnum


class TimeSlot(BaseModel):
    start: str = Field(pattern=r"^\d{2}:\d{2}$")
    end: str = Field(pattern=r"^\d{2}:\d{2}$")


class BookingCreate(BaseModel):
    class_id: int
    booking_date: date
    time_slot: Optional[TimeSlot] = None
    notes: Optional[str] = None


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingClassInfo(BaseModel):
    id: int
    name: str
    category: ClassCategoryEnum
    duration: int
    price: float

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    user_id: int
    class_id: int
    booking_date: date
    time_slot_start: Optional[str] = None
    time_slot_end: Optional[str] = None
    status: BookingStatusEnum
    payment_status: BookingPaymentStatusEnum
    payment_amount: float
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    attended_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    fitness_class: Optional[BookingClassInfo] = None

    class Config:
        from_attributes = True
