import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Float, Enum, Text, Index
from sqlalchemy.orm import relationship
from app.core.base import Base


class BookingStatusEnum(str, enum.Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"
    no_show = "no-show"


class BookingPaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_user_date", "user_id", "booking_date"),
        Index("ix_bookings_class_date", "class_id", "booking_date"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    booking_date = Column(Date, nullable=False)
    time_slot_start = Column(String, nullable=True)
    time_slot_end = Column(String, nullable=True)
    status = Column(Enum(BookingStatusEnum), nullable=False, default=BookingStatusEnum.confirmed)
    payment_status = Column(Enum(BookingPaymentStatusEnum), nullable=False, default=BookingPaymentStatusEnum.pending)
    payment_amount = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(String, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    attended_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="bookings")
    fitness_class = relationship("FitnessClass", back_populates="bookings", lazy="joined")
