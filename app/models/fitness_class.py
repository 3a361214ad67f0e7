import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Float, Enum, Text, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.base import Base


class ClassCategoryEnum(str, enum.Enum):
    cardio = "cardio"
    strength = "strength"
    yoga = "yoga"
    pilates = "pilates"
    dance = "dance"
    martial_arts = "martial-arts"
    cycling = "cycling"
    swimming = "swimming"
    crossfit = "crossfit"
    other = "other"


class DifficultyEnum(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class FitnessClass(Base):
    __tablename__ = "classes"
    __table_args__ = (
        CheckConstraint("current_enrollment >= 0", name="ck_classes_enrollment_non_negative"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    trainer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    category = Column(Enum(ClassCategoryEnum), nullable=False)
    difficulty = Column(Enum(DifficultyEnum), nullable=False, default=DifficultyEnum.beginner)
    duration = Column(Integer, nullable=False)
    max_capacity = Column(Integer, nullable=False, default=20)
    current_enrollment = Column(Integer, nullable=False, default=0)
    # [{"day_of_week": "monday", "start_time": "09:00", "end_time": "10:00"}]
    schedule = Column(JSON, nullable=True)
    price = Column(Float, nullable=False, default=0)
    image = Column(String, nullable=True)
    equipment = Column(JSON, nullable=True)
    benefits = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    trainer = relationship("User", lazy="joined")
    bookings = relationship("Booking", back_populates="fitness_class", cascade="all, delete")
