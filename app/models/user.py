import enum
from sqlalchemy import Column, Integer, String, Float, Enum, Boolean, JSON, DateTime, Date
from sqlalchemy.orm import relationship
from app.core.base import Base
from datetime import datetime


class RoleEnum(str, enum.Enum):
    member = "member"
    trainer = "trainer"
    admin = "admin"


class GenderEnum(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


class FitnessLevelEnum(str, enum.Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class MembershipStatusEnum(str, enum.Enum):
    inactive = "inactive"
    active = "active"
    expired = "expired"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.member)
    phone = Column(String, nullable=True)
    avatar = Column(String, nullable=True)

    # Profile
    date_of_birth = Column(Date, nullable=True)
    gender = Column(Enum(GenderEnum), nullable=True)
    height = Column(Float, nullable=True)
    weight = Column(Float, nullable=True)
    fitness_goals = Column(JSON, nullable=True)
    fitness_level = Column(Enum(FitnessLevelEnum), nullable=True, default=FitnessLevelEnum.beginner)

    is_active = Column(Boolean, default=True, nullable=False)

    # Membership
    membership_type = Column(String, nullable=True)
    membership_status = Column(Enum(MembershipStatusEnum), nullable=False, default=MembershipStatusEnum.inactive)
    membership_start_date = Column(DateTime, nullable=True)
    membership_end_date = Column(DateTime, nullable=True)
    payment_customer_id = Column(String, nullable=True)

    refresh_token = Column(String, nullable=True, index=True)
    refresh_token_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    workouts = relationship("Workout", back_populates="user", cascade="all, delete")
    bookings = relationship("Booking", back_populates="user", cascade="all, delete")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete")
