import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, Enum, Text, JSON
from app.core.base import Base


class MembershipTypeEnum(str, enum.Enum):
    basic = "basic"
    premium = "premium"
    vip = "vip"


class Membership(Base):
    """Catalog plan; a user's own subscription lives on the user row."""

    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Enum(MembershipTypeEnum), nullable=False)
    duration = Column(Integer, nullable=False)  # months
    price = Column(Float, nullable=False)
    features = Column(JSON, nullable=True)
    # [{"name": ..., "description": ..., "included": true}]
    benefits = Column(JSON, nullable=True)
    classes_per_week = Column(Integer, nullable=False, default=0)  # 0 = unlimited
    personal_training_sessions = Column(Integer, nullable=False, default=0)
    guest_passes = Column(Integer, nullable=False, default=0)
    access_hours = Column(String, nullable=False, default="24/7")
    discount = Column(Float, nullable=False, default=0)
    popular = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
