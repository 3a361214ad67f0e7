import enum
from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, Date, ForeignKey, Float, Enum, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.core.base import Base


class LeaderboardPeriodEnum(str, enum.Enum):
    all_time = "all_time"
    monthly = "monthly"
    weekly = "weekly"


class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "period", name="uq_leaderboard_user_period"),
        Index("ix_leaderboard_period_points", "period", "total_points"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    period = Column(Enum(LeaderboardPeriodEnum), nullable=False, default=LeaderboardPeriodEnum.all_time)
    period_start = Column(Date, nullable=True)
    total_points = Column(Integer, nullable=False, default=0)
    total_workouts = Column(Integer, nullable=False, default=0)
    total_calories = Column(Float, nullable=False, default=0)
    total_duration = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_workout_date = Column(DateTime, nullable=True)
    level = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", lazy="joined")
