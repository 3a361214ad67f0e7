import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Enum, Float, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.base import Base


class AchievementCategoryEnum(str, enum.Enum):
    workout = "workout"
    attendance = "attendance"
    streak = "streak"
    milestone = "milestone"
    social = "social"
    special = "special"


class AchievementTierEnum(str, enum.Enum):
    bronze = "bronze"
    silver = "silver"
    gold = "gold"
    platinum = "platinum"


class CriteriaTypeEnum(str, enum.Enum):
    workout_count = "workout_count"
    workout_streak = "workout_streak"
    calories_burned = "calories_burned"
    class_attendance = "class_attendance"
    duration = "duration"


# Sort order for the catalog listing
TIER_ORDER = {
    AchievementTierEnum.bronze: 0,
    AchievementTierEnum.silver: 1,
    AchievementTierEnum.gold: 2,
    AchievementTierEnum.platinum: 3,
}


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(String, nullable=False)
    icon = Column(String, nullable=False, default="🏅")
    category = Column(Enum(AchievementCategoryEnum), nullable=False)
    points = Column(Integer, nullable=False, default=10)
    tier = Column(Enum(AchievementTierEnum), nullable=False, default=AchievementTierEnum.bronze)
    criteria_type = Column(Enum(CriteriaTypeEnum), nullable=False)
    criteria_target = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    progress = Column(Float, nullable=False, default=0)
    unlocked_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    achievement = relationship("Achievement", lazy="joined")
