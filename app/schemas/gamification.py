from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from app.models.achievement import AchievementCategoryEnum, AchievementTierEnum, CriteriaTypeEnum
from app.models.leaderboard import LeaderboardPeriodEnum
from app.schemas.user import UserSummary


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    category: AchievementCategoryEnum
    points: int
    tier: AchievementTierEnum
    criteria_type: CriteriaTypeEnum
    criteria_target: float

    class Config:
        from_attributes = True


class UserAchievementResponse(BaseModel):
    id: int
    progress: float
    unlocked_at: datetime
    achievement: AchievementResponse

    class Config:
        from_attributes = True


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user: UserSummary
    period: LeaderboardPeriodEnum
    total_points: int
    total_workouts: int
    total_calories: float
    total_duration: int
    current_streak: int
    longest_streak: int
    level: int
    last_workout_date: Optional[datetime] = None
