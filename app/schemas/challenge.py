from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.models.challenge import ChallengeTypeEnum, ChallengeCategoryEnum


class ChallengeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    type: ChallengeTypeEnum = ChallengeTypeEnum.individual
    category: ChallengeCategoryEnum
    goal_target: float = Field(gt=0)
    goal_unit: Optional[str] = None
    start_date: datetime
    end_date: datetime
    reward_points: int = Field(0, ge=0)
    reward_badges: List[str] = []
    rules: List[str] = []
    max_participants: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ProgressUpdate(BaseModel):
    progress: float = Field(ge=0)


class ChallengeResponse(BaseModel):
    id: int
    name: str
    description: str
    type: ChallengeTypeEnum
    category: ChallengeCategoryEnum
    goal_target: float
    goal_unit: Optional[str] = None
    start_date: datetime
    end_date: datetime
    reward_points: int
    reward_badges: Optional[List[str]] = None
    rules: Optional[List[str]] = None
    max_participants: Optional[int] = None
    is_active: bool
    created_by: Optional[int] = None
    participant_count: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipantResponse(BaseModel):
    challenge_id: int
    user_id: int
    progress: float
    rank: Optional[int] = None
    joined_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyChallengeResponse(BaseModel):
    challenge: ChallengeResponse
    progress: float
    rank: Optional[int] = None
    percentage: float
    completed: bool
    joined_at: datetime


class ChallengeStanding(BaseModel):
    rank: Optional[int] = None
    user: Dict[str, Any]
    progress: float
    percentage: float
