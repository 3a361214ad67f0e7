from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.fitness_class import ClassCategoryEnum, DifficultyEnum
from app.schemas.user import UserSummary


class ScheduleSlot(BaseModel):
    day_of_week: str = Field(pattern="^(monday|tuesday|wednesday|thursday|friday|saturday|sunday)$")
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")


class ClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: ClassCategoryEnum
    difficulty: DifficultyEnum = DifficultyEnum.beginner
    duration: int = Field(gt=0, description="Minutes")
    max_capacity: int = Field(20, ge=1)
    schedule: List[ScheduleSlot] = []
    price: float = Field(0, ge=0)
    image: Optional[str] = None
    equipment: List[str] = []
    benefits: List[str] = []
    is_active: bool = True
    trainer_id: Optional[int] = None


class ClassUpdate(BaseModel):
    """current_enrollment is owned by bookings and cannot be set here."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ClassCategoryEnum] = None
    difficulty: Optional[DifficultyEnum] = None
    duration: Optional[int] = Field(None, gt=0)
    max_capacity: Optional[int] = Field(None, ge=1)
    schedule: Optional[List[ScheduleSlot]] = None
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = None
    equipment: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    is_active: Optional[bool] = None
    trainer_id: Optional[int] = None


class ClassResponse(BaseModel):
    id: int
    name: str
    description: str
    category: ClassCategoryEnum
    difficulty: DifficultyEnum
    duration: int
    max_capacity: int
    current_enrollment: int
    schedule: Optional[List[ScheduleSlot]] = None
    price: float
    image: Optional[str] = None
    equipment: Optional[List[str]] = None
    benefits: Optional[List[str]] = None
    is_active: bool
    rating: float = 0
    review_count: int = 0
    trainer: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
