from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.workout import WorkoutTypeEnum, FeelingEnum


class ExerciseInput(BaseModel):
    name: str = Field(min_length=1)
    sets: Optional[int] = Field(None, ge=0)
    reps: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    duration: Optional[float] = Field(None, ge=0)
    distance: Optional[float] = Field(None, ge=0)
    calories: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class ExerciseResponse(ExerciseInput):
    id: int

    class Config:
        from_attributes = True


class WorkoutCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    type: WorkoutTypeEnum
    duration: int = Field(gt=0, description="Minutes")
    date: Optional[datetime] = None
    exercises: List[ExerciseInput] = []
    total_calories: Optional[float] = Field(None, ge=0)
    feeling: Optional[FeelingEnum] = None
    notes: Optional[str] = None
    is_completed: bool = True
    share_workout: bool = False


class WorkoutUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[WorkoutTypeEnum] = None
    duration: Optional[int] = Field(None, gt=0)
    date: Optional[datetime] = None
    exercises: Optional[List[ExerciseInput]] = None
    total_calories: Optional[float] = Field(None, ge=0)
    feeling: Optional[FeelingEnum] = None
    notes: Optional[str] = None
    is_completed: Optional[bool] = None


class WorkoutResponse(BaseModel):
    id: int
    user_id: int
    title: str
    date: datetime
    type: WorkoutTypeEnum
    duration: int
    total_calories: float
    feeling: Optional[FeelingEnum] = None
    notes: Optional[str] = None
    is_completed: bool
    exercises: List[ExerciseResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
