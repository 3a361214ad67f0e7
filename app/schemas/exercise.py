from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.exercise_library import ExerciseCategoryEnum
from app.models.fitness_class import DifficultyEnum


class ExerciseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    category: ExerciseCategoryEnum
    muscle_groups: List[str] = []
    equipment: List[str] = []
    difficulty: DifficultyEnum
    instructions: List[str] = []
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)
    calories: Optional[float] = Field(None, ge=0)
    tips: List[str] = []
    variations: List[str] = []
    safety: List[str] = []


class ExerciseLibraryResponse(ExerciseCreate):
    id: int
    muscle_groups: Optional[List[str]] = None
    equipment: Optional[List[str]] = None
    instructions: Optional[List[str]] = None
    tips: Optional[List[str]] = None
    variations: Optional[List[str]] = None
    safety: Optional[List[str]] = None
    is_approved: bool

    class Config:
        from_attributes = True


class Recommendation(BaseModel):
    exercise: ExerciseLibraryResponse
    score: float
    reason: str
