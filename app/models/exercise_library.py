import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, Enum, Text, JSON, Index
from app.core.base import Base
from app.models.fitness_class import DifficultyEnum


class ExerciseCategoryEnum(str, enum.Enum):
    cardio = "cardio"
    strength = "strength"
    flexibility = "flexibility"
    balance = "balance"
    sports = "sports"


class ExerciseLibrary(Base):
    __tablename__ = "exercise_library"
    __table_args__ = (
        Index("ix_exercise_library_category_difficulty", "category", "difficulty"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=False)
    category = Column(Enum(ExerciseCategoryEnum), nullable=False)
    muscle_groups = Column(JSON, nullable=True)
    equipment = Column(JSON, nullable=True)
    difficulty = Column(Enum(DifficultyEnum), nullable=False)
    instructions = Column(JSON, nullable=True)
    video_url = Column(String, nullable=True)
    thumbnail_url = Column(String, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    calories = Column(Float, nullable=True)
    tips = Column(JSON, nullable=True)
    variations = Column(JSON, nullable=True)
    safety = Column(JSON, nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
