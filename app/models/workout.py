import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Float, Enum, Text
from sqlalchemy.orm import relationship
from app.core.base import Base


class WorkoutTypeEnum(str, enum.Enum):
    strength = "strength"
    cardio = "cardio"
    flexibility = "flexibility"
    sports = "sports"
    other = "other"


class FeelingEnum(str, enum.Enum):
    excellent = "excellent"
    good = "good"
    average = "average"
    tired = "tired"
    exhausted = "exhausted"


class Workout(Base):
    __tablename__ = "workouts"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    type = Column(Enum(WorkoutTypeEnum), nullable=False)
    duration = Column(Integer, nullable=False)
    total_calories = Column(Float, default=0, nullable=False)
    feeling = Column(Enum(FeelingEnum), nullable=True)
    notes = Column(Text, nullable=True)
    is_completed = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="workouts")
    exercises = relationship(
        "WorkoutExercise",
        back_populates="workout",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkoutExercise.id",
    )


class WorkoutExercise(Base):
    __tablename__ = "workout_exercises"

    id = Column(Integer, primary_key=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sets = Column(Integer, nullable=True)
    reps = Column(Integer, nullable=True)
    weight = Column(Float, nullable=True)
    duration = Column(Float, nullable=True)
    distance = Column(Float, nullable=True)
    calories = Column(Float, nullable=True)
    notes = Column(String, nullable=True)

    workout = relationship("Workout", back_populates="exercises")
