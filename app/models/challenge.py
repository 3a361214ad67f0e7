import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Float, Enum, Text, JSON, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from app.core.base import Base


class ChallengeTypeEnum(str, enum.Enum):
    individual = "individual"
    team = "team"
    community = "community"


class ChallengeCategoryEnum(str, enum.Enum):
    steps = "steps"
    calories = "calories"
    workouts = "workouts"
    duration = "duration"
    distance = "distance"
    custom = "custom"


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        Index("ix_challenges_window", "start_date", "end_date", "is_active"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Enum(ChallengeTypeEnum), nullable=False, default=ChallengeTypeEnum.individual)
    category = Column(Enum(ChallengeCategoryEnum), nullable=False)
    goal_target = Column(Float, nullable=False)
    goal_unit = Column(String, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    reward_points = Column(Integer, nullable=False, default=0)
    reward_badges = Column(JSON, nullable=True)
    rules = Column(JSON, nullable=True)
    max_participants = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    participants = relationship(
        "ChallengeParticipant",
        back_populates="challenge",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ChallengeParticipant.rank",
    )


class ChallengeParticipant(Base):
    __tablename__ = "challenge_participants"
    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participant"),
    )

    id = Column(Integer, primary_key=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    progress = Column(Float, nullable=False, default=0)
    rank = Column(Integer, nullable=True)
    joined_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    # Set once, when progress first reaches the goal; guards the reward
    completed_at = Column(DateTime, nullable=True)

    challenge = relationship("Challenge", back_populates="participants")
    user = relationship("User", lazy="joined")
