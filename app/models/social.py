import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Enum, Text, JSON,
    UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from app.core.base import Base


class PostTypeEnum(str, enum.Enum):
    workout = "workout"
    achievement = "achievement"
    milestone = "milestone"
    status = "status"
    media = "media"


class VisibilityEnum(str, enum.Enum):
    public = "public"
    friends = "friends"
    private = "private"


class SocialPost(Base):
    __tablename__ = "social_posts"
    __table_args__ = (
        Index("ix_social_posts_user_created", "user_id", "created_at"),
        Index("ix_social_posts_visibility_created", "visibility", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(Enum(PostTypeEnum), nullable=False)
    text = Column(Text, nullable=True)
    workout_id = Column(Integer, ForeignKey("workouts.id", ondelete="SET NULL"), nullable=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="SET NULL"), nullable=True)
    # [{"url": ..., "media_type": "image" | "video"}]
    media = Column(JSON, nullable=True)
    visibility = Column(Enum(VisibilityEnum), nullable=False, default=VisibilityEnum.public)
    shares = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", lazy="joined")
    likes = relationship("PostLike", cascade="all, delete-orphan", lazy="selectin")
    comments = relationship(
        "PostComment",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PostComment.created_at",
    )


class PostLike(Base):
    __tablename__ = "post_likes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_like"),
    )

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("social_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class PostComment(Base):
    __tablename__ = "post_comments"

    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("social_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", lazy="joined")


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        CheckConstraint("follower_id != following_id", name="ck_follow_not_self"),
    )

    id = Column(Integer, primary_key=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    follower = relationship("User", foreign_keys=[follower_id], lazy="joined")
    following = relationship("User", foreign_keys=[following_id], lazy="joined")
