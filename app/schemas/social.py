from pydantic import BaseModel, Field, HttpUrl
from typing import Optional, List
from datetime import datetime

from app.models.social import PostTypeEnum, VisibilityEnum
from app.schemas.user import UserSummary


class MediaItem(BaseModel):
    url: HttpUrl
    media_type: str = Field("image", pattern="^(image|video)$")


class PostCreate(BaseModel):
    type: PostTypeEnum = PostTypeEnum.status
    text: Optional[str] = Field(None, max_length=2000)
    workout_id: Optional[int] = None
    achievement_id: Optional[int] = None
    media: List[MediaItem] = []
    visibility: VisibilityEnum = VisibilityEnum.public


class CommentCreate(BaseModel):
    text: str = Field(max_length=1000)


class CommentResponse(BaseModel):
    id: int
    user: UserSummary
    text: str
    created_at: datetime

    class Config:
        from_attributes = True


class PostResponse(BaseModel):
    id: int
    user: UserSummary
    type: PostTypeEnum
    text: Optional[str] = None
    workout_id: Optional[int] = None
    achievement_id: Optional[int] = None
    media: Optional[list] = None
    visibility: VisibilityEnum
    shares: int = 0
    likes: int = 0
    liked_by_me: bool = False
    comments: List[CommentResponse] = []
    created_at: datetime


class LikeResponse(BaseModel):
    likes: int
    liked: bool


class FollowResponse(BaseModel):
    following: bool
