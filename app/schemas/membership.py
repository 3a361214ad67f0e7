from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.membership import MembershipTypeEnum


class MembershipBenefit(BaseModel):
    name: str
    description: Optional[str] = None
    included: bool = True


class MembershipCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    type: MembershipTypeEnum
    duration: int = Field(ge=1, description="Months")
    price: float = Field(ge=0)
    features: List[str] = []
    benefits: List[MembershipBenefit] = []
    classes_per_week: int = Field(0, ge=0)
    personal_training_sessions: int = Field(0, ge=0)
    guest_passes: int = Field(0, ge=0)
    access_hours: str = "24/7"
    discount: float = Field(0, ge=0, le=100)
    popular: bool = False
    is_active: bool = True


class MembershipUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1)
    type: Optional[MembershipTypeEnum] = None
    duration: Optional[int] = Field(None, ge=1)
    price: Optional[float] = Field(None, ge=0)
    features: Optional[List[str]] = None
    benefits: Optional[List[MembershipBenefit]] = None
    classes_per_week: Optional[int] = Field(None, ge=0)
    personal_training_sessions: Optional[int] = Field(None, ge=0)
    guest_passes: Optional[int] = Field(None, ge=0)
    access_hours: Optional[str] = None
    discount: Optional[float] = Field(None, ge=0, le=100)
    popular: Optional[bool] = None
    is_active: Optional[bool] = None


class MembershipResponse(MembershipCreate):
    id: int
    features: Optional[List[str]] = None
    benefits: Optional[List[MembershipBenefit]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
