from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import date, datetime

from app.models.user import RoleEnum, GenderEnum, FitnessLevelEnum, MembershipStatusEnum


class UserSummary(BaseModel):
    id: int
    name: str
    avatar: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: RoleEnum
    phone: Optional[str] = None
    avatar: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    fitness_goals: Optional[List[str]] = None
    fitness_level: Optional[FitnessLevelEnum] = None
    is_active: bool = True
    membership_type: Optional[str] = None
    membership_status: Optional[MembershipStatusEnum] = None
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    avatar: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    height: Optional[float] = Field(None, gt=0)
    weight: Optional[float] = Field(None, gt=0)
    fitness_goals: Optional[List[str]] = None
    fitness_level: Optional[FitnessLevelEnum] = None


class UserAdminUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[RoleEnum] = None
    is_active: Optional[bool] = None
