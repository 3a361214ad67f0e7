from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from app.core.config import settings
from app.models.user import RoleEnum
from app.schemas.user import UserResponse


def check_password_strength(value: str) -> str:
    if len(value) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")
    return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserRegister(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str
    role: RoleEnum = RoleEnum.member
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please provide a name")
        return value

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)

    @field_validator("role")
    @classmethod
    def role_not_admin(cls, value: RoleEnum) -> RoleEnum:
        if value == RoleEnum.admin:
            raise ValueError("Admin role cannot be self-assigned")
        return value


class AuthResponse(BaseModel):
    token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        return check_password_strength(value)
