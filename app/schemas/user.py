"""User schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.utils.validators import validate_password_strength

RoleName = Literal["admin", "employee", "job_seeker"]


class UserCreate(BaseModel):
    """Admin-created account with any role."""

    full_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: RoleName
    company_name: Optional[str] = Field(None, min_length=2)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        ok, errors = validate_password_strength(v)
        if not ok:
            raise ValueError("; ".join(errors))
        return v


class UserUpdate(BaseModel):
    """Partial user update; omitted fields are left unchanged."""

    full_name: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[RoleName] = None
    company_name: Optional[str] = Field(None, min_length=2)
    is_active: Optional[bool] = None


class UserResponse(BaseModel):
    """User response schema."""

    id: UUID
    full_name: str
    email: str
    role: str
    company_name: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserBrief(BaseModel):
    """Name and email shown next to applications and jobs."""

    full_name: str
    email: str

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class MessageResponse(BaseModel):
    message: str


class UserMessageResponse(MessageResponse):
    user: UserResponse
