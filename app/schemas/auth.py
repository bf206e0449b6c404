"""Authentication schemas."""

from __future__ import annotations  # Enable forward references

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.user import UserResponse
from app.utils.validators import validate_password_strength


class RegisterRequest(BaseModel):
    """Job seeker self-registration."""

    full_name: str = Field(..., min_length=2, description="Full name must be at least 2 characters")
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, v: str) -> str:
        ok, errors = validate_password_strength(v)
        if not ok:
            raise ValueError("; ".join(errors))
        return v


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Access token plus the authenticated user."""

    message: str | None = None
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
