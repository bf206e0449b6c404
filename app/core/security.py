"""Security utilities: JWT, password hashing, principals and capability checks."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from uuid import UUID

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db
from app.models.user import User

# HTTPBearer for simple token authentication in Swagger (just paste the access token)
security = HTTPBearer()


class Role(str, Enum):
    """User roles."""

    ADMIN = "admin"
    EMPLOYEE = "employee"
    JOB_SEEKER = "job_seeker"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to a request."""

    user_id: UUID
    role: Role
    company_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(user_id=user.id, role=Role(user.role), company_name=user.company_name)


# Capability checks ----------------------------------------------------------

def is_admin(principal: Principal) -> bool:
    return principal.role == Role.ADMIN


def is_self(principal: Principal, user_id: UUID) -> bool:
    """True when the principal is the user named in the request path."""
    return principal.user_id == user_id


def can_manage_job(principal: Principal, job) -> bool:
    """Poster of the job or any admin."""
    return is_admin(principal) or job.posted_by_user_id == principal.user_id


def can_review_application(principal: Principal, job) -> bool:
    """Reviewing is reserved for whoever may manage the application's job."""
    return can_manage_job(principal, job)


def can_view_application(principal: Principal, application, job) -> bool:
    """Applicant, job poster or admin."""
    return application.user_id == principal.user_id or can_manage_job(principal, job)


# Passwords ------------------------------------------------------------------

def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its bcrypt hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except ValueError:
        return False


# Tokens ---------------------------------------------------------------------

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def create_token_for_user(user: User) -> str:
    """Access token carrying the user id and role."""
    return create_access_token({"sub": str(user.id), "role": user.role})


def decode_token(token: str) -> dict:
    """Decode and verify JWT token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from Bearer token."""
    token = credentials.credentials
    payload = decode_token(token)

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    # Fetch user from database
    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )

    return user


async def get_current_principal(current_user: User = Depends(get_current_user)) -> Principal:
    """Principal for the authenticated user."""
    return Principal.from_user(current_user)


def require_role(*allowed_roles: Role):
    """Dependency to check the principal holds one of the allowed roles."""

    async def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role in allowed_roles:
            return principal

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions. Required: {[r.value for r in allowed_roles]}",
        )

    return role_checker
