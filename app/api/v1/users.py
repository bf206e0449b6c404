"""Admin user management endpoints."""

from typing import Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import Principal, get_db, require_admin
from app.core.exceptions import EmailAlreadyRegistered, LastAdminDeletion, NotFound
from app.core.security import Role, get_password_hash
from app.models.user import User
from app.schemas.user import (
    MessageResponse,
    UserCreate,
    UserListResponse,
    UserMessageResponse,
    UserResponse,
    UserUpdate,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def _commit_user(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise EmailAlreadyRegistered()


@router.post("/", response_model=UserMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Create a user with any role."""
    email = request.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise EmailAlreadyRegistered()

    user = User(
        full_name=request.full_name,
        email=email,
        password_hash=get_password_hash(request.password),
        role=request.role,
        company_name=request.company_name,
    )
    db.add(user)
    await _commit_user(db)
    await db.refresh(user)

    logger.info("user_created", user_id=str(user.id), role=user.role, created_by=str(admin.user_id))
    return UserMessageResponse(message="User created successfully", user=UserResponse.model_validate(user))


@router.get("/", response_model=UserListResponse)
async def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    company: Optional[str] = Query(None, description="Filter by company"),
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """List users, optionally filtered by role and company."""
    query = select(User).order_by(User.created_at.desc())
    if role:
        query = query.where(User.role == role)
    if company:
        query = query.where(User.company_name == company)

    result = await db.execute(query)
    users = list(result.scalars().all())
    return UserListResponse(users=users, total=len(users))


@router.put("/{user_id}", response_model=UserMessageResponse)
async def update_user(
    user_id: UUID,
    request: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Update a user's profile, role or password."""
    user = await _get_user_or_404(db, user_id)
    changes = request.model_dump(exclude_unset=True)

    if "email" in changes and changes["email"]:
        changes["email"] = changes["email"].lower()
    if "password" in changes:
        password = changes.pop("password")
        if password:
            user.password_hash = get_password_hash(password)

    for field, value in changes.items():
        setattr(user, field, value)

    await _commit_user(db)
    await db.refresh(user)

    logger.info("user_updated", user_id=str(user_id), fields=sorted(changes), updated_by=str(admin.user_id))
    return UserMessageResponse(message="User updated successfully", user=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Delete a user together with their jobs and applications.

    The last remaining admin cannot be deleted.
    """
    user = await _get_user_or_404(db, user_id)

    if user.role == Role.ADMIN.value:
        admin_count = await db.scalar(
            select(func.count()).select_from(User).where(User.role == Role.ADMIN.value)
        )
        if admin_count <= 1:
            raise LastAdminDeletion()

    await db.delete(user)
    await db.commit()

    logger.info("user_deleted", user_id=str(user_id), deleted_by=str(admin.user_id))
    return MessageResponse(message="User deleted successfully")
