"""Database session and engine configuration."""

from typing import AsyncGenerator

import structlog
from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.db.base import Base

# Load environment variables
load_dotenv()

logger = structlog.get_logger(__name__)

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
)

# Create async session factory
AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_initial_admin(session: AsyncSession) -> bool:
    """Create the bootstrap admin account if no admin exists yet.

    Returns True when an account was created.
    """
    from app.core.security import Role, get_password_hash
    from app.models.user import User

    result = await session.execute(select(User.id).where(User.role == Role.ADMIN.value).limit(1))
    if result.scalar_one_or_none() is not None:
        logger.info("initial_admin_exists")
        return False

    session.add(
        User(
            full_name=settings.INITIAL_ADMIN_NAME,
            email=settings.INITIAL_ADMIN_EMAIL,
            password_hash=get_password_hash(settings.INITIAL_ADMIN_PASSWORD),
            role=Role.ADMIN.value,
        )
    )
    await session.commit()
    logger.warning(
        "initial_admin_created",
        email=settings.INITIAL_ADMIN_EMAIL,
        hint="change the password after first login",
    )
    return True


async def init_db():
    """Initialize database tables and the bootstrap admin."""
    # Import all models to register them
    from app.models import application, invoice, job, payment_intent, user  # noqa: F401

    async with engine.begin() as conn:
        # Create tables (in production, use Alembic migrations)
        if settings.DEBUG:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await create_initial_admin(session)
