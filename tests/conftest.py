"""Pytest configuration and fixtures."""

import os
import secrets

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", f"test-only-{secrets.token_urlsafe(32)}")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("SENTRY_DSN", "")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event, func, select  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402

from app.api import deps  # noqa: E402
from app.core.security import Role, create_token_for_user, get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Application, Invoice, Job, User  # noqa: E402
from app.services.payment_gateway import InMemoryPaymentGateway  # noqa: E402
from app.services.resume_storage import ResumeStorage, get_resume_storage  # noqa: E402

TEST_PASSWORD = "secret123"
_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database per test, with foreign keys enforced."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    return InMemoryPaymentGateway()


@pytest.fixture
def resume_storage(tmp_path):
    return ResumeStorage(storage_dir=str(tmp_path / "resumes"))


@pytest.fixture
async def client(session_factory, gateway, resume_storage):
    """HTTP client bound to the test database, gateway and storage."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_resume_storage] = lambda: resume_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make(role: Role = Role.JOB_SEEKER, email: str = None, company_name: str = None, full_name: str = None):
        async with session_factory() as session:
            user = User(
                full_name=full_name or f"Test {role.value}",
                email=email or f"{role.value}-{secrets.token_hex(4)}@example.com",
                password_hash=_PASSWORD_HASH,
                role=role.value,
                company_name=company_name,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


@pytest.fixture
def make_job(session_factory):
    async def _make(poster: User, status: str = "open", title: str = "Backend Engineer", company_name: str = None):
        async with session_factory() as session:
            job = Job(
                title=title,
                description="Build and run the payment-gated job board.",
                company_name=company_name or poster.company_name or "Acme",
                posted_by_user_id=poster.id,
                status=status,
            )
            session.add(job)
            await session.commit()
            return job

    return _make


@pytest.fixture
def make_application(session_factory):
    """Insert an application row directly in the given state."""

    async def _make(job: Job, applicant: User, status: str = "pending", is_paid: bool = True, intent_id: str = None):
        async with session_factory() as session:
            application = Application(
                job_id=job.id,
                user_id=applicant.id,
                resume_file_url="uploads/resumes/cv.pdf",
                status=status,
                is_paid=is_paid,
                payment_intent_id=intent_id,
            )
            session.add(application)
            await session.commit()
            return application

    return _make


@pytest.fixture
def make_invoice(session_factory):
    async def _make(application: Application, user: User = None):
        async with session_factory() as session:
            invoice = Invoice(
                application_id=application.id,
                user_id=user.id if user else application.user_id,
                payment_amount=100,
                payment_intent_id=application.payment_intent_id,
            )
            session.add(invoice)
            await session.commit()
            return invoice

    return _make


@pytest.fixture
def count_rows(session_factory):
    async def _count(model, *criteria) -> int:
        async with session_factory() as session:
            return await session.scalar(select(func.count()).select_from(model).where(*criteria))

    return _count


@pytest.fixture
def load_application(session_factory):
    async def _load(job_id, user_id):
        async with session_factory() as session:
            result = await session.execute(
                select(Application).where(Application.job_id == job_id, Application.user_id == user_id)
            )
            return result.scalar_one_or_none()

    return _load


@pytest.fixture
def load_invoice(session_factory):
    async def _load(application_id):
        async with session_factory() as session:
            result = await session.execute(select(Invoice).where(Invoice.application_id == application_id))
            return result.scalar_one_or_none()

    return _load


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_token_for_user(user)}"}

    return _headers


# Common actors

@pytest.fixture
async def seeker(make_user):
    return await make_user(Role.JOB_SEEKER, full_name="Jane Seeker")


@pytest.fixture
async def employer(make_user):
    return await make_user(Role.EMPLOYEE, company_name="Acme")


@pytest.fixture
async def other_employer(make_user):
    return await make_user(Role.EMPLOYEE, company_name="Globex")


@pytest.fixture
async def admin(make_user):
    return await make_user(Role.ADMIN)


@pytest.fixture
async def open_job(make_job, employer):
    return await make_job(employer)
