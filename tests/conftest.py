"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (holidays, availability, vacations, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from vacation_backend.common.clock import get_today
from vacation_backend.common.constants import VacationStatus
from vacation_backend.common.rate_limit import limiter
from vacation_backend.config import settings
from vacation_backend.database import Base, get_db
from vacation_backend.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import vacation_backend.common.audit  # noqa: F401
import vacation_backend.holidays.models  # noqa: F401
import vacation_backend.users.models  # noqa: F401
import vacation_backend.vacations.models  # noqa: F401

from vacation_backend.users.models import User
from vacation_backend.vacations.models import VacationRequest

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# "Today" as seen by the API in tests; every 2024 date is in the future
TEST_TODAY = date(2023, 12, 1)

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB and clock dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_today] = lambda: TEST_TODAY
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_user(
    *,
    role: str = "oficial",
    remaining_days: int = 25,
    name: str | None = None,
    email: str | None = None,
) -> dict:
    suffix = uuid.uuid4().hex[:8]
    return dict(
        id=uuid.uuid4(),
        email=email or f"user.{suffix}@notaria.test",
        name=name or f"User {suffix}",
        role=role,
        remaining_days=remaining_days,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


async def create_user(db: AsyncSession, **kwargs) -> User:
    """Insert and commit a user so API sessions see it."""
    user = User(**_make_user(**kwargs))
    db.add(user)
    await db.commit()
    return user


async def create_vacation(
    db: AsyncSession,
    user: User,
    start: date,
    end: date,
    *,
    status: VacationStatus = VacationStatus.pending,
    chargeable_days: int | None = None,
) -> VacationRequest:
    """Insert a request row directly, bypassing the service (no balance effect)."""
    if chargeable_days is None:
        chargeable_days = sum(
            1 for i in range((end - start).days + 1)
            if (start + timedelta(days=i)).weekday() < 5
        )
    req = VacationRequest(
        id=uuid.uuid4(),
        user_id=user.id,
        role=user.role,
        start_date=start,
        end_date=end,
        status=status,
        chargeable_days=chargeable_days,
        created_by=user.id,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(req)
    await db.commit()
    return req


async def balance_of(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Read the stored balance, bypassing the identity map."""
    result = await db.execute(select(User.remaining_days).where(User.id == user_id))
    return result.scalar_one()


@pytest.fixture
async def employee(db) -> User:
    return await create_user(db, role="copista", remaining_days=25, name="Ana Copista")


@pytest.fixture
async def admin(db) -> User:
    return await create_user(db, role="admin", remaining_days=0, name="Admin")


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    expired: bool = False,
    token_type: str = "access",
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=1)
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def auth_headers(employee) -> dict[str, str]:
    """Bearer headers for the default employee."""
    return bearer(employee)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return bearer(admin)
