"""Shared test fixtures — async DB, client, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from timeoff_ledger.common.constants import PolicyKind, TimeOffStatus, TimeOffType
from timeoff_ledger.database import Base, get_db
from timeoff_ledger.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import timeoff_ledger.common.audit  # noqa: F401
import timeoff_ledger.directory.models  # noqa: F401
import timeoff_ledger.ledger.models  # noqa: F401
import timeoff_ledger.policies.models  # noqa: F401

from timeoff_ledger.directory.models import Employee
from timeoff_ledger.ledger.schemas import TimeOffRequestCreate, TimeOffRequestOut
from timeoff_ledger.ledger.service import TimeOffLedgerService
from timeoff_ledger.policies.models import TimeOffPolicy

# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

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
    from timeoff_ledger.common.rate_limit import limiter

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
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
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

def _make_policy(
    *,
    name: str = "Standard PTO",
    kind: PolicyKind = PolicyKind.FIXED,
    annual_allowance_days: Optional[int] = 15,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        kind=kind,
        annual_allowance_days=None if kind == PolicyKind.UNLIMITED else annual_allowance_days,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_employee(
    *,
    email: Optional[str] = None,
    first_name: str = "Test",
    last_name: str = "User",
    department: Optional[str] = "Engineering",
    policy_id: Optional[uuid.UUID] = None,
    is_active: bool = True,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name}.{uuid.uuid4().hex[:6]}@example.com".lower(),
        department=department,
        title="Engineer",
        policy_id=policy_id,
        is_active=is_active,
        created_at=datetime.now(timezone.utc),
    )


async def _seed_policy(db: AsyncSession, **kwargs) -> TimeOffPolicy:
    policy = TimeOffPolicy(**_make_policy(**kwargs))
    db.add(policy)
    await db.flush()
    return policy


async def _seed_employee(db: AsyncSession, **kwargs) -> Employee:
    emp = Employee(**_make_employee(**kwargs))
    db.add(emp)
    await db.flush()
    return emp


async def _file_request(
    db: AsyncSession,
    employee_id: uuid.UUID,
    start: date,
    end: date,
    *,
    type: TimeOffType = TimeOffType.PTO,
    status: TimeOffStatus = TimeOffStatus.REQUESTED,
    actor_id: Optional[uuid.UUID] = None,
) -> TimeOffRequestOut:
    """File a request and, if *status* is terminal, move it there."""
    req = await TimeOffLedgerService.create_request(
        db,
        TimeOffRequestCreate(
            employee_id=employee_id, type=type, start_date=start, end_date=end,
        ),
    )
    if status != TimeOffStatus.REQUESTED:
        req = await TimeOffLedgerService.set_status(
            db, req.id, status, actor_id or employee_id,
        )
    return req


@pytest.fixture
async def policy(db) -> TimeOffPolicy:
    """A FIXED policy with 15 days a year."""
    return await _seed_policy(db)


@pytest.fixture
async def employee(db, policy) -> Employee:
    """An active Engineering employee on the 15-day policy."""
    return await _seed_employee(
        db, first_name="Ada", last_name="Lovelace", policy_id=policy.id,
    )


@pytest.fixture
async def manager(db, policy) -> Employee:
    return await _seed_employee(
        db, first_name="Grace", last_name="Hopper", policy_id=policy.id,
    )
