"""Pytest fixtures for PayLevel tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from paylevel.api.app import create_app
from paylevel.database import create_tables, make_session_factory
from paylevel.models import AppState, Job, ShiftTemplate, UserSettings, WorkLog
from paylevel.services import StateStore, dump_state

# Shared in-memory SQLite; StaticPool keeps one connection so the schema survives
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# June 2024: the 15th is a Saturday, the 11th a Tuesday
SATURDAY = date(2024, 6, 15)
SUNDAY = date(2024, 6, 16)
TUESDAY = date(2024, 6, 11)
FRIDAY = date(2024, 6, 14)


def make_log(
    job_id: str | None,
    day: date,
    hours: str | Decimal,
    log_id: str | None = None,
    notes: str = "",
) -> WorkLog:
    """Build a log with a direct duration."""
    return WorkLog(
        id=log_id or f"log-{job_id}-{day.isoformat()}-{hours}",
        job_id=job_id,
        date=day,
        duration=Decimal(hours),
        notes=notes,
        timestamp=1718000000000,
    )


@pytest.fixture
def swim_job() -> Job:
    """Weekday 60, weekend 70, promotion at 100 hours to 80/90."""
    return Job(
        id="job-swim",
        name="State Swim",
        color="#4F46E5",
        hourly_rate=Decimal("60"),
        weekend_hourly_rate=Decimal("70"),
        target_hours=Decimal("100"),
        next_hourly_rate=Decimal("80"),
        next_weekend_hourly_rate=Decimal("90"),
    )


@pytest.fixture
def cafe_job() -> Job:
    """Flat 50 on all days."""
    return Job(
        id="job-cafe",
        name="Cafe",
        color="#DB2777",
        hourly_rate=Decimal("50"),
        weekend_hourly_rate=Decimal("50"),
        target_hours=Decimal("0"),
        next_hourly_rate=Decimal("50"),
        next_weekend_hourly_rate=Decimal("50"),
    )


@pytest.fixture
def sample_logs(swim_job: Job, cafe_job: Job) -> tuple[WorkLog, ...]:
    """Saturday 5h + Tuesday 5h at the pool, one cafe shift, one dangling log."""
    return (
        make_log(swim_job.id, SATURDAY, "5", log_id="sat"),
        make_log(swim_job.id, TUESDAY, "5", log_id="tue"),
        make_log(cafe_job.id, FRIDAY, "4", log_id="cafe"),
        make_log("job-deleted", FRIDAY, "3", log_id="ghost"),
    )


@pytest.fixture
def sample_state(swim_job: Job, cafe_job: Job, sample_logs) -> AppState:
    return AppState(
        jobs=(swim_job, cafe_job),
        logs=sample_logs,
        templates=(
            ShiftTemplate(
                id="tpl-morning",
                name="Morning squad",
                job_id=swim_job.id,
                start_time="06:00",
                end_time="08:30",
                notes="squad",
            ),
        ),
        settings=UserSettings(tax_rate=Decimal("10")),
    )


@pytest_asyncio.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory) -> StateStore:
    return StateStore(session_factory, state_key="test")


@pytest_asyncio.fixture
async def seeded_store(store: StateStore, sample_state: AppState) -> StateStore:
    """Store holding the sample state."""
    await store.save(sample_state)
    return store


@pytest_asyncio.fixture
async def client(seeded_store: StateStore) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app serving the sample state."""
    app = create_app(store=seeded_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sample_blob(sample_state: AppState) -> dict:
    """Sample state as a persisted v2 blob."""
    return dump_state(sample_state)
