"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PAYMENT_PROVIDER", "mock")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator, Optional  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402
from uuid import UUID, uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from marketplace.application.interfaces.repositories import (  # noqa: E402
    AssignmentRepositoryInterface,
    JobRepositoryInterface,
)
from marketplace.application.services.claim_lock import ClaimLock  # noqa: E402
from marketplace.application.services.dispatch_fanout_engine import (  # noqa: E402
    DispatchFanoutEngine,
)
from marketplace.application.services.escrow_payment_manager import (  # noqa: E402
    EscrowPaymentManager,
)
from marketplace.application.services.job_state_machine import (  # noqa: E402
    JobStateMachine,
)
from marketplace.application.services.sla_monitor import SlaMonitor  # noqa: E402
from marketplace.domain.entities.job import Job  # noqa: E402
from marketplace.domain.value_objects.job_status import JobStatus  # noqa: E402
from marketplace.infrastructure.database.models import Base  # noqa: E402
from marketplace.infrastructure.database.repositories import (  # noqa: E402
    AssignmentRepository,
    DispatchRepository,
    JobRepository,
    MonitoringEventRepository,
    PaymentRecordRepository,
    TransactionService,
)
from marketplace.infrastructure.providers.mock import MockPaymentProvider  # noqa: E402

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed clock for deterministic SLA and expiry tests
T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def job_repo(db_session) -> JobRepository:
    return JobRepository(db_session)


@pytest.fixture
def dispatch_repo(db_session) -> DispatchRepository:
    return DispatchRepository(db_session)


@pytest.fixture
def assignment_repo(db_session) -> AssignmentRepository:
    return AssignmentRepository(db_session)


@pytest.fixture
def event_repo(db_session) -> MonitoringEventRepository:
    return MonitoringEventRepository(db_session)


@pytest.fixture
def payment_repo(db_session) -> PaymentRecordRepository:
    return PaymentRecordRepository(db_session)


@pytest.fixture
def transaction_service(db_session) -> TransactionService:
    return TransactionService(db_session)


@pytest.fixture
def state_machine(job_repo, assignment_repo) -> JobStateMachine:
    return JobStateMachine(job_repo, assignment_repo)


@pytest.fixture
def claim_lock(job_repo) -> ClaimLock:
    return ClaimLock(job_repo)


@pytest.fixture
def fanout_engine(job_repo, dispatch_repo, assignment_repo, claim_lock) -> DispatchFanoutEngine:
    return DispatchFanoutEngine(job_repo, dispatch_repo, assignment_repo, claim_lock)


@pytest.fixture
def sla_monitor(job_repo, event_repo) -> SlaMonitor:
    return SlaMonitor(job_repo, event_repo, approaching_hours=20, window_hours=24)


@pytest.fixture
def mock_payment_provider() -> MockPaymentProvider:
    return MockPaymentProvider()


@pytest.fixture
def payment_manager(
    job_repo, payment_repo, mock_payment_provider, state_machine
) -> EscrowPaymentManager:
    return EscrowPaymentManager(
        job_repo, payment_repo, mock_payment_provider, state_machine, currency="usd"
    )


@pytest.fixture
def make_job(db_session, job_repo):
    """Persist a job in the given state and commit it."""

    async def _make_job(
        status: JobStatus = JobStatus.OPEN_FOR_ROUTING,
        posted_at: Optional[datetime] = T0,
        routing_due_at: Optional[datetime] = None,
        labor_total_cents: int = 30000,
        materials_total_cents: int = 0,
        escrow_locked: bool = True,
        job_poster_user_id: Optional[UUID] = None,
        title: str = "Replace water heater",
    ) -> Job:
        job = Job(
            title=title,
            job_poster_user_id=job_poster_user_id or uuid4(),
            status=status,
            posted_at=posted_at,
            routing_due_at=routing_due_at,
        )
        job.apply_pricing(labor_total_cents, materials_total_cents)
        created = await job_repo.create(job)
        if escrow_locked:
            await job_repo.lock_escrow(created.id, (posted_at or T0) - timedelta(minutes=5))
        await db_session.commit()
        return await job_repo.get_by_id(created.id)

    return _make_job


@pytest.fixture
def mock_job_repository():
    """Mock job repository."""
    return AsyncMock(spec=JobRepositoryInterface)


@pytest.fixture
def mock_assignment_repository():
    """Mock assignment repository."""
    return AsyncMock(spec=AssignmentRepositoryInterface)
