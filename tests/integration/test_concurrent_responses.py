"""
Integration tests for concurrent writers.

Each worker gets its own session on a file-backed database, so the
single-winner guarantees are exercised across real transactions instead of
one shared session.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from marketplace.application.services.claim_lock import ClaimLock
from marketplace.application.services.dispatch_fanout_engine import DispatchFanoutEngine
from marketplace.application.services.escrow_payment_manager import (
    EscrowPaymentManager,
)
from marketplace.application.services.job_state_machine import JobStateMachine
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    AlreadyAssignedError,
    ConflictError,
)
from marketplace.domain.value_objects.dispatch_status import (
    DispatchDecision,
    DispatchStatus,
)
from marketplace.domain.value_objects.job_status import JobStatus
from marketplace.infrastructure.database.models import Base
from marketplace.infrastructure.database.models.dispatch import DispatchModel
from marketplace.infrastructure.database.models.payment_record import (
    PaymentRecordModel,
)
from marketplace.infrastructure.database.repositories import (
    AssignmentRepository,
    DispatchRepository,
    JobRepository,
    PaymentRecordRepository,
)
from marketplace.infrastructure.providers.mock import MockPaymentProvider

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed database where every transaction takes the write lock up front."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def factory(file_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)


def _fanout_engine(session: AsyncSession) -> DispatchFanoutEngine:
    job_repo = JobRepository(session)
    return DispatchFanoutEngine(
        job_repo,
        DispatchRepository(session),
        AssignmentRepository(session),
        ClaimLock(job_repo),
    )


def _payment_manager(session: AsyncSession, provider: MockPaymentProvider) -> EscrowPaymentManager:
    job_repo = JobRepository(session)
    return EscrowPaymentManager(
        job_repo,
        PaymentRecordRepository(session),
        provider,
        JobStateMachine(job_repo, AssignmentRepository(session)),
        currency="usd",
    )


async def _create_job(factory, status: JobStatus, escrow_locked: bool) -> Job:
    async with factory() as session:
        job_repo = JobRepository(session)
        job = Job(
            title="Rewire panel",
            job_poster_user_id=uuid4(),
            status=status,
            posted_at=T0,
        )
        job.apply_pricing(30000, 0)
        created = await job_repo.create(job)
        if escrow_locked:
            await job_repo.lock_escrow(created.id, T0 - timedelta(minutes=5))
        await session.commit()
        return created


class TestConcurrentAccepts:
    """Test that racing accepts on sibling offers produce one assignment."""

    async def test_only_one_accept_wins(self, factory):
        # Arrange
        job = await _create_job(factory, JobStatus.OPEN_FOR_ROUTING, escrow_locked=True)
        contractors = [uuid4() for _ in range(5)]
        async with factory() as session:
            result = await _fanout_engine(session).apply_routing(uuid4(), job.id, contractors, T0)
            await session.commit()
        tokens = [issued.token for issued in result.issued]
        now = T0 + timedelta(minutes=10)

        async def accept(token: str):
            async with factory() as session:
                try:
                    outcome = await _fanout_engine(session).respond(
                        token, DispatchDecision.ACCEPT, now=now
                    )
                    await session.commit()
                    return outcome
                except ConflictError as e:
                    await session.rollback()
                    return e

        # Act
        outcomes = await asyncio.gather(*(accept(token) for token in tokens))

        # Assert
        winners = [o for o in outcomes if not isinstance(o, Exception)]
        losers = [o for o in outcomes if isinstance(o, Exception)]
        assert len(winners) == 1
        assert len(losers) == len(tokens) - 1
        assert all(isinstance(loser, AlreadyAssignedError) for loser in losers)

        async with factory() as session:
            accepted = await session.execute(
                select(func.count(DispatchModel.id)).where(
                    DispatchModel.job_id == job.id,
                    DispatchModel.status == DispatchStatus.ACCEPTED.value,
                )
            )
            assert accepted.scalar_one() == 1

            stored = await JobRepository(session).get_by_id(job.id)
            assert stored.status == JobStatus.ASSIGNED
            assert stored.contractor_user_id == winners[0].dispatch.contractor_id


class TestConcurrentPaymentIntents:
    """Test that racing intent requests converge on one intent."""

    async def test_same_amount_shares_intent(self, factory):
        job = await _create_job(factory, JobStatus.PUBLISHED, escrow_locked=False)
        provider = MockPaymentProvider()

        async def create():
            async with factory() as session:
                outcome = await _payment_manager(session, provider).create_payment_intent(job.id)
                await session.commit()
                return outcome

        first, second = await asyncio.gather(create(), create())

        assert first.provider_intent_id == second.provider_intent_id
        assert len(provider.intents) == 1
        async with factory() as session:
            records = await session.execute(
                select(func.count(PaymentRecordModel.id)).where(
                    PaymentRecordModel.job_id == job.id
                )
            )
            assert records.scalar_one() == 1
