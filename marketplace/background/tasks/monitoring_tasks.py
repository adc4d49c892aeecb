"""
Celery tasks for routing SLA evaluation and dispatch expiry.

Both tasks are periodic sweeps scheduled by beat. Each run is safe to repeat
or overlap: monitoring events are deduplicated by the database, and expiry
only touches offers that are still pending past their deadline.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from celery import current_app
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.config.logging import get_logger

logger = get_logger(__name__)


def run_async_in_new_loop(coro):
    """
    Run an async coroutine in a new event loop.

    Each Celery task gets its own event loop, so engines and connections are
    never shared between loops.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    except Exception as e:
        logger.error("Error in async execution", error=str(e))
        raise
    finally:
        loop.close()


async def _in_task_session(operation):
    """Run ``operation`` against a throwaway engine bound to the current loop."""
    from marketplace.config.database import create_task_session_factory

    session_factory = create_task_session_factory()
    try:
        return await operation(session_factory)
    finally:
        await session_factory.kw["bind"].dispose()


async def evaluate_sla(
    session_factory: async_sessionmaker[AsyncSession],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Run one SLA evaluation pass in its own session."""
    from marketplace.application.services.sla_monitor import SlaMonitor
    from marketplace.application.use_cases.sla_monitoring import (
        RunSlaEvaluationUseCase,
    )
    from marketplace.infrastructure.database.repositories import (
        JobRepository,
        MonitoringEventRepository,
        TransactionService,
    )

    async with session_factory() as session:
        monitor = SlaMonitor(JobRepository(session), MonitoringEventRepository(session))
        use_case = RunSlaEvaluationUseCase(monitor, TransactionService(session))
        result = await use_case.execute(now)

    return {
        "evaluated_at": result.evaluated_at.isoformat(),
        "candidates": result.candidates,
        "emitted": {event_type.value: count for event_type, count in result.counts.items()},
        "total_emitted": result.total_emitted,
    }


async def expire_dispatches(
    session_factory: async_sessionmaker[AsyncSession],
    now: Optional[datetime] = None,
) -> int:
    """Expire pending offers past their deadline in its own session."""
    from marketplace.application.services.dispatch_fanout_engine import (
        DispatchFanoutEngine,
    )
    from marketplace.application.use_cases.respond_to_dispatch import (
        ExpireStaleDispatchesUseCase,
    )
    from marketplace.infrastructure.database.repositories import (
        AssignmentRepository,
        DispatchRepository,
        JobRepository,
        TransactionService,
    )

    async with session_factory() as session:
        engine = DispatchFanoutEngine(
            JobRepository(session),
            DispatchRepository(session),
            AssignmentRepository(session),
        )
        use_case = ExpireStaleDispatchesUseCase(engine, TransactionService(session))
        return await use_case.execute(now or datetime.now(timezone.utc))


@current_app.task(bind=True, max_retries=3, name="run_sla_evaluation_task")
def run_sla_evaluation_task(self):
    """Write approaching, overdue, routed and completed monitoring events."""
    from marketplace.infrastructure.monitoring.metrics import record_worker_task

    logger.info("Starting SLA evaluation task", attempt=self.request.retries + 1)
    try:
        summary = run_async_in_new_loop(_in_task_session(evaluate_sla))
    except Exception as e:
        record_worker_task("sla_evaluation", "failed")
        logger.error("SLA evaluation task failed", error=str(e))
        raise self.retry(exc=e, countdown=30)

    record_worker_task("sla_evaluation", "success")
    logger.info("SLA evaluation task completed", **summary)
    return summary


@current_app.task(bind=True, max_retries=3, name="expire_stale_dispatches_task")
def expire_stale_dispatches_task(self):
    """Mark pending offers past their deadline as EXPIRED."""
    from marketplace.infrastructure.monitoring.metrics import record_worker_task

    logger.info("Starting dispatch expiry task", attempt=self.request.retries + 1)
    try:
        expired = run_async_in_new_loop(_in_task_session(expire_dispatches))
    except Exception as e:
        record_worker_task("dispatch_expiry", "failed")
        logger.error("Dispatch expiry task failed", error=str(e))
        raise self.retry(exc=e, countdown=30)

    record_worker_task("dispatch_expiry", "success")
    logger.info("Dispatch expiry task completed", expired=expired)
    return {"expired": expired}
