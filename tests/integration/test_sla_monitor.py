"""
Integration tests for the routing SLA monitor.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from marketplace.domain.entities.monitoring_event import MonitoringEvent
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.job_status import JobStatus
from marketplace.domain.value_objects.monitoring import (
    MonitoringEventType,
    MonitoringRole,
)
from marketplace.infrastructure.database.repositories import MonitoringEventRepository

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

APPROACHING = MonitoringEventType.JOB_APPROACHING_24H
OVERDUE = MonitoringEventType.JOB_OVERDUE_UNROUTED


class TestSlaMonitor:
    """Test SLA evaluation against a real database."""

    async def test_deadline_events_emitted_once(self, make_job, sla_monitor):
        """Approaching at 20h, overdue at 24h, nothing new on a third run."""
        # Arrange
        await make_job(posted_at=T0)

        # Act / Assert: before the warning mark
        early = await sla_monitor.evaluate(T0 + timedelta(hours=19))
        assert early.total_emitted == 0

        approaching = await sla_monitor.evaluate(T0 + timedelta(hours=20, minutes=1))
        assert approaching.counts[APPROACHING] == 1
        assert approaching.total_emitted == 1

        overdue = await sla_monitor.evaluate(T0 + timedelta(hours=24, minutes=1))
        assert overdue.counts[OVERDUE] == 1
        assert overdue.counts[APPROACHING] == 0
        assert overdue.total_emitted == 1

        again = await sla_monitor.evaluate(T0 + timedelta(hours=24, minutes=2))
        assert again.total_emitted == 0

    async def test_rerun_at_same_instant_is_noop(self, make_job, sla_monitor, event_repo):
        """Test that repeated evaluation never duplicates events."""
        await make_job(posted_at=T0)
        now = T0 + timedelta(hours=21)

        first = await sla_monitor.evaluate(now)
        second = await sla_monitor.evaluate(now)

        assert first.total_emitted == 1
        assert second.candidates == 1
        assert second.total_emitted == 0
        events, _ = await event_repo.list_events(limit=10)
        assert len(events) == 1

    async def test_explicit_deadline(self, make_job, sla_monitor):
        """Test that routing_due_at overrides the default window."""
        await make_job(posted_at=T0, routing_due_at=T0 + timedelta(hours=6))

        result = await sla_monitor.evaluate(T0 + timedelta(hours=6, minutes=1))

        assert result.counts[OVERDUE] == 1

    async def test_routed_job_gets_no_deadline_events(
        self, make_job, sla_monitor, fanout_engine
    ):
        job = await make_job(posted_at=T0)
        await fanout_engine.apply_routing(uuid4(), job.id, [uuid4()], T0 + timedelta(hours=1))

        result = await sla_monitor.evaluate(T0 + timedelta(hours=30))

        assert result.counts[APPROACHING] == 0
        assert result.counts[OVERDUE] == 0

    async def test_routed_event_attributed_to_admin(
        self, make_job, sla_monitor, job_repo, event_repo
    ):
        """Test JOB_ROUTED for an admin-routed job."""
        # Arrange
        admin_id = uuid4()
        job = await make_job(posted_at=T0)
        await job_repo.admin_route(job.id, admin_id, T0 + timedelta(hours=2))

        # Act
        result = await sla_monitor.evaluate(T0 + timedelta(hours=3))

        # Assert
        assert result.counts[MonitoringEventType.JOB_ROUTED] == 1
        events, _ = await event_repo.list_events(
            limit=10, event_type=MonitoringEventType.JOB_ROUTED
        )
        assert events[0].event.role == MonitoringRole.ADMIN
        assert events[0].event.user_id == admin_id
        assert events[0].job.job_id == job.id

    async def test_routed_event_attributed_to_router(
        self, make_job, sla_monitor, fanout_engine, event_repo
    ):
        """Test JOB_ROUTED once a router's offer is accepted."""
        router_id = uuid4()
        job = await make_job(posted_at=T0)
        result = await fanout_engine.apply_routing(router_id, job.id, [uuid4()], T0)
        await fanout_engine.respond(
            result.issued[0].token, "ACCEPT", now=T0 + timedelta(hours=1)
        )

        evaluation = await sla_monitor.evaluate(T0 + timedelta(hours=2))

        assert evaluation.counts[MonitoringEventType.JOB_ROUTED] == 1
        events, _ = await event_repo.list_events(limit=10, job_id=job.id)
        assert events[0].event.role == MonitoringRole.ROUTER
        assert events[0].event.user_id == router_id

    async def test_completed_event_attributed_to_poster(self, make_job, sla_monitor):
        poster_id = uuid4()
        await make_job(
            status=JobStatus.COMPLETED_APPROVED, job_poster_user_id=poster_id
        )

        first = await sla_monitor.evaluate(T0 + timedelta(days=2))
        second = await sla_monitor.evaluate(T0 + timedelta(days=3))

        assert first.counts[MonitoringEventType.JOB_COMPLETED] == 1
        assert second.counts[MonitoringEventType.JOB_COMPLETED] == 0

    async def test_unposted_and_archived_jobs_ignored(self, make_job, sla_monitor, job_repo):
        await make_job(status=JobStatus.DRAFT, posted_at=None)
        archived = await make_job(posted_at=T0)
        await job_repo.archive(archived.id)

        result = await sla_monitor.evaluate(T0 + timedelta(hours=30))

        assert result.total_emitted == 0


class TestMonitoringEventQueries:
    """Test event listing and acknowledgement."""

    async def test_pagination_newest_first(self, make_job, sla_monitor, event_repo):
        """Test cursor pagination across evaluation passes."""
        # Arrange: three jobs emit APPROACHING at three different times
        for hours in (0, 1, 2):
            await make_job(posted_at=T0 + timedelta(hours=hours))
        for hours in (20, 21, 22):
            await sla_monitor.evaluate(T0 + timedelta(hours=hours, minutes=30))

        # Act
        first_page, cursor = await event_repo.list_events(limit=2)
        second_page, last_cursor = await event_repo.list_events(limit=2, cursor=cursor)

        # Assert
        assert len(first_page) == 2
        assert cursor is not None
        assert len(second_page) == 1
        assert last_cursor is None
        created = [view.event.created_at for view in first_page + second_page]
        assert created == sorted(created, reverse=True)

    async def test_mark_handled(self, make_job, sla_monitor, event_repo):
        await make_job(posted_at=T0)
        await sla_monitor.evaluate(T0 + timedelta(hours=21))
        events, _ = await event_repo.list_events(limit=10)
        event_id = events[0].event.id
        handled_at = T0 + timedelta(hours=22)

        assert await event_repo.mark_handled(event_id, handled_at) is True
        assert await event_repo.mark_handled(event_id, handled_at + timedelta(hours=1)) is False

        event = await event_repo.get_by_id(event_id)
        assert event.handled_at == handled_at
        unhandled, _ = await event_repo.list_events(limit=10, unhandled_only=True)
        assert unhandled == []

    async def test_unknown_cursor_rejected(self, make_job, sla_monitor, event_repo):
        """Test that a cursor naming no event is refused instead of restarting the listing."""
        await make_job(posted_at=T0)
        await sla_monitor.evaluate(T0 + timedelta(hours=21))

        with pytest.raises(ValidationError):
            await event_repo.list_events(limit=10, cursor=uuid4())

    async def test_insert_spans_batches(self, make_job, db_session):
        """Test that inserts split across statements still skip duplicates."""
        # Arrange
        repo = MonitoringEventRepository(db_session, batch_size=2)
        jobs = [await make_job(posted_at=T0) for _ in range(3)]
        already = MonitoringEvent(
            job_id=jobs[2].id, type=OVERDUE, role=MonitoringRole.ADMIN, created_at=T0
        )
        await repo.insert_ignoring_duplicates([already])
        batch = [
            MonitoringEvent(
                job_id=job.id, type=event_type, role=MonitoringRole.ADMIN, created_at=T0
            )
            for job in jobs
            for event_type in (APPROACHING, OVERDUE)
        ]
        # Same (job_id, type) as an earlier row in another batch
        batch.append(
            MonitoringEvent(
                job_id=jobs[0].id, type=APPROACHING, role=MonitoringRole.ADMIN, created_at=T0
            )
        )

        # Act
        inserted = await repo.insert_ignoring_duplicates(batch)

        # Assert
        assert len(inserted) == 5
        assert {event.id for event in inserted} == {event.id for event in batch[:5]}
        events, _ = await repo.list_events(limit=50)
        assert len(events) == 6
