"""
Tests for the periodic monitoring tasks.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

from marketplace.background.celery_app import celery_app
from marketplace.background.tasks.monitoring_tasks import (
    evaluate_sla,
    expire_dispatches,
    run_sla_evaluation_task,
)
from marketplace.domain.value_objects.monitoring import MonitoringEventType

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class TestEvaluateSla:
    """Test the SLA sweep body."""

    async def test_summary_and_commit(self, make_job, session_factory, event_repo):
        """Test that the sweep commits its events and reports counts."""
        # Arrange
        await make_job(posted_at=T0)

        # Act
        summary = await evaluate_sla(session_factory, T0 + timedelta(hours=20, minutes=1))
        repeat = await evaluate_sla(session_factory, T0 + timedelta(hours=20, minutes=2))

        # Assert
        assert summary["emitted"][MonitoringEventType.JOB_APPROACHING_24H.value] == 1
        assert summary["total_emitted"] == 1
        assert summary["evaluated_at"] == (T0 + timedelta(hours=20, minutes=1)).isoformat()
        assert repeat["total_emitted"] == 0

        events, _ = await event_repo.list_events(limit=10)
        assert len(events) == 1


class TestExpireDispatches:
    """Test the dispatch expiry sweep body."""

    async def test_expires_only_past_deadline(
        self, make_job, fanout_engine, db_session, session_factory
    ):
        job = await make_job()
        await fanout_engine.apply_routing(uuid4(), job.id, [uuid4(), uuid4()], T0)
        await db_session.commit()

        assert await expire_dispatches(session_factory, T0 + timedelta(hours=1)) == 0
        assert await expire_dispatches(session_factory, T0 + timedelta(hours=24)) == 2
        assert await expire_dispatches(session_factory, T0 + timedelta(hours=25)) == 0


class TestCeleryConfiguration:
    """Test task registration and the beat schedule."""

    def test_beat_schedule(self):
        schedule = celery_app.conf.beat_schedule

        assert schedule["run-sla-evaluation"]["task"] == "run_sla_evaluation_task"
        assert schedule["expire-stale-dispatches"]["task"] == "expire_stale_dispatches_task"

    def test_task_runs_sweep(self):
        """Test that the task wraps the sweep and returns its summary."""
        summary = {"evaluated_at": T0.isoformat(), "candidates": 0, "emitted": {}, "total_emitted": 0}

        with patch(
            "marketplace.background.tasks.monitoring_tasks.run_async_in_new_loop",
            return_value=summary,
        ) as runner:
            result = run_sla_evaluation_task.apply().get()

        assert result == summary
        runner.assert_called_once()
        runner.call_args.args[0].close()
