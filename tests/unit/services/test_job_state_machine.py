"""
Unit tests for JobStateMachine.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from marketplace.application.interfaces.repositories import (
    AssignmentRepositoryInterface,
    JobRepositoryInterface,
)
from marketplace.application.services.job_state_machine import JobStateMachine
from marketplace.domain.entities.assignment import JobAssignment
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    IllegalTransitionError,
    StaleStateError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.value_objects.job_status import JobEvent, JobStatus

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class TestJobStateMachine:
    """Test cases for JobStateMachine."""

    @pytest.fixture
    def job_repo(self):
        repo = AsyncMock(spec=JobRepositoryInterface)
        repo.transition_status.return_value = True
        return repo

    @pytest.fixture
    def assignment_repo(self):
        return AsyncMock(spec=AssignmentRepositoryInterface)

    @pytest.fixture
    def machine(self, job_repo, assignment_repo):
        return JobStateMachine(job_repo, assignment_repo)

    @staticmethod
    def _job(status: JobStatus, **overrides) -> Job:
        return Job(
            title="Install ceiling fan",
            job_poster_user_id=uuid4(),
            status=status,
            **overrides,
        )

    async def test_publish(self, machine, job_repo):
        """Test DRAFT -> PUBLISHED stamps posted_at."""
        # Arrange
        job = self._job(JobStatus.DRAFT)
        job_repo.get_by_id.return_value = job

        # Act
        await machine.apply(job.id, JobEvent.PUBLISH, NOW)

        # Assert
        job_repo.transition_status.assert_awaited_once_with(
            job.id, JobStatus.DRAFT, JobStatus.PUBLISHED, {"posted_at": NOW}
        )

    async def test_illegal_event(self, machine, job_repo):
        """Test that events outside the table are rejected without a write."""
        job = self._job(JobStatus.DRAFT)
        job_repo.get_by_id.return_value = job

        with pytest.raises(IllegalTransitionError):
            await machine.apply(job.id, JobEvent.FINALIZE, NOW)

        job_repo.transition_status.assert_not_awaited()

    async def test_open_for_routing_requires_escrow(self, machine, job_repo):
        """Test the escrow guard."""
        job = self._job(JobStatus.PUBLISHED)
        job_repo.get_by_id.return_value = job

        with pytest.raises(IllegalTransitionError) as exc_info:
            await machine.apply(job.id, JobEvent.OPEN_FOR_ROUTING, NOW)

        assert "escrow" in str(exc_info.value)
        job_repo.transition_status.assert_not_awaited()

    async def test_start_work_requires_assignment(self, machine, job_repo, assignment_repo):
        """Test the assignment guard."""
        job = self._job(JobStatus.ASSIGNED)
        job_repo.get_by_id.return_value = job
        assignment_repo.get_by_job_id.return_value = None

        with pytest.raises(IllegalTransitionError):
            await machine.apply(job.id, JobEvent.START_WORK, NOW)

    async def test_contractor_complete_marks_assignment(
        self, machine, job_repo, assignment_repo
    ):
        """Test that completion is mirrored on the assignment."""
        # Arrange
        job = self._job(JobStatus.IN_PROGRESS, escrow_locked_at=NOW)
        job_repo.get_by_id.return_value = job
        assignment_repo.get_by_job_id.return_value = JobAssignment(
            job_id=job.id, contractor_id=uuid4()
        )

        # Act
        await machine.apply(job.id, JobEvent.CONTRACTOR_COMPLETE, NOW)

        # Assert
        job_repo.transition_status.assert_awaited_once_with(
            job.id,
            JobStatus.IN_PROGRESS,
            JobStatus.CONTRACTOR_COMPLETED,
            {"contractor_completed_at": NOW},
        )
        assignment_repo.mark_completed.assert_awaited_once_with(job.id, NOW)

    async def test_open_dispute_records_previous_status(self, machine, job_repo):
        job = self._job(JobStatus.IN_PROGRESS, escrow_locked_at=NOW)
        job_repo.get_by_id.return_value = job

        await machine.apply(job.id, JobEvent.OPEN_DISPUTE, NOW)

        job_repo.transition_status.assert_awaited_once_with(
            job.id,
            JobStatus.IN_PROGRESS,
            JobStatus.DISPUTED,
            {"status_before_dispute": "IN_PROGRESS"},
        )

    async def test_resolve_dispute_restores_previous_status(self, machine, job_repo):
        """Test that a resolved dispute returns the job where it was."""
        job = self._job(
            JobStatus.DISPUTED,
            escrow_locked_at=NOW,
            status_before_dispute=JobStatus.CUSTOMER_REJECTED,
        )
        job_repo.get_by_id.return_value = job

        await machine.apply(job.id, JobEvent.RESOLVE_DISPUTE, NOW)

        job_repo.transition_status.assert_awaited_once_with(
            job.id,
            JobStatus.DISPUTED,
            JobStatus.CUSTOMER_REJECTED,
            {"status_before_dispute": None},
        )

    async def test_resolve_dispute_without_previous_status(self, machine, job_repo):
        job = self._job(JobStatus.DISPUTED, escrow_locked_at=NOW)
        job_repo.get_by_id.return_value = job

        with pytest.raises(IllegalTransitionError):
            await machine.apply(job.id, JobEvent.RESOLVE_DISPUTE, NOW)

    async def test_concurrent_change_is_stale(self, machine, job_repo):
        """Test that a conditional write matching no rows raises StaleStateError."""
        job = self._job(JobStatus.DRAFT)
        job_repo.get_by_id.return_value = job
        job_repo.transition_status.return_value = False

        with pytest.raises(StaleStateError):
            await machine.apply(job.id, JobEvent.PUBLISH, NOW)

    async def test_missing_job(self, machine, job_repo):
        job_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await machine.apply(uuid4(), JobEvent.PUBLISH, NOW)

    async def test_illegal_event_lists_allowed_events(self, machine, job_repo):
        job_repo.get_by_id.return_value = self._job(JobStatus.DRAFT)

        with pytest.raises(IllegalTransitionError) as exc_info:
            await machine.apply(uuid4(), JobEvent.FINALIZE, NOW)

        assert "allowed events: PUBLISH" in str(exc_info.value)

    async def test_completed_job_accepts_no_events(self, machine, job_repo):
        """Test that a completed job reports itself complete."""
        job_repo.get_by_id.return_value = self._job(
            JobStatus.COMPLETED_APPROVED, escrow_locked_at=NOW
        )

        with pytest.raises(IllegalTransitionError) as exc_info:
            await machine.apply(uuid4(), JobEvent.OPEN_DISPUTE, NOW)

        assert str(exc_info.value).endswith("job is complete")
        job_repo.transition_status.assert_not_awaited()
