"""
Job lifecycle state machine.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import (
    AssignmentRepositoryInterface,
    JobRepositoryInterface,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    IllegalTransitionError,
    StaleStateError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.value_objects.job_status import JobEvent, JobStatus
from marketplace.domain.value_objects.job_transition import (
    TransitionRule,
    allowed_events,
    find_transition,
)

logger = get_logger(__name__)


class JobStateMachine:
    """Validates lifecycle events against the transition table and applies them.

    Each transition is one conditional write keyed on the status that was
    read, so a concurrent change surfaces as ``StaleStateError`` instead of
    a silent overwrite.
    """

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        assignment_repo: AssignmentRepositoryInterface,
    ):
        self.job_repo = job_repo
        self.assignment_repo = assignment_repo

    async def apply(
        self, job_id: UUID, event: JobEvent, now: Optional[datetime] = None
    ) -> Job:
        """Apply a lifecycle event to a job."""
        now = now or datetime.now(timezone.utc)
        event = JobEvent(event)

        job = await self.job_repo.get_by_id(job_id)
        if not job:
            raise NotFoundError("Job", job_id)

        rule = find_transition(job.status, event)
        if rule is None:
            raise IllegalTransitionError(
                job.status.value, event.value, self._rejection_reason(job.status)
            )

        await self._check_guards(job, event, rule)

        to_status = rule.to_status or job.status_before_dispute
        if to_status is None:
            raise IllegalTransitionError(
                job.status.value, event.value, "no pre-dispute status recorded"
            )

        updated = await self.job_repo.transition_status(
            job.id, job.status, to_status, self._side_effects(job, event, now)
        )
        if not updated:
            raise StaleStateError("Job", job.id)

        if event == JobEvent.CONTRACTOR_COMPLETE:
            await self.assignment_repo.mark_completed(job.id, now)

        logger.info(
            "Job transitioned",
            job_id=str(job.id),
            event=event.value,
            from_status=job.status.value,
            to_status=JobStatus(to_status).value,
        )
        return await self.job_repo.get_by_id(job.id)

    async def _check_guards(self, job: Job, event: JobEvent, rule: TransitionRule) -> None:
        if rule.requires_escrow and not job.is_escrow_locked:
            raise IllegalTransitionError(
                job.status.value, event.value, "escrow is not locked"
            )
        if rule.requires_assignment:
            assignment = await self.assignment_repo.get_by_job_id(job.id)
            if assignment is None:
                raise IllegalTransitionError(
                    job.status.value, event.value, "job has no assignment"
                )

    @staticmethod
    def _rejection_reason(status: JobStatus) -> str:
        if status.is_terminal():
            return "job is complete"
        events = ", ".join(event.value for event in allowed_events(status))
        return f"allowed events: {events}"

    @staticmethod
    def _side_effects(job: Job, event: JobEvent, now: datetime) -> Dict[str, Any]:
        if event in (JobEvent.PUBLISH, JobEvent.OPEN_FOR_ROUTING):
            return {"posted_at": job.posted_at or now}
        if event == JobEvent.CONTRACTOR_COMPLETE:
            return {"contractor_completed_at": now}
        if event == JobEvent.CUSTOMER_APPROVE:
            return {"customer_approved_at": now}
        if event == JobEvent.ROUTER_APPROVE:
            return {"router_approved_at": now}
        if event == JobEvent.OPEN_DISPUTE:
            return {"status_before_dispute": job.status.value}
        if event == JobEvent.RESOLVE_DISPUTE:
            return {"status_before_dispute": None}
        return {}
