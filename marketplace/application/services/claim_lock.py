"""
Router claim lock: one claimed-but-unrouted job per router.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import JobRepositoryInterface
from marketplace.config.logging import get_logger
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    AlreadyClaimedError,
    NotEligibleError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.value_objects.job_status import RoutingStatus
from marketplace.infrastructure.monitoring.metrics import record_claim_attempt

logger = get_logger(__name__)


class ClaimLock:
    """Grants and releases router claims.

    The claim itself is a single conditional write. When it matches no rows
    the job is re-read only to explain the rejection.
    """

    def __init__(self, job_repo: JobRepositoryInterface):
        self.job_repo = job_repo

    async def claim(
        self, job_id: UUID, router_id: UUID, now: Optional[datetime] = None
    ) -> Job:
        """Claim a job for a router."""
        now = now or datetime.now(timezone.utc)

        try:
            claimed = await self.job_repo.claim(job_id, router_id, now)
        except NotEligibleError:
            record_claim_attempt("not_eligible")
            raise

        job = await self.job_repo.get_by_id(job_id, include_archived=True)
        if job is None:
            record_claim_attempt("not_found")
            raise NotFoundError("Job", job_id)

        if claimed:
            record_claim_attempt("claimed")
            logger.info("Job claimed", job_id=str(job_id), router_id=str(router_id))
            return job

        if job.claimed_by_user_id == router_id and job.is_open_for_claim():
            record_claim_attempt("already_held")
            return job

        reason = job.not_eligible_reason()
        if reason:
            record_claim_attempt("not_eligible")
            raise NotEligibleError(job_id, reason)

        if job.claimed_by_user_id is not None:
            record_claim_attempt("already_claimed")
            raise AlreadyClaimedError(job_id)

        record_claim_attempt("not_eligible")
        raise NotEligibleError(job_id, "router already holds an unrouted job")

    async def release(self, job_id: UUID, router_id: UUID) -> Job:
        """Return a claimed, not yet fanned-out job to the pool."""
        released = await self.job_repo.release_claim(job_id, router_id)

        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)

        if not released:
            if job.claimed_by_user_id != router_id:
                raise NotEligibleError(job_id, "job is not claimed by this router")
            if job.routing_status != RoutingStatus.UNROUTED:
                raise NotEligibleError(job_id, "job has already been routed")
            raise NotEligibleError(job_id, "claim could not be released")

        logger.info("Job claim released", job_id=str(job_id), router_id=str(router_id))
        return job

    async def active_claim_count(self, router_id: UUID) -> int:
        """Derived count of the router's claimed-but-unrouted jobs."""
        return await self.job_repo.count_unrouted_claims(router_id)
