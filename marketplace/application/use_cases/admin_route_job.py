"""Admin routing use cases."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import JobRepositoryInterface
from marketplace.application.services.dispatch_fanout_engine import (
    DispatchFanoutEngine,
    FanoutResult,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    AlreadyClaimedError,
    NotEligibleError,
    StaleStateError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)

logger = get_logger(__name__)


@dataclass
class AdminRouteRequest:
    admin_id: UUID
    job_id: UUID
    contractor_ids: List[UUID]


class AdminRouteJobUseCase:
    """Failsafe: an admin takes over routing of a job nobody claimed."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        fanout_engine: DispatchFanoutEngine,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.fanout_engine = fanout_engine
        self.transaction_service = transaction_service

    async def execute(
        self, request: AdminRouteRequest, now: Optional[datetime] = None
    ) -> FanoutResult:
        now = now or datetime.now(timezone.utc)
        contractor_ids = self.fanout_engine.normalize_contractor_ids(
            request.contractor_ids
        )

        async def _route() -> FanoutResult:
            routed = await self.job_repo.admin_route(request.job_id, request.admin_id, now)
            if not routed:
                await self._explain_rejection(request.job_id)

            logger.info(
                "Job routed by admin",
                job_id=str(request.job_id),
                admin_id=str(request.admin_id),
            )
            return await self.fanout_engine.fan_out_as_admin(
                request.admin_id, request.job_id, contractor_ids, now
            )

        return await self.transaction_service.execute_in_transaction(_route)

    async def _explain_rejection(self, job_id: UUID) -> None:
        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        reason = job.not_eligible_reason()
        if reason:
            raise NotEligibleError(job_id, reason)
        if job.claimed_by_user_id is not None:
            raise AlreadyClaimedError(job_id)
        raise StaleStateError("Job", job_id)


class ArchiveJobUseCase:
    """Soft delete a job."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service

    async def execute(self, job_id: UUID) -> Job:
        async def _archive() -> Job:
            await self.job_repo.archive(job_id)
            job = await self.job_repo.get_by_id(job_id, include_archived=True)
            if job is None:
                raise NotFoundError("Job", job_id)
            return job

        return await self.transaction_service.execute_in_transaction(_archive)
