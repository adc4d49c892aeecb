"""Create job use case."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import JobRepositoryInterface
from marketplace.config.logging import get_logger
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.validation_error import (
    RequiredFieldError,
    ValidationError,
)
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)

logger = get_logger(__name__)


@dataclass
class CreateJobRequest:
    """Request for creating a draft job."""

    title: str
    job_poster_user_id: UUID
    labor_total_cents: int = 0
    materials_total_cents: int = 0
    scope: Optional[str] = None
    routing_due_at: Optional[datetime] = None


class CreateJobUseCase:
    """Use case for creating a job in DRAFT with its payout breakdown."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service

    async def execute(self, request: CreateJobRequest) -> Job:
        if not request.title or not request.title.strip():
            raise RequiredFieldError("title")
        if request.job_poster_user_id is None:
            raise RequiredFieldError("job_poster_user_id")

        try:
            job = Job(
                title=request.title.strip(),
                scope=request.scope,
                job_poster_user_id=request.job_poster_user_id,
                routing_due_at=request.routing_due_at,
            )
            job.apply_pricing(request.labor_total_cents, request.materials_total_cents)
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e))

        async def _create() -> Job:
            return await self.job_repo.create(job)

        created = await self.transaction_service.execute_in_transaction(_create)
        logger.info(
            "Draft job created",
            job_id=str(created.id),
            job_poster_user_id=str(created.job_poster_user_id),
            total_cents=created.total_cents,
        )
        return created
