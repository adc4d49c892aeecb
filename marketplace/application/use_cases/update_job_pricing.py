"""Update job pricing use case."""

from dataclasses import dataclass
from uuid import UUID

from marketplace.application.interfaces.repositories import JobRepositoryInterface
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import AlreadyFundedError
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.payout_breakdown import (
    calculate_payout_breakdown,
)
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


@dataclass
class UpdateJobPricingRequest:
    job_id: UUID
    labor_total_cents: int
    materials_total_cents: int = 0


class UpdateJobPricingUseCase:
    """Recompute a job's money columns; refused once escrow is locked."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.job_repo = job_repo
        self.transaction_service = transaction_service

    async def execute(self, request: UpdateJobPricingRequest) -> Job:
        try:
            breakdown = calculate_payout_breakdown(
                request.labor_total_cents, request.materials_total_cents
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(str(e))

        async def _update() -> Job:
            job = await self.job_repo.get_by_id(request.job_id)
            if job is None:
                raise NotFoundError("Job", request.job_id)
            if job.is_escrow_locked:
                raise AlreadyFundedError(request.job_id)

            updated = await self.job_repo.update_pricing(request.job_id, breakdown)
            if updated is None:
                raise AlreadyFundedError(request.job_id)
            return updated

        return await self.transaction_service.execute_in_transaction(_update)
