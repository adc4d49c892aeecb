"""Job lifecycle and escrow endpoints for job posters."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from marketplace.api.dependencies import (
    CurrentUserDep,
    JobRepositoryDep,
    get_create_job_use_case,
    get_create_payment_intent_use_case,
    get_payment_status_use_case,
    get_transition_job_use_case,
    get_update_pricing_use_case,
)
from marketplace.api.schemas.job import (
    JobCreateRequest,
    JobResponse,
    PricingUpdateRequest,
    TransitionRequest,
)
from marketplace.api.schemas.payment import (
    PaymentIntentResponse,
    PaymentStatusResponse,
)
from marketplace.application.use_cases import (
    CreateJobRequest,
    CreateJobUseCase,
    CreatePaymentIntentUseCase,
    GetPaymentStatusUseCase,
    TransitionJobUseCase,
    UpdateJobPricingRequest,
    UpdateJobPricingUseCase,
)
from marketplace.config.logging import get_logger
from marketplace.domain.exceptions import NotFoundError

logger = get_logger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    job_data: JobCreateRequest,
    user_id: CurrentUserDep,
    use_case: CreateJobUseCase = Depends(get_create_job_use_case),
):
    """Create a DRAFT job owned by the caller."""
    job = await use_case.execute(
        CreateJobRequest(
            title=job_data.title,
            job_poster_user_id=user_id,
            labor_total_cents=job_data.labor_total_cents,
            materials_total_cents=job_data.materials_total_cents,
            scope=job_data.scope,
            routing_due_at=job_data.routing_due_at,
        )
    )
    return JobResponse.from_entity(job)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: UUID, job_repository: JobRepositoryDep):
    """Get a single non-archived job."""
    job = await job_repository.get_by_id(job_id)
    if job is None:
        raise NotFoundError("Job", job_id)
    return JobResponse.from_entity(job)


@router.patch("/{job_id}/pricing", response_model=JobResponse)
async def update_pricing(
    job_id: UUID,
    pricing: PricingUpdateRequest,
    use_case: UpdateJobPricingUseCase = Depends(get_update_pricing_use_case),
):
    """Change labor and materials; refused once escrow is locked."""
    job = await use_case.execute(
        UpdateJobPricingRequest(
            job_id=job_id,
            labor_total_cents=pricing.labor_total_cents,
            materials_total_cents=pricing.materials_total_cents,
        )
    )
    return JobResponse.from_entity(job)


@router.post("/{job_id}/transitions", response_model=JobResponse)
async def transition_job(
    job_id: UUID,
    transition: TransitionRequest,
    user_id: CurrentUserDep,
    use_case: TransitionJobUseCase = Depends(get_transition_job_use_case),
):
    """Apply one lifecycle event to the job."""
    job = await use_case.execute(job_id, transition.event)
    logger.info(
        "Job transition requested",
        job_id=str(job_id),
        event=transition.event.value,
        actor_id=str(user_id),
        status=job.status.value,
    )
    return JobResponse.from_entity(job)


@router.post(
    "/{job_id}/payment-intent",
    response_model=PaymentIntentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_payment_intent(
    job_id: UUID,
    use_case: CreatePaymentIntentUseCase = Depends(get_create_payment_intent_use_case),
):
    """Create the escrow intent, or reuse it while the amount is unchanged."""
    result = await use_case.execute(job_id)
    return PaymentIntentResponse.from_result(result)


@router.get("/{job_id}/payment", response_model=PaymentStatusResponse)
async def get_payment_status(
    job_id: UUID,
    use_case: GetPaymentStatusUseCase = Depends(get_payment_status_use_case),
):
    """Escrow status for a job; UNPAID when no intent exists yet."""
    view = await use_case.execute(job_id)
    return PaymentStatusResponse.from_view(view)
