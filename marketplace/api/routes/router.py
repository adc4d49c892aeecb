"""Router endpoints: claiming jobs and fanning them out to contractors."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from marketplace.api.dependencies import (
    ClaimLockDep,
    CurrentUserDep,
    get_apply_routing_use_case,
    get_claim_job_use_case,
    get_release_claim_use_case,
)
from marketplace.api.schemas.dispatch import (
    ActiveClaimsResponse,
    ApplyRoutingRequest,
    FanoutResponse,
)
from marketplace.api.schemas.job import JobResponse
from marketplace.application.use_cases import (
    ApplyRoutingUseCase,
    ClaimJobUseCase,
    ReleaseClaimUseCase,
)
from marketplace.application.use_cases import (
    ApplyRoutingRequest as ApplyRoutingCommand,
)
from marketplace.config.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/router", tags=["router"])


@router.post("/jobs/{job_id}/claim", response_model=JobResponse)
async def claim_job(
    job_id: UUID,
    router_id: CurrentUserDep,
    use_case: ClaimJobUseCase = Depends(get_claim_job_use_case),
):
    """Claim an unrouted job; a router holds one unrouted claim at a time."""
    job = await use_case.execute(job_id, router_id)
    return JobResponse.from_entity(job)


@router.post("/jobs/{job_id}/release", response_model=JobResponse)
async def release_claim(
    job_id: UUID,
    router_id: CurrentUserDep,
    use_case: ReleaseClaimUseCase = Depends(get_release_claim_use_case),
):
    """Hand a claimed job back before any offer goes out."""
    job = await use_case.execute(job_id, router_id)
    return JobResponse.from_entity(job)


@router.post(
    "/apply-routing",
    response_model=FanoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_routing(
    routing: ApplyRoutingRequest,
    router_id: CurrentUserDep,
    use_case: ApplyRoutingUseCase = Depends(get_apply_routing_use_case),
):
    """Send time-boxed offers for a job to 1 to 5 contractors."""
    result = await use_case.execute(
        ApplyRoutingCommand(
            router_id=router_id,
            job_id=routing.job_id,
            contractor_ids=routing.contractor_ids,
        )
    )
    logger.info(
        "Routing applied",
        job_id=str(routing.job_id),
        router_id=str(router_id),
        issued=len(result.issued),
    )
    return FanoutResponse.from_result(result)


@router.get("/claims/active", response_model=ActiveClaimsResponse)
async def active_claims(router_id: CurrentUserDep, claim_lock: ClaimLockDep):
    """Number of claimed-but-unrouted jobs the caller holds."""
    count = await claim_lock.active_claim_count(router_id)
    return ActiveClaimsResponse(router_id=router_id, active_claims=count)
