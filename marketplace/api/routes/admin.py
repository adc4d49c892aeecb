"""
Admin routes: failsafe routing, escrow refunds and SLA monitoring.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from marketplace.api.dependencies import (
    CurrentUserDep,
    get_admin_route_use_case,
    get_archive_job_use_case,
    get_mark_event_handled_use_case,
    get_query_sla_events_use_case,
    get_refund_payment_use_case,
    get_run_sla_evaluation_use_case,
)
from marketplace.api.schemas.dispatch import AdminRouteRequest, FanoutResponse
from marketplace.api.schemas.job import JobResponse
from marketplace.api.schemas.monitoring import (
    MonitoringEventSchema,
    MonitoringEventsPage,
    SlaEvaluationResponse,
)
from marketplace.api.schemas.payment import PaymentRecordResponse
from marketplace.application.use_cases import (
    AdminRouteJobUseCase,
    ArchiveJobUseCase,
    MarkEventHandledUseCase,
    QuerySlaEventsRequest,
    QuerySlaEventsUseCase,
    RefundPaymentUseCase,
    RunSlaEvaluationUseCase,
)
from marketplace.application.use_cases import AdminRouteRequest as AdminRouteCommand
from marketplace.config.logging import get_logger
from marketplace.domain.value_objects.monitoring import MonitoringEventType

logger = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/jobs/{job_id}/route",
    response_model=FanoutResponse,
    status_code=status.HTTP_201_CREATED,
)
async def admin_route_job(
    job_id: UUID,
    routing: AdminRouteRequest,
    admin_id: CurrentUserDep,
    use_case: AdminRouteJobUseCase = Depends(get_admin_route_use_case),
):
    """Take over routing of an unclaimed job and fan it out."""
    result = await use_case.execute(
        AdminRouteCommand(
            admin_id=admin_id, job_id=job_id, contractor_ids=routing.contractor_ids
        )
    )
    return FanoutResponse.from_result(result)


@router.post("/jobs/{job_id}/archive", response_model=JobResponse)
async def archive_job(
    job_id: UUID,
    admin_id: CurrentUserDep,
    use_case: ArchiveJobUseCase = Depends(get_archive_job_use_case),
):
    """Soft delete a job; it drops out of every active query."""
    job = await use_case.execute(job_id)
    logger.info("Job archive requested", job_id=str(job_id), admin_id=str(admin_id))
    return JobResponse.from_entity(job)


@router.post("/jobs/{job_id}/refund", response_model=PaymentRecordResponse)
async def refund_job_payment(
    job_id: UUID,
    admin_id: CurrentUserDep,
    use_case: RefundPaymentUseCase = Depends(get_refund_payment_use_case),
):
    """Refund the captured escrow in full."""
    record = await use_case.execute(job_id)
    logger.info("Refund requested", job_id=str(job_id), admin_id=str(admin_id))
    return PaymentRecordResponse.from_entity(record)


@router.post("/monitoring/evaluate", response_model=SlaEvaluationResponse)
async def run_sla_evaluation(
    use_case: RunSlaEvaluationUseCase = Depends(get_run_sla_evaluation_use_case),
):
    """Run one SLA evaluation pass now."""
    result = await use_case.execute()
    return SlaEvaluationResponse.from_result(result)


@router.get("/monitoring/events", response_model=MonitoringEventsPage)
async def list_monitoring_events(
    limit: Optional[int] = Query(None, ge=1),
    cursor: Optional[UUID] = None,
    event_type: Optional[MonitoringEventType] = Query(None, alias="type"),
    job_id: Optional[UUID] = None,
    unhandled_only: bool = False,
    refresh: bool = False,
    use_case: QuerySlaEventsUseCase = Depends(get_query_sla_events_use_case),
):
    """Newest-first monitoring events; ``refresh`` evaluates before reading."""
    page = await use_case.execute(
        QuerySlaEventsRequest(
            limit=limit,
            cursor=cursor,
            event_type=event_type,
            job_id=job_id,
            unhandled_only=unhandled_only,
            refresh=refresh,
        )
    )
    return MonitoringEventsPage(
        items=[MonitoringEventSchema.from_view(view) for view in page.items],
        next_cursor=page.next_cursor,
        evaluation=(
            SlaEvaluationResponse.from_result(page.evaluation)
            if page.evaluation
            else None
        ),
    )


@router.post(
    "/monitoring/events/{event_id}/handle", response_model=MonitoringEventSchema
)
async def mark_event_handled(
    event_id: UUID,
    use_case: MarkEventHandledUseCase = Depends(get_mark_event_handled_use_case),
):
    """Acknowledge a monitoring event."""
    event = await use_case.execute(event_id)
    return MonitoringEventSchema.from_event(event)
