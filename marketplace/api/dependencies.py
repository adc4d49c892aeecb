"""
FastAPI dependency injection container.

Every dependency below shares the request's single database session, so
repositories, services and the transaction service all see one unit of work.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.application.interfaces.providers import PaymentProviderInterface
from marketplace.application.services.claim_lock import ClaimLock
from marketplace.application.services.dispatch_fanout_engine import (
    DispatchFanoutEngine,
)
from marketplace.application.services.escrow_payment_manager import (
    EscrowPaymentManager,
)
from marketplace.application.services.job_state_machine import JobStateMachine
from marketplace.application.services.sla_monitor import SlaMonitor
from marketplace.application.use_cases import (
    AdminRouteJobUseCase,
    ApplyRoutingUseCase,
    ArchiveJobUseCase,
    ClaimJobUseCase,
    ConfirmPaymentUseCase,
    CreateJobUseCase,
    CreatePaymentIntentUseCase,
    GetPaymentStatusUseCase,
    HandlePaymentWebhookUseCase,
    ListOffersUseCase,
    MarkEventHandledUseCase,
    QuerySlaEventsUseCase,
    RefundPaymentUseCase,
    ReleaseClaimUseCase,
    RespondToDispatchUseCase,
    RunSlaEvaluationUseCase,
    TransitionJobUseCase,
    UpdateJobPricingUseCase,
)
from marketplace.config.database import get_db_session
from marketplace.config.logging import get_logger
from marketplace.infrastructure.database.repositories import (
    AssignmentRepository,
    DispatchRepository,
    JobRepository,
    MonitoringEventRepository,
    PaymentRecordRepository,
    TransactionService,
)
from marketplace.infrastructure.providers.factory import provider_factory

logger = get_logger(__name__)


# Identity
async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> UUID:
    """Caller identity, forwarded by the gateway in X-User-Id."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header must be a UUID",
        )


CurrentUserDep = Annotated[UUID, Depends(get_current_user_id)]


# Database Dependencies
async def get_job_repository(
    db: AsyncSession = Depends(get_db_session),
) -> JobRepository:
    """Get job repository instance."""
    return JobRepository(db)


async def get_dispatch_repository(
    db: AsyncSession = Depends(get_db_session),
) -> DispatchRepository:
    """Get dispatch repository instance."""
    return DispatchRepository(db)


async def get_assignment_repository(
    db: AsyncSession = Depends(get_db_session),
) -> AssignmentRepository:
    """Get assignment repository instance."""
    return AssignmentRepository(db)


async def get_monitoring_event_repository(
    db: AsyncSession = Depends(get_db_session),
) -> MonitoringEventRepository:
    """Get monitoring event repository instance."""
    return MonitoringEventRepository(db)


async def get_payment_record_repository(
    db: AsyncSession = Depends(get_db_session),
) -> PaymentRecordRepository:
    """Get payment record repository instance."""
    return PaymentRecordRepository(db)


async def get_transaction_service(
    db: AsyncSession = Depends(get_db_session),
) -> TransactionService:
    """Get transaction service instance."""
    return TransactionService(db)


JobRepositoryDep = Annotated[JobRepository, Depends(get_job_repository)]
DispatchRepositoryDep = Annotated[DispatchRepository, Depends(get_dispatch_repository)]
AssignmentRepositoryDep = Annotated[
    AssignmentRepository, Depends(get_assignment_repository)
]
MonitoringEventRepositoryDep = Annotated[
    MonitoringEventRepository, Depends(get_monitoring_event_repository)
]
PaymentRecordRepositoryDep = Annotated[
    PaymentRecordRepository, Depends(get_payment_record_repository)
]
TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]


# Service Dependencies
async def get_payment_provider() -> PaymentProviderInterface:
    """Get the configured payment provider."""
    return provider_factory.get_provider()


async def get_state_machine(
    job_repo: JobRepositoryDep, assignment_repo: AssignmentRepositoryDep
) -> JobStateMachine:
    return JobStateMachine(job_repo, assignment_repo)


async def get_claim_lock(job_repo: JobRepositoryDep) -> ClaimLock:
    return ClaimLock(job_repo)


async def get_fanout_engine(
    job_repo: JobRepositoryDep,
    dispatch_repo: DispatchRepositoryDep,
    assignment_repo: AssignmentRepositoryDep,
    claim_lock: ClaimLock = Depends(get_claim_lock),
) -> DispatchFanoutEngine:
    return DispatchFanoutEngine(job_repo, dispatch_repo, assignment_repo, claim_lock)


async def get_sla_monitor(
    job_repo: JobRepositoryDep, event_repo: MonitoringEventRepositoryDep
) -> SlaMonitor:
    return SlaMonitor(job_repo, event_repo)


async def get_payment_manager(
    job_repo: JobRepositoryDep,
    payment_repo: PaymentRecordRepositoryDep,
    provider: PaymentProviderInterface = Depends(get_payment_provider),
    state_machine: JobStateMachine = Depends(get_state_machine),
) -> EscrowPaymentManager:
    return EscrowPaymentManager(job_repo, payment_repo, provider, state_machine)


StateMachineDep = Annotated[JobStateMachine, Depends(get_state_machine)]
ClaimLockDep = Annotated[ClaimLock, Depends(get_claim_lock)]
FanoutEngineDep = Annotated[DispatchFanoutEngine, Depends(get_fanout_engine)]
SlaMonitorDep = Annotated[SlaMonitor, Depends(get_sla_monitor)]
PaymentManagerDep = Annotated[EscrowPaymentManager, Depends(get_payment_manager)]


# Use Case Dependencies
async def get_create_job_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> CreateJobUseCase:
    return CreateJobUseCase(job_repo, transaction_service)


async def get_update_pricing_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> UpdateJobPricingUseCase:
    return UpdateJobPricingUseCase(job_repo, transaction_service)


async def get_transition_job_use_case(
    state_machine: StateMachineDep, transaction_service: TransactionServiceDep
) -> TransitionJobUseCase:
    return TransitionJobUseCase(state_machine, transaction_service)


async def get_claim_job_use_case(
    claim_lock: ClaimLockDep, transaction_service: TransactionServiceDep
) -> ClaimJobUseCase:
    return ClaimJobUseCase(claim_lock, transaction_service)


async def get_release_claim_use_case(
    claim_lock: ClaimLockDep, transaction_service: TransactionServiceDep
) -> ReleaseClaimUseCase:
    return ReleaseClaimUseCase(claim_lock, transaction_service)


async def get_apply_routing_use_case(
    fanout_engine: FanoutEngineDep, transaction_service: TransactionServiceDep
) -> ApplyRoutingUseCase:
    return ApplyRoutingUseCase(fanout_engine, transaction_service)


async def get_respond_use_case(
    fanout_engine: FanoutEngineDep, transaction_service: TransactionServiceDep
) -> RespondToDispatchUseCase:
    return RespondToDispatchUseCase(fanout_engine, transaction_service)


async def get_list_offers_use_case(fanout_engine: FanoutEngineDep) -> ListOffersUseCase:
    return ListOffersUseCase(fanout_engine)


async def get_admin_route_use_case(
    job_repo: JobRepositoryDep,
    fanout_engine: FanoutEngineDep,
    transaction_service: TransactionServiceDep,
) -> AdminRouteJobUseCase:
    return AdminRouteJobUseCase(job_repo, fanout_engine, transaction_service)


async def get_archive_job_use_case(
    job_repo: JobRepositoryDep, transaction_service: TransactionServiceDep
) -> ArchiveJobUseCase:
    return ArchiveJobUseCase(job_repo, transaction_service)


async def get_run_sla_evaluation_use_case(
    monitor: SlaMonitorDep, transaction_service: TransactionServiceDep
) -> RunSlaEvaluationUseCase:
    return RunSlaEvaluationUseCase(monitor, transaction_service)


async def get_query_sla_events_use_case(
    event_repo: MonitoringEventRepositoryDep,
    evaluation: RunSlaEvaluationUseCase = Depends(get_run_sla_evaluation_use_case),
) -> QuerySlaEventsUseCase:
    return QuerySlaEventsUseCase(event_repo, evaluation)


async def get_mark_event_handled_use_case(
    event_repo: MonitoringEventRepositoryDep,
    transaction_service: TransactionServiceDep,
) -> MarkEventHandledUseCase:
    return MarkEventHandledUseCase(event_repo, transaction_service)


async def get_create_payment_intent_use_case(
    payment_manager: PaymentManagerDep, transaction_service: TransactionServiceDep
) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(payment_manager, transaction_service)


async def get_confirm_payment_use_case(
    payment_manager: PaymentManagerDep, transaction_service: TransactionServiceDep
) -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(payment_manager, transaction_service)


async def get_payment_status_use_case(
    payment_manager: PaymentManagerDep,
) -> GetPaymentStatusUseCase:
    return GetPaymentStatusUseCase(payment_manager)


async def get_refund_payment_use_case(
    payment_manager: PaymentManagerDep, transaction_service: TransactionServiceDep
) -> RefundPaymentUseCase:
    return RefundPaymentUseCase(payment_manager, transaction_service)


async def get_payment_webhook_use_case(
    payment_manager: PaymentManagerDep, transaction_service: TransactionServiceDep
) -> HandlePaymentWebhookUseCase:
    return HandlePaymentWebhookUseCase(payment_manager, transaction_service)
