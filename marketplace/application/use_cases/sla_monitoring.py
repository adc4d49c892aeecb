"""SLA monitoring use cases."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import (
    MonitoringEventRepositoryInterface,
)
from marketplace.application.services.sla_monitor import (
    SlaEvaluationResult,
    SlaMonitor,
)
from marketplace.config.settings import settings
from marketplace.domain.entities.monitoring_event import (
    MonitoringEvent,
    MonitoringEventView,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.monitoring import MonitoringEventType
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


class RunSlaEvaluationUseCase:
    """One evaluation pass, committed atomically."""

    def __init__(self, monitor: SlaMonitor, transaction_service: TransactionService):
        self.monitor = monitor
        self.transaction_service = transaction_service

    async def execute(self, now: Optional[datetime] = None) -> SlaEvaluationResult:
        async def _evaluate() -> SlaEvaluationResult:
            return await self.monitor.evaluate(now)

        return await self.transaction_service.execute_in_transaction(_evaluate)


@dataclass
class QuerySlaEventsRequest:
    limit: Optional[int] = None
    cursor: Optional[UUID] = None
    event_type: Optional[MonitoringEventType] = None
    job_id: Optional[UUID] = None
    unhandled_only: bool = False
    refresh: bool = False


@dataclass
class SlaEventsPage:
    items: List[MonitoringEventView]
    next_cursor: Optional[UUID]
    evaluation: Optional[SlaEvaluationResult] = None


class QuerySlaEventsUseCase:
    """Newest-first page of monitoring events, optionally refreshed first."""

    def __init__(
        self,
        event_repo: MonitoringEventRepositoryInterface,
        evaluation: RunSlaEvaluationUseCase,
    ):
        self.event_repo = event_repo
        self.evaluation = evaluation

    async def execute(
        self, request: QuerySlaEventsRequest, now: Optional[datetime] = None
    ) -> SlaEventsPage:
        limit = request.limit or settings.MONITORING_PAGE_SIZE
        if not 1 <= limit <= settings.MONITORING_MAX_PAGE_SIZE:
            raise ValidationError(
                f"limit must be between 1 and {settings.MONITORING_MAX_PAGE_SIZE}"
            )

        evaluation = None
        if request.refresh:
            evaluation = await self.evaluation.execute(now)

        items, next_cursor = await self.event_repo.list_events(
            limit=limit,
            cursor=request.cursor,
            event_type=request.event_type,
            job_id=request.job_id,
            unhandled_only=request.unhandled_only,
        )
        return SlaEventsPage(items=items, next_cursor=next_cursor, evaluation=evaluation)


class MarkEventHandledUseCase:
    """Acknowledge an event; acknowledging twice keeps the first timestamp."""

    def __init__(
        self,
        event_repo: MonitoringEventRepositoryInterface,
        transaction_service: TransactionService,
    ):
        self.event_repo = event_repo
        self.transaction_service = transaction_service

    async def execute(
        self, event_id: UUID, now: Optional[datetime] = None
    ) -> MonitoringEvent:
        now = now or datetime.now(timezone.utc)

        async def _mark() -> MonitoringEvent:
            event = await self.event_repo.get_by_id(event_id)
            if event is None:
                raise NotFoundError("MonitoringEvent", event_id)
            if event.handled_at is None:
                await self.event_repo.mark_handled(event_id, now)
                event = await self.event_repo.get_by_id(event_id)
            return event

        return await self.transaction_service.execute_in_transaction(_mark)
