"""Contractor offer use cases."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from marketplace.application.services.dispatch_fanout_engine import (
    DispatchFanoutEngine,
    DispatchResponseResult,
)
from marketplace.domain.entities.dispatch import Dispatch
from marketplace.domain.value_objects.dispatch_status import DispatchDecision
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


@dataclass
class RespondToDispatchRequest:
    token: str
    decision: DispatchDecision
    estimated_completion_date: Optional[datetime] = None


class RespondToDispatchUseCase:
    """Accept or decline an offer; acceptance is all-or-nothing."""

    def __init__(
        self,
        fanout_engine: DispatchFanoutEngine,
        transaction_service: TransactionService,
    ):
        self.fanout_engine = fanout_engine
        self.transaction_service = transaction_service

    async def execute(
        self, request: RespondToDispatchRequest, now: Optional[datetime] = None
    ) -> DispatchResponseResult:
        async def _respond() -> DispatchResponseResult:
            return await self.fanout_engine.respond(
                request.token,
                request.decision,
                request.estimated_completion_date,
                now,
            )

        return await self.transaction_service.execute_in_transaction(_respond)


class ListOffersUseCase:
    """Pending offers for a contractor."""

    def __init__(self, fanout_engine: DispatchFanoutEngine):
        self.fanout_engine = fanout_engine

    async def execute(
        self, contractor_id: UUID, now: Optional[datetime] = None
    ) -> List[Dispatch]:
        return await self.fanout_engine.list_open_offers(contractor_id, now)


class ExpireStaleDispatchesUseCase:
    """Sweep offers whose answer window has closed."""

    def __init__(
        self,
        fanout_engine: DispatchFanoutEngine,
        transaction_service: TransactionService,
    ):
        self.fanout_engine = fanout_engine
        self.transaction_service = transaction_service

    async def execute(self, now: Optional[datetime] = None) -> int:
        async def _expire() -> int:
            return await self.fanout_engine.expire_stale(now)

        return await self.transaction_service.execute_in_transaction(_expire)
