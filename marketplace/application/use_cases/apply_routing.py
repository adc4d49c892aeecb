"""Apply routing use case."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from marketplace.application.services.dispatch_fanout_engine import (
    DispatchFanoutEngine,
    FanoutResult,
)
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


@dataclass
class ApplyRoutingRequest:
    router_id: UUID
    job_id: UUID
    contractor_ids: List[UUID]


class ApplyRoutingUseCase:
    """Claim (if needed) and fan a job out to contractors in one transaction."""

    def __init__(
        self,
        fanout_engine: DispatchFanoutEngine,
        transaction_service: TransactionService,
    ):
        self.fanout_engine = fanout_engine
        self.transaction_service = transaction_service

    async def execute(
        self, request: ApplyRoutingRequest, now: Optional[datetime] = None
    ) -> FanoutResult:
        # Selection errors must surface before anything is written
        contractor_ids = self.fanout_engine.normalize_contractor_ids(
            request.contractor_ids
        )

        async def _route() -> FanoutResult:
            return await self.fanout_engine.apply_routing(
                request.router_id, request.job_id, contractor_ids, now
            )

        return await self.transaction_service.execute_in_transaction(_route)
