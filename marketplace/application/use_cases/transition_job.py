"""Apply lifecycle event use case."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from marketplace.application.services.job_state_machine import JobStateMachine
from marketplace.domain.entities.job import Job
from marketplace.domain.value_objects.job_status import JobEvent
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


class TransitionJobUseCase:
    """Apply a single lifecycle event through the state machine."""

    def __init__(
        self,
        state_machine: JobStateMachine,
        transaction_service: TransactionService,
    ):
        self.state_machine = state_machine
        self.transaction_service = transaction_service

    async def execute(
        self, job_id: UUID, event: JobEvent, now: Optional[datetime] = None
    ) -> Job:
        async def _apply() -> Job:
            return await self.state_machine.apply(job_id, event, now)

        return await self.transaction_service.execute_in_transaction(_apply)
