"""Claim and release use cases."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from marketplace.application.services.claim_lock import ClaimLock
from marketplace.domain.entities.job import Job
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)


class ClaimJobUseCase:
    """Claim a job for a router."""

    def __init__(self, claim_lock: ClaimLock, transaction_service: TransactionService):
        self.claim_lock = claim_lock
        self.transaction_service = transaction_service

    async def execute(
        self, job_id: UUID, router_id: UUID, now: Optional[datetime] = None
    ) -> Job:
        async def _claim() -> Job:
            return await self.claim_lock.claim(job_id, router_id, now)

        return await self.transaction_service.execute_in_transaction(_claim)


class ReleaseClaimUseCase:
    """Give a claimed job back to the pool before it is fanned out."""

    def __init__(self, claim_lock: ClaimLock, transaction_service: TransactionService):
        self.claim_lock = claim_lock
        self.transaction_service = transaction_service

    async def execute(self, job_id: UUID, router_id: UUID) -> Job:
        async def _release() -> Job:
            return await self.claim_lock.release(job_id, router_id)

        return await self.transaction_service.execute_in_transaction(_release)
