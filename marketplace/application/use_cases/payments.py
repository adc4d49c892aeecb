"""Escrow payment use cases."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from marketplace.application.services.escrow_payment_manager import (
    EscrowPaymentManager,
    PaymentIntentResult,
    PaymentStatusView,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.payment_record import PaymentRecord
from marketplace.domain.exceptions.conflict_error import ConflictError
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.infrastructure.database.repositories.transaction_repository import (
    TransactionService,
)

logger = get_logger(__name__)

INTENT_SUCCEEDED_EVENT = "payment_intent.succeeded"
INTENT_FAILED_EVENT = "payment_intent.payment_failed"


class CreatePaymentIntentUseCase:
    """Create or retry the escrow intent for a job."""

    def __init__(
        self,
        payment_manager: EscrowPaymentManager,
        transaction_service: TransactionService,
    ):
        self.payment_manager = payment_manager
        self.transaction_service = transaction_service

    async def execute(self, job_id: UUID) -> PaymentIntentResult:
        async def _create() -> PaymentIntentResult:
            return await self.payment_manager.create_payment_intent(job_id)

        return await self.transaction_service.execute_in_transaction(_create)


class ConfirmPaymentUseCase:
    """Confirm a succeeded intent and lock escrow."""

    def __init__(
        self,
        payment_manager: EscrowPaymentManager,
        transaction_service: TransactionService,
    ):
        self.payment_manager = payment_manager
        self.transaction_service = transaction_service

    async def execute(
        self, job_id: UUID, intent_id: str, now: Optional[datetime] = None
    ) -> PaymentRecord:
        async def _confirm() -> PaymentRecord:
            return await self.payment_manager.confirm_payment(job_id, intent_id, now)

        return await self.transaction_service.execute_in_transaction(_confirm)


class GetPaymentStatusUseCase:
    def __init__(self, payment_manager: EscrowPaymentManager):
        self.payment_manager = payment_manager

    async def execute(self, job_id: UUID) -> PaymentStatusView:
        return await self.payment_manager.get_payment_status(job_id)


class RefundPaymentUseCase:
    """Refund captured escrow in full."""

    def __init__(
        self,
        payment_manager: EscrowPaymentManager,
        transaction_service: TransactionService,
    ):
        self.payment_manager = payment_manager
        self.transaction_service = transaction_service

    async def execute(
        self, job_id: UUID, now: Optional[datetime] = None
    ) -> PaymentRecord:
        async def _refund() -> PaymentRecord:
            return await self.payment_manager.refund_payment(job_id, now)

        return await self.transaction_service.execute_in_transaction(_refund)


class HandlePaymentWebhookUseCase:
    """Apply a provider event to the matching payment record.

    Events that do not concern a known job are acknowledged and ignored so
    the provider stops redelivering them.
    """

    def __init__(
        self,
        payment_manager: EscrowPaymentManager,
        transaction_service: TransactionService,
    ):
        self.payment_manager = payment_manager
        self.transaction_service = transaction_service

    async def execute(
        self, event: Dict[str, Any], now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        event_type = event.get("type")
        intent = (event.get("data") or {}).get("object") or {}
        intent_id = intent.get("id")
        job_id = self._job_id(intent)

        if event_type not in (INTENT_SUCCEEDED_EVENT, INTENT_FAILED_EVENT):
            return {"handled": False, "reason": "ignored_event_type", "type": event_type}
        if job_id is None or not intent_id:
            logger.warning(
                "Payment webhook without job reference",
                event_type=event_type,
                intent_id=intent_id,
            )
            return {"handled": False, "reason": "missing_job_reference", "type": event_type}

        async def _apply() -> bool:
            if event_type == INTENT_SUCCEEDED_EVENT:
                await self.payment_manager.confirm_payment(job_id, intent_id, now)
                return True
            return await self.payment_manager.mark_payment_failed(
                job_id, intent_id, intent.get("status") or "payment_failed"
            )

        try:
            handled = await self.transaction_service.execute_in_transaction(_apply)
        except (ConflictError, NotFoundError) as e:
            logger.warning(
                "Payment webhook not applied",
                event_type=event_type,
                job_id=str(job_id),
                intent_id=intent_id,
                code=e.code,
                error=str(e),
            )
            return {"handled": False, "reason": e.code, "type": event_type}

        return {"handled": handled, "type": event_type, "job_id": str(job_id)}

    @staticmethod
    def _job_id(intent: Dict[str, Any]) -> Optional[UUID]:
        raw = (intent.get("metadata") or {}).get("job_id")
        try:
            return UUID(str(raw)) if raw else None
        except ValueError:
            return None
