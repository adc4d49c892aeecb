"""
Stripe escrow payment provider.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from marketplace.application.interfaces.providers import (
    CancelIntentResult,
    CreateIntentRequest,
    PaymentIntent,
    PaymentProviderInterface,
    ProviderHealthStatus,
    RefundResult,
)
from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.domain.exceptions.provider_error import ProviderError
from marketplace.infrastructure.monitoring.metrics import record_provider_call
from marketplace.infrastructure.providers.stripe.client import PROVIDER, StripeClient

logger = get_logger(__name__)


class StripePaymentProvider(PaymentProviderInterface):
    """Payment provider backed by Stripe PaymentIntents."""

    def __init__(self, client: Optional[StripeClient] = None):
        self.client = client or StripeClient(
            secret_key=settings.STRIPE_SECRET_KEY,
            api_base=settings.STRIPE_API_BASE,
            timeout=settings.PAYMENT_REQUEST_TIMEOUT,
        )

    @property
    def name(self) -> str:
        return PROVIDER

    async def create_intent(self, request: CreateIntentRequest) -> PaymentIntent:
        data = await self._call(
            "create_intent",
            self.client.create_payment_intent(
                amount_cents=request.amount_cents,
                currency=request.currency,
                idempotency_key=request.idempotency_key,
                metadata=request.metadata,
            ),
        )
        return self._to_intent(data)

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        data = await self._call(
            "retrieve_intent", self.client.retrieve_payment_intent(intent_id)
        )
        return self._to_intent(data)

    async def cancel_intent(self, intent_id: str) -> CancelIntentResult:
        try:
            await self._call("cancel_intent", self.client.cancel_payment_intent(intent_id))
        except ProviderError as e:
            return CancelIntentResult(ok=False, error=str(e))
        return CancelIntentResult(ok=True)

    async def create_refund(
        self, intent_id: str, amount_cents: int, idempotency_key: str
    ) -> RefundResult:
        data = await self._call(
            "create_refund",
            self.client.create_refund(intent_id, amount_cents, idempotency_key),
        )
        return RefundResult(
            id=data["id"], status=data["status"], amount_cents=int(data["amount"])
        )

    async def health_check(self) -> ProviderHealthStatus:
        start_time = time.time()
        checked_at = datetime.now(timezone.utc).isoformat()
        try:
            await self.client.retrieve_balance()
        except ProviderError as e:
            return ProviderHealthStatus(
                is_healthy=False,
                status_message="Stripe API unreachable",
                last_check=checked_at,
                error_details=str(e),
            )
        return ProviderHealthStatus(
            is_healthy=True,
            status_message="Stripe API reachable",
            last_check=checked_at,
            response_time_ms=(time.time() - start_time) * 1000,
        )

    async def _call(self, operation: str, request) -> Dict[str, Any]:
        try:
            data = await request
        except ProviderError as e:
            record_provider_call(PROVIDER, operation, "error")
            logger.error("Stripe call failed", operation=operation, error=str(e))
            raise
        record_provider_call(PROVIDER, operation, "success")
        return data

    @staticmethod
    def _to_intent(data: Dict[str, Any]) -> PaymentIntent:
        return PaymentIntent(
            id=data["id"],
            status=data["status"],
            amount_cents=int(data["amount"]),
            currency=data.get("currency", settings.PAYMENT_CURRENCY),
            client_secret=data.get("client_secret"),
        )
