"""
Mock payment provider for testing and development.

Intents live in process memory. The same idempotency key always returns the
same intent, like the real provider, and intents start out waiting for a
payment method until ``simulate_success`` or ``simulate_failure`` is called.
"""

import hashlib
from datetime import datetime, timezone
from typing import Dict, Optional

from marketplace.application.interfaces.providers import (
    INTENT_CANCELED,
    INTENT_SUCCEEDED,
    CancelIntentResult,
    CreateIntentRequest,
    PaymentIntent,
    PaymentProviderInterface,
    ProviderHealthStatus,
    RefundResult,
)
from marketplace.config.logging import get_logger
from marketplace.domain.exceptions.provider_error import ProviderAPIError

logger = get_logger(__name__)

REQUIRES_PAYMENT_METHOD = "requires_payment_method"


class MockPaymentProvider(PaymentProviderInterface):
    """Mock provider implementation for testing."""

    def __init__(self):
        self.intents: Dict[str, PaymentIntent] = {}
        self.metadata: Dict[str, Dict[str, str]] = {}
        self.refunds: Dict[str, RefundResult] = {}
        self._by_key: Dict[str, str] = {}
        self.fail_cancel = False

    @property
    def name(self) -> str:
        return "mock"

    async def create_intent(self, request: CreateIntentRequest) -> PaymentIntent:
        intent_id = self._by_key.get(request.idempotency_key)
        if intent_id:
            return self.intents[intent_id]

        digest = hashlib.sha256(request.idempotency_key.encode()).hexdigest()
        intent = PaymentIntent(
            id=f"pi_mock_{digest[:24]}",
            status=REQUIRES_PAYMENT_METHOD,
            amount_cents=request.amount_cents,
            currency=request.currency,
            client_secret=f"pi_mock_{digest[:24]}_secret_{digest[24:40]}",
        )
        self.intents[intent.id] = intent
        self.metadata[intent.id] = dict(request.metadata)
        self._by_key[request.idempotency_key] = intent.id

        logger.info(
            "Mock payment intent created",
            intent_id=intent.id,
            amount_cents=intent.amount_cents,
        )
        return intent

    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        return self._get(intent_id)

    async def cancel_intent(self, intent_id: str) -> CancelIntentResult:
        if self.fail_cancel:
            return CancelIntentResult(ok=False, error="cancel rejected by mock")
        intent = self.intents.get(intent_id)
        if intent is None:
            return CancelIntentResult(ok=False, error=f"No such intent {intent_id}")
        if intent.status == INTENT_SUCCEEDED:
            return CancelIntentResult(ok=False, error="Intent already succeeded")
        intent.status = INTENT_CANCELED
        return CancelIntentResult(ok=True)

    async def create_refund(
        self, intent_id: str, amount_cents: int, idempotency_key: str
    ) -> RefundResult:
        if idempotency_key in self.refunds:
            return self.refunds[idempotency_key]

        intent = self._get(intent_id)
        if intent.status != INTENT_SUCCEEDED:
            raise ProviderAPIError(self.name, 400, f"Intent {intent_id} was not captured")

        refund = RefundResult(
            id=f"re_mock_{idempotency_key[:24]}",
            status="succeeded",
            amount_cents=amount_cents,
        )
        self.refunds[idempotency_key] = refund
        return refund

    async def health_check(self) -> ProviderHealthStatus:
        return ProviderHealthStatus(
            is_healthy=True,
            status_message="Mock provider is always available",
            last_check=datetime.now(timezone.utc).isoformat(),
            response_time_ms=0.0,
        )

    def simulate_success(self, intent_id: str, amount_cents: Optional[int] = None) -> PaymentIntent:
        """Mark an intent as paid, optionally with a different charged amount."""
        intent = self._get(intent_id)
        intent.status = INTENT_SUCCEEDED
        if amount_cents is not None:
            intent.amount_cents = amount_cents
        return intent

    def simulate_failure(self, intent_id: str) -> PaymentIntent:
        intent = self._get(intent_id)
        intent.status = REQUIRES_PAYMENT_METHOD
        return intent

    def _get(self, intent_id: str) -> PaymentIntent:
        intent = self.intents.get(intent_id)
        if intent is None:
            raise ProviderAPIError(self.name, 404, f"No such payment intent: {intent_id}")
        return intent
