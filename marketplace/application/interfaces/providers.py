"""
Payment provider interfaces for dependency inversion.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

# Provider-side intent status that means the funds were collected
INTENT_SUCCEEDED = "succeeded"
# Terminal; a canceled intent can never be paid
INTENT_CANCELED = "canceled"


@dataclass
class CreateIntentRequest:
    """Request to create a payment intent at the provider."""

    amount_cents: int
    currency: str
    idempotency_key: str  # Same key always yields the same provider intent
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class PaymentIntent:
    """Provider view of a payment intent."""

    id: str
    status: str
    amount_cents: int
    currency: str
    client_secret: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == INTENT_SUCCEEDED

    @property
    def canceled(self) -> bool:
        return self.status == INTENT_CANCELED


@dataclass
class CancelIntentResult:
    """Outcome of a best-effort intent cancellation."""

    ok: bool
    error: Optional[str] = None


@dataclass
class RefundResult:
    """Provider response for a refund."""

    id: str
    status: str
    amount_cents: int


@dataclass
class ProviderHealthStatus:
    """Provider health status information."""

    is_healthy: bool
    status_message: str
    last_check: str
    response_time_ms: Optional[float] = None
    error_details: Optional[str] = None


class PaymentProviderInterface(ABC):
    """Base interface for escrow payment providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass

    @abstractmethod
    async def create_intent(self, request: CreateIntentRequest) -> PaymentIntent:
        """Create (or replay, for a known idempotency key) a payment intent.

        Raises:
            ProviderError: when the provider rejects the request or is unreachable
        """
        pass

    @abstractmethod
    async def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        """Fetch the current provider state of an intent."""
        pass

    @abstractmethod
    async def cancel_intent(self, intent_id: str) -> CancelIntentResult:
        """Cancel an intent. Never raises; failures come back in the result."""
        pass

    @abstractmethod
    async def create_refund(
        self, intent_id: str, amount_cents: int, idempotency_key: str
    ) -> RefundResult:
        """Refund a captured intent in full or in part."""
        pass

    async def health_check(self) -> ProviderHealthStatus:
        """Check provider reachability."""
        raise NotImplementedError
