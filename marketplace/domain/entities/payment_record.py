"""Payment record domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from marketplace.domain.value_objects.payment_status import PaymentStatus


@dataclass
class PaymentRecord:
    """Escrow payment intent tracked for a job; at most one per job."""

    job_id: UUID
    provider_intent_id: str
    amount_cents: int
    idempotency_key: str
    id: UUID = field(default_factory=uuid4)
    currency: str = "usd"
    intent_revision: int = 0
    status: PaymentStatus = PaymentStatus.PENDING
    provider_status: Optional[str] = None
    client_secret: Optional[str] = None
    provider_refund_id: Optional[str] = None
    refund_amount_cents: Optional[int] = None
    captured_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount_cents <= 0:
            raise ValueError("Payment amount must be positive")
        self.status = PaymentStatus(self.status)
        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)

    def matches_amount(self, amount_cents: int) -> bool:
        return self.amount_cents == amount_cents
