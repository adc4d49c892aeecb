"""
Escrow payment API schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from marketplace.application.services.escrow_payment_manager import (
    PaymentIntentResult,
    PaymentStatusView,
)
from marketplace.domain.entities.payment_record import PaymentRecord
from marketplace.domain.value_objects.payment_status import PaymentStatus


class PaymentIntentResponse(BaseModel):
    job_id: UUID
    provider_intent_id: str
    client_secret: Optional[str] = None
    amount_cents: int
    currency: str

    @classmethod
    def from_result(cls, result: PaymentIntentResult) -> "PaymentIntentResponse":
        return cls(
            job_id=result.job_id,
            provider_intent_id=result.provider_intent_id,
            client_secret=result.client_secret,
            amount_cents=result.amount_cents,
            currency=result.currency,
        )


class ConfirmPaymentRequest(BaseModel):
    job_id: UUID
    provider_intent_id: str = Field(..., min_length=1)


class PaymentRecordResponse(BaseModel):
    id: UUID
    job_id: UUID
    provider_intent_id: str
    provider_status: Optional[str] = None
    status: PaymentStatus
    amount_cents: int
    currency: str
    refund_amount_cents: Optional[int] = None
    captured_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, record: PaymentRecord) -> "PaymentRecordResponse":
        return cls(
            id=record.id,
            job_id=record.job_id,
            provider_intent_id=record.provider_intent_id,
            provider_status=record.provider_status,
            status=record.status,
            amount_cents=record.amount_cents,
            currency=record.currency,
            refund_amount_cents=record.refund_amount_cents,
            captured_at=record.captured_at,
            refunded_at=record.refunded_at,
        )


class PaymentStatusResponse(BaseModel):
    job_id: UUID
    status: str = Field(..., description="UNPAID, PENDING, CAPTURED, FAILED or REFUNDED")
    amount_cents: Optional[int] = None
    currency: Optional[str] = None
    provider_intent_id: Optional[str] = None
    escrow_locked_at: Optional[datetime] = None
    captured_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_amount_cents: Optional[int] = None

    @classmethod
    def from_view(cls, view: PaymentStatusView) -> "PaymentStatusResponse":
        return cls(**view.__dict__)


class WebhookAckResponse(BaseModel):
    received: bool = True
    handled: bool
    type: Optional[str] = None
    reason: Optional[str] = None
