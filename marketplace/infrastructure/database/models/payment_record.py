"""
Job payment SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from marketplace.domain.value_objects.payment_status import PaymentStatus

from .base import BaseModel


class PaymentRecordModel(BaseModel):
    """Escrow payment intent database model."""

    __tablename__ = "job_payments"

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id"), nullable=False, unique=True)
    provider_intent_id = Column(String(255), nullable=False, index=True)
    provider_status = Column(String(64))
    client_secret = Column(String(255))
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(8), default="usd", nullable=False)
    idempotency_key = Column(String(64), nullable=False)
    intent_revision = Column(Integer, default=0, server_default="0", nullable=False)
    status = Column(
        String(16), default=PaymentStatus.PENDING.value, nullable=False, index=True
    )
    provider_refund_id = Column(String(255))
    refund_amount_cents = Column(Integer)
    captured_at = Column(DateTime(timezone=True))
    refunded_at = Column(DateTime(timezone=True))

    job = relationship("JobModel", back_populates="payment")

    def __repr__(self) -> str:
        return (
            f"<PaymentRecord(job_id={self.job_id}, amount={self.amount_cents}, "
            f"status={self.status})>"
        )
