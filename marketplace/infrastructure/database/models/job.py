"""
Job SQLAlchemy model.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship

from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus

from .base import BaseModel


class JobModel(BaseModel):
    """Job database model."""

    __tablename__ = "jobs"

    title = Column(String(255), nullable=False)
    scope = Column(Text)
    job_poster_user_id = Column(Uuid(as_uuid=True), index=True)

    status = Column(
        String(32), default=JobStatus.DRAFT.value, nullable=False, index=True
    )
    routing_status = Column(
        String(32), default=RoutingStatus.UNROUTED.value, nullable=False, index=True
    )
    archived = Column(Boolean, default=False, nullable=False)
    status_before_dispute = Column(String(32))

    # Money, integer cents
    labor_total_cents = Column(Integer, default=0, nullable=False)
    materials_total_cents = Column(Integer, default=0, nullable=False)
    transaction_fee_cents = Column(Integer, default=0, nullable=False)
    contractor_payout_cents = Column(Integer, default=0, nullable=False)
    router_earnings_cents = Column(Integer, default=0, nullable=False)
    broker_fee_cents = Column(Integer, default=0, nullable=False)

    # Ownership
    claimed_by_user_id = Column(Uuid(as_uuid=True), index=True)
    contractor_user_id = Column(Uuid(as_uuid=True), index=True)
    admin_routed_by_id = Column(Uuid(as_uuid=True))

    # Timing
    posted_at = Column(DateTime(timezone=True), index=True)
    routing_due_at = Column(DateTime(timezone=True))
    claimed_at = Column(DateTime(timezone=True))
    first_routed_at = Column(DateTime(timezone=True))
    routed_at = Column(DateTime(timezone=True))
    contractor_completed_at = Column(DateTime(timezone=True))
    customer_approved_at = Column(DateTime(timezone=True))
    router_approved_at = Column(DateTime(timezone=True))
    escrow_locked_at = Column(DateTime(timezone=True))
    payment_captured_at = Column(DateTime(timezone=True))
    estimated_completion_date = Column(DateTime(timezone=True))

    # Relationships
    dispatches = relationship("DispatchModel", back_populates="job")
    assignment = relationship("JobAssignmentModel", back_populates="job", uselist=False)
    payment = relationship("PaymentRecordModel", back_populates="job", uselist=False)

    __table_args__ = (
        CheckConstraint("labor_total_cents >= 0", name="ck_jobs_labor_non_negative"),
        CheckConstraint(
            "materials_total_cents >= 0", name="ck_jobs_materials_non_negative"
        ),
        Index("idx_jobs_routing_queue", "routing_status", "status", "archived"),
        # A router may hold only one claimed-but-unrouted job at a time
        Index(
            "uq_jobs_router_single_unrouted_claim",
            "claimed_by_user_id",
            unique=True,
            postgresql_where=text(
                "routing_status = 'UNROUTED' AND claimed_by_user_id IS NOT NULL "
                "AND archived = false"
            ),
            sqlite_where=text(
                "routing_status = 'UNROUTED' AND claimed_by_user_id IS NOT NULL "
                "AND archived = 0"
            ),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Job(id={self.id}, status={self.status}, "
            f"routing_status={self.routing_status})>"
        )
