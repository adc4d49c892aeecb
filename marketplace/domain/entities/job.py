"""Job domain entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus
from marketplace.domain.value_objects.payout_breakdown import (
    PayoutBreakdown,
    calculate_payout_breakdown,
)


@dataclass
class Job:
    """Job domain entity."""

    title: str
    job_poster_user_id: Optional[UUID]
    id: UUID = field(default_factory=uuid4)
    scope: Optional[str] = None
    status: JobStatus = JobStatus.DRAFT
    routing_status: RoutingStatus = RoutingStatus.UNROUTED
    archived: bool = False
    status_before_dispute: Optional[JobStatus] = None

    # Money, integer cents
    labor_total_cents: int = 0
    materials_total_cents: int = 0
    transaction_fee_cents: int = 0
    contractor_payout_cents: int = 0
    router_earnings_cents: int = 0
    broker_fee_cents: int = 0

    # Ownership
    claimed_by_user_id: Optional[UUID] = None
    contractor_user_id: Optional[UUID] = None
    admin_routed_by_id: Optional[UUID] = None

    # Timing
    posted_at: Optional[datetime] = None
    routing_due_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None
    first_routed_at: Optional[datetime] = None
    routed_at: Optional[datetime] = None
    contractor_completed_at: Optional[datetime] = None
    customer_approved_at: Optional[datetime] = None
    router_approved_at: Optional[datetime] = None
    escrow_locked_at: Optional[datetime] = None
    payment_captured_at: Optional[datetime] = None
    estimated_completion_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate job data."""
        if not self.title or not self.title.strip():
            raise ValueError("Job title is required")
        if self.labor_total_cents < 0 or self.materials_total_cents < 0:
            raise ValueError("Job amounts must not be negative")

        self.status = JobStatus(self.status)
        self.routing_status = RoutingStatus(self.routing_status)
        if self.status_before_dispute is not None:
            self.status_before_dispute = JobStatus(self.status_before_dispute)

        if not self.created_at:
            self.created_at = datetime.now(timezone.utc)
        if not self.updated_at:
            self.updated_at = datetime.now(timezone.utc)

    @property
    def total_cents(self) -> int:
        """Amount the job poster is charged."""
        return self.labor_total_cents + self.materials_total_cents + self.transaction_fee_cents

    @property
    def is_escrow_locked(self) -> bool:
        return self.escrow_locked_at is not None

    @property
    def is_routed(self) -> bool:
        return self.routing_status.is_routed()

    def payout_breakdown(self) -> PayoutBreakdown:
        """Recompute the breakdown from the current labor and materials."""
        return calculate_payout_breakdown(
            self.labor_total_cents, self.materials_total_cents
        )

    def apply_pricing(self, labor_total_cents: int, materials_total_cents: int) -> None:
        """Set new amounts and refresh every derived money column."""
        breakdown = calculate_payout_breakdown(labor_total_cents, materials_total_cents)
        self.labor_total_cents = breakdown.labor_total_cents
        self.materials_total_cents = breakdown.materials_total_cents
        self.transaction_fee_cents = breakdown.transaction_fee_cents
        self.contractor_payout_cents = breakdown.contractor_payout_cents
        self.router_earnings_cents = breakdown.router_earnings_cents
        self.broker_fee_cents = breakdown.platform_fee_cents
        self.updated_at = datetime.now(timezone.utc)

    def is_open_for_claim(self) -> bool:
        """Check the per-job part of claim eligibility."""
        return (
            not self.archived
            and self.routing_status == RoutingStatus.UNROUTED
            and self.status.is_routable()
        )

    def not_eligible_reason(self) -> Optional[str]:
        """Explain why the job is not claimable, or None if it is."""
        if self.archived:
            return "job is archived"
        if self.routing_status != RoutingStatus.UNROUTED:
            return "job has already been routed"
        if not self.status.is_routable():
            return f"job status {self.status.value} is not open for routing"
        return None
