"""
Job-related API schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from marketplace.domain.entities.job import Job
from marketplace.domain.value_objects.job_status import JobEvent, JobStatus, RoutingStatus

from .common import TimestampMixin


class JobCreateRequest(BaseModel):
    """Draft job creation request; the poster comes from X-User-Id."""

    title: str = Field(..., min_length=1, max_length=255)
    scope: Optional[str] = Field(None, max_length=5000)
    labor_total_cents: int = Field(0, ge=0, description="Labor amount in cents")
    materials_total_cents: int = Field(0, ge=0, description="Materials amount in cents")
    routing_due_at: Optional[datetime] = Field(
        None, description="Routing deadline; defaults to 24h after posting"
    )


class PricingUpdateRequest(BaseModel):
    labor_total_cents: int = Field(..., ge=0)
    materials_total_cents: int = Field(0, ge=0)


class TransitionRequest(BaseModel):
    event: JobEvent


class PayoutBreakdownSchema(BaseModel):
    """Money columns, integer cents."""

    labor_total_cents: int
    materials_total_cents: int
    transaction_fee_cents: int
    contractor_payout_cents: int
    router_earnings_cents: int
    platform_fee_cents: int
    total_cents: int


class JobResponse(TimestampMixin):
    """Job response schema."""

    id: UUID
    title: str
    scope: Optional[str] = None
    status: JobStatus
    routing_status: RoutingStatus
    archived: bool
    job_poster_user_id: Optional[UUID] = None
    claimed_by_user_id: Optional[UUID] = None
    contractor_user_id: Optional[UUID] = None
    admin_routed_by_id: Optional[UUID] = None
    pricing: PayoutBreakdownSchema
    posted_at: Optional[datetime] = None
    routing_due_at: Optional[datetime] = None
    claimed_at: Optional[datetime] = None
    first_routed_at: Optional[datetime] = None
    routed_at: Optional[datetime] = None
    contractor_completed_at: Optional[datetime] = None
    customer_approved_at: Optional[datetime] = None
    router_approved_at: Optional[datetime] = None
    escrow_locked_at: Optional[datetime] = None
    estimated_completion_date: Optional[datetime] = None

    @classmethod
    def from_entity(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            title=job.title,
            scope=job.scope,
            status=job.status,
            routing_status=job.routing_status,
            archived=job.archived,
            job_poster_user_id=job.job_poster_user_id,
            claimed_by_user_id=job.claimed_by_user_id,
            contractor_user_id=job.contractor_user_id,
            admin_routed_by_id=job.admin_routed_by_id,
            pricing=PayoutBreakdownSchema(
                labor_total_cents=job.labor_total_cents,
                materials_total_cents=job.materials_total_cents,
                transaction_fee_cents=job.transaction_fee_cents,
                contractor_payout_cents=job.contractor_payout_cents,
                router_earnings_cents=job.router_earnings_cents,
                platform_fee_cents=job.broker_fee_cents,
                total_cents=job.total_cents,
            ),
            posted_at=job.posted_at,
            routing_due_at=job.routing_due_at,
            claimed_at=job.claimed_at,
            first_routed_at=job.first_routed_at,
            routed_at=job.routed_at,
            contractor_completed_at=job.contractor_completed_at,
            customer_approved_at=job.customer_approved_at,
            router_approved_at=job.router_approved_at,
            escrow_locked_at=job.escrow_locked_at,
            estimated_completion_date=job.estimated_completion_date,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
