"""
Repository interfaces for dependency inversion.

Methods that change shared state are conditional writes: they return False
(or None) when the row did not match the expected state, and never retry.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from marketplace.domain.entities.assignment import JobAssignment
from marketplace.domain.entities.dispatch import Dispatch
from marketplace.domain.entities.job import Job
from marketplace.domain.entities.monitoring_event import (
    MonitoringEvent,
    MonitoringEventView,
)
from marketplace.domain.entities.payment_record import PaymentRecord
from marketplace.domain.value_objects.job_status import JobStatus
from marketplace.domain.value_objects.monitoring import MonitoringEventType
from marketplace.domain.value_objects.payout_breakdown import PayoutBreakdown


class JobRepositoryInterface(ABC):
    """Job repository interface."""

    @abstractmethod
    async def get_by_id(
        self, job_id: UUID, include_archived: bool = False
    ) -> Optional[Job]:
        """Get job by ID."""
        pass

    @abstractmethod
    async def create(self, job: Job) -> Job:
        """Create a new job."""
        pass

    @abstractmethod
    async def update_pricing(
        self, job_id: UUID, breakdown: PayoutBreakdown
    ) -> Optional[Job]:
        """Store new money columns unless escrow is already locked."""
        pass

    @abstractmethod
    async def transition_status(
        self,
        job_id: UUID,
        from_status: JobStatus,
        to_status: JobStatus,
        values: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Move the job from one status to another in a single conditional write."""
        pass

    @abstractmethod
    async def claim(self, job_id: UUID, router_id: UUID, now: datetime) -> bool:
        """Claim an unclaimed, unrouted job for a router with no other claim."""
        pass

    @abstractmethod
    async def release_claim(self, job_id: UUID, router_id: UUID) -> bool:
        """Drop a router's claim on a job that has not been fanned out."""
        pass

    @abstractmethod
    async def count_unrouted_claims(self, router_id: UUID) -> int:
        """Number of claimed-but-unrouted jobs held by the router."""
        pass

    @abstractmethod
    async def mark_routed_by_router(self, job_id: UUID, router_id: UUID) -> bool:
        """Flip a claimed job to ROUTED_BY_ROUTER."""
        pass

    @abstractmethod
    async def assign_contractor(
        self,
        job_id: UUID,
        contractor_id: UUID,
        now: datetime,
        estimated_completion_date: Optional[datetime] = None,
    ) -> bool:
        """Assign the job to a contractor if nobody holds it yet."""
        pass

    @abstractmethod
    async def admin_route(self, job_id: UUID, admin_id: UUID, now: datetime) -> bool:
        """Take over routing of an unclaimed, unrouted job as an admin."""
        pass

    @abstractmethod
    async def lock_escrow(self, job_id: UUID, now: datetime) -> bool:
        """Set escrow_locked_at once."""
        pass

    @abstractmethod
    async def archive(self, job_id: UUID) -> bool:
        """Soft delete a job."""
        pass

    @abstractmethod
    async def find_unrouted_open(self) -> List[Job]:
        """Unrouted, non-archived jobs still waiting for a router."""
        pass

    @abstractmethod
    async def find_routed_missing_event(self) -> List[Job]:
        """Routed jobs without a JOB_ROUTED monitoring event."""
        pass

    @abstractmethod
    async def find_completion_candidates(
        self,
    ) -> List[Tuple[Job, Optional[JobAssignment]]]:
        """Jobs that look complete and have no JOB_COMPLETED event yet."""
        pass


class DispatchRepositoryInterface(ABC):
    """Dispatch repository interface."""

    @abstractmethod
    async def create_many(self, dispatches: Sequence[Dispatch]) -> List[Dispatch]:
        """Persist a batch of new offers."""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[Dispatch]:
        """Find the offer for a hashed token."""
        pass

    @abstractmethod
    async def list_pending_for_job(self, job_id: UUID, now: datetime) -> List[Dispatch]:
        """Pending, unexpired offers on a job."""
        pass

    @abstractmethod
    async def list_open_for_contractor(
        self, contractor_id: UUID, now: datetime
    ) -> List[Dispatch]:
        """Pending, unexpired offers addressed to a contractor."""
        pass

    @abstractmethod
    async def has_accepted(self, job_id: UUID) -> bool:
        """Check if any offer on the job was accepted."""
        pass

    @abstractmethod
    async def mark_accepted(self, dispatch_id: UUID, now: datetime) -> bool:
        """PENDING and unexpired to ACCEPTED."""
        pass

    @abstractmethod
    async def mark_declined(self, dispatch_id: UUID, now: datetime) -> bool:
        """PENDING and unexpired to DECLINED."""
        pass

    @abstractmethod
    async def expire_pending_for_job(
        self, job_id: UUID, now: datetime, exclude_id: Optional[UUID] = None
    ) -> int:
        """Expire every other pending offer on a job."""
        pass

    @abstractmethod
    async def expire_stale(self, now: datetime) -> int:
        """Expire pending offers whose window has closed."""
        pass


class AssignmentRepositoryInterface(ABC):
    """Job assignment repository interface."""

    @abstractmethod
    async def get_by_job_id(self, job_id: UUID) -> Optional[JobAssignment]:
        """Get the assignment for a job."""
        pass

    @abstractmethod
    async def create(self, assignment: JobAssignment) -> JobAssignment:
        """Create the job's only assignment.

        Raises:
            AlreadyAssignedError: when the job already has one
        """
        pass

    @abstractmethod
    async def mark_completed(self, job_id: UUID, now: datetime) -> bool:
        """Stamp completed_at once."""
        pass


class MonitoringEventRepositoryInterface(ABC):
    """Monitoring event repository interface."""

    @abstractmethod
    async def insert_ignoring_duplicates(
        self, events: Sequence[MonitoringEvent]
    ) -> List[MonitoringEvent]:
        """Insert events, skipping any (job_id, type) already present.

        Returns only the events that were actually written.
        """
        pass

    @abstractmethod
    async def list_events(
        self,
        limit: int,
        cursor: Optional[UUID] = None,
        event_type: Optional[MonitoringEventType] = None,
        job_id: Optional[UUID] = None,
        unhandled_only: bool = False,
    ) -> Tuple[List[MonitoringEventView], Optional[UUID]]:
        """Newest-first page of events and the cursor for the next page."""
        pass

    @abstractmethod
    async def get_by_id(self, event_id: UUID) -> Optional[MonitoringEvent]:
        """Get monitoring event by ID."""
        pass

    @abstractmethod
    async def mark_handled(self, event_id: UUID, now: datetime) -> bool:
        """Stamp handled_at once."""
        pass


class PaymentRecordRepositoryInterface(ABC):
    """Payment record repository interface."""

    @abstractmethod
    async def get_by_job_id(self, job_id: UUID) -> Optional[PaymentRecord]:
        """Get the payment record for a job."""
        pass

    @abstractmethod
    async def upsert_pending(self, record: PaymentRecord) -> Optional[PaymentRecord]:
        """Insert the job's record, or overwrite a not-yet-captured one.

        Returns None when a captured or refunded record already exists.
        """
        pass

    @abstractmethod
    async def mark_captured(
        self, job_id: UUID, intent_id: str, provider_status: str, now: datetime
    ) -> bool:
        """PENDING or FAILED to CAPTURED for the given intent."""
        pass

    @abstractmethod
    async def mark_failed(
        self, job_id: UUID, intent_id: str, provider_status: str
    ) -> bool:
        """PENDING to FAILED for the given intent."""
        pass

    @abstractmethod
    async def mark_refunded(
        self, job_id: UUID, refund_id: str, amount_cents: int, now: datetime
    ) -> bool:
        """CAPTURED to REFUNDED."""
        pass
