"""Job repository implementation."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from marketplace.application.interfaces.repositories import JobRepositoryInterface
from marketplace.config.logging import get_logger
from marketplace.domain.entities.assignment import JobAssignment
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import NotEligibleError
from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus
from marketplace.domain.value_objects.monitoring import MonitoringEventType
from marketplace.domain.value_objects.payout_breakdown import PayoutBreakdown
from marketplace.infrastructure.database.models.assignment import JobAssignmentModel
from marketplace.infrastructure.database.models.job import JobModel
from marketplace.infrastructure.database.models.monitoring_event import (
    MonitoringEventModel,
)
from marketplace.infrastructure.database.repositories.assignment_repository import (
    assignment_model_to_entity,
)
from marketplace.infrastructure.database.utils import as_utc

logger = get_logger(__name__)

ROUTABLE_STATUSES = [status.value for status in JobStatus.routable()]


class JobRepository(JobRepositoryInterface):
    """Job repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(
        self, job_id: UUID, include_archived: bool = False
    ) -> Optional[Job]:
        """Get job by ID."""
        stmt = (
            select(JobModel)
            .where(JobModel.id == job_id)
            .execution_options(populate_existing=True)
        )
        if not include_archived:
            stmt = stmt.where(JobModel.archived.is_(False))
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return self._model_to_entity(model) if model else None

    async def create(self, job: Job) -> Job:
        """Create a new job."""
        model = JobModel(
            id=job.id,
            title=job.title,
            scope=job.scope,
            job_poster_user_id=job.job_poster_user_id,
            status=job.status.value,
            routing_status=job.routing_status.value,
            archived=job.archived,
            labor_total_cents=job.labor_total_cents,
            materials_total_cents=job.materials_total_cents,
            transaction_fee_cents=job.transaction_fee_cents,
            contractor_payout_cents=job.contractor_payout_cents,
            router_earnings_cents=job.router_earnings_cents,
            broker_fee_cents=job.broker_fee_cents,
            posted_at=job.posted_at,
            routing_due_at=job.routing_due_at,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )

        self.db.add(model)
        # Flush only; the caller's transaction decides when to commit
        await self.db.flush()
        await self.db.refresh(model)

        logger.info("Job created", job_id=str(model.id), status=model.status)
        return self._model_to_entity(model)

    async def update_pricing(
        self, job_id: UUID, breakdown: PayoutBreakdown
    ) -> Optional[Job]:
        """Store new money columns unless escrow is already locked."""
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.archived.is_(False),
                    JobModel.escrow_locked_at.is_(None),
                )
            )
            .values(
                labor_total_cents=breakdown.labor_total_cents,
                materials_total_cents=breakdown.materials_total_cents,
                transaction_fee_cents=breakdown.transaction_fee_cents,
                contractor_payout_cents=breakdown.contractor_payout_cents,
                router_earnings_cents=breakdown.router_earnings_cents,
                broker_fee_cents=breakdown.platform_fee_cents,
            )
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None

        logger.info(
            "Job pricing updated",
            job_id=str(job_id),
            total_cents=breakdown.total_cents,
        )
        return await self.get_by_id(job_id)

    async def transition_status(
        self,
        job_id: UUID,
        from_status: JobStatus,
        to_status: JobStatus,
        values: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Move the job from one status to another in a single conditional write."""
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.status == JobStatus(from_status).value,
                    JobModel.archived.is_(False),
                )
            )
            .values(status=JobStatus(to_status).value, **(values or {}))
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def claim(self, job_id: UUID, router_id: UUID, now: datetime) -> bool:
        """Claim an unclaimed, unrouted job for a router with no other claim.

        The NOT EXISTS keeps the common case to one statement; the partial
        unique index on (claimed_by_user_id) catches the concurrent case.
        """
        other = aliased(JobModel)
        router_holds_another = exists().where(
            and_(
                other.claimed_by_user_id == router_id,
                other.routing_status == RoutingStatus.UNROUTED.value,
                other.archived.is_(False),
                other.id != job_id,
            )
        )
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.claimed_by_user_id.is_(None),
                    JobModel.archived.is_(False),
                    JobModel.routing_status == RoutingStatus.UNROUTED.value,
                    JobModel.status.in_(ROUTABLE_STATUSES),
                    ~router_holds_another,
                )
            )
            .values(claimed_by_user_id=router_id, claimed_at=now)
            .returning(JobModel.id)
        )
        try:
            result = await self.db.execute(stmt)
        except IntegrityError as e:
            logger.info(
                "Claim rejected by unique claim index",
                job_id=str(job_id),
                router_id=str(router_id),
            )
            raise NotEligibleError(job_id, "router already holds an unrouted job") from e

        return result.scalar_one_or_none() is not None

    async def release_claim(self, job_id: UUID, router_id: UUID) -> bool:
        """Drop a router's claim on a job that has not been fanned out."""
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.claimed_by_user_id == router_id,
                    JobModel.routing_status == RoutingStatus.UNROUTED.value,
                    JobModel.archived.is_(False),
                )
            )
            .values(claimed_by_user_id=None, claimed_at=None)
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count_unrouted_claims(self, router_id: UUID) -> int:
        """Number of claimed-but-unrouted jobs held by the router."""
        stmt = select(func.count(JobModel.id)).where(
            and_(
                JobModel.claimed_by_user_id == router_id,
                JobModel.routing_status == RoutingStatus.UNROUTED.value,
                JobModel.archived.is_(False),
            )
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def mark_routed_by_router(self, job_id: UUID, router_id: UUID) -> bool:
        """Flip a claimed job to ROUTED_BY_ROUTER."""
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.claimed_by_user_id == router_id,
                    JobModel.routing_status == RoutingStatus.UNROUTED.value,
                    JobModel.archived.is_(False),
                )
            )
            .values(routing_status=RoutingStatus.ROUTED_BY_ROUTER.value)
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def assign_contractor(
        self,
        job_id: UUID,
        contractor_id: UUID,
        now: datetime,
        estimated_completion_date: Optional[datetime] = None,
    ) -> bool:
        """Assign the job to a contractor if nobody holds it yet."""
        values: Dict[str, Any] = {
            "status": JobStatus.ASSIGNED.value,
            "contractor_user_id": contractor_id,
            "routed_at": now,
            # first_routed_at never moves once set
            "first_routed_at": func.coalesce(JobModel.first_routed_at, now),
        }
        if estimated_completion_date is not None:
            values["estimated_completion_date"] = func.coalesce(
                JobModel.estimated_completion_date, estimated_completion_date
            )

        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.contractor_user_id.is_(None),
                    JobModel.archived.is_(False),
                    JobModel.status.in_(ROUTABLE_STATUSES),
                )
            )
            .values(**values)
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def admin_route(self, job_id: UUID, admin_id: UUID, now: datetime) -> bool:
        """Take over routing of an unclaimed, unrouted job as an admin."""
        stmt = (
            update(JobModel)
            .where(
                and_(
                    JobModel.id == job_id,
                    JobModel.routing_status == RoutingStatus.UNROUTED.value,
                    JobModel.claimed_by_user_id.is_(None),
                    JobModel.contractor_user_id.is_(None),
                    JobModel.archived.is_(False),
                    JobModel.status.in_(ROUTABLE_STATUSES),
                )
            )
            .values(
                routing_status=RoutingStatus.ROUTED_BY_ADMIN.value,
                admin_routed_by_id=admin_id,
                routed_at=now,
                first_routed_at=func.coalesce(JobModel.first_routed_at, now),
            )
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def lock_escrow(self, job_id: UUID, now: datetime) -> bool:
        """Set escrow_locked_at once."""
        stmt = (
            update(JobModel)
            .where(and_(JobModel.id == job_id, JobModel.escrow_locked_at.is_(None)))
            .values(escrow_locked_at=now, payment_captured_at=now)
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def archive(self, job_id: UUID) -> bool:
        """Soft delete a job."""
        stmt = (
            update(JobModel)
            .where(and_(JobModel.id == job_id, JobModel.archived.is_(False)))
            .values(archived=True)
            .returning(JobModel.id)
        )
        result = await self.db.execute(stmt)
        archived = result.scalar_one_or_none() is not None
        if archived:
            logger.info("Job archived", job_id=str(job_id))
        return archived

    async def find_unrouted_open(self) -> List[Job]:
        """Unrouted, non-archived jobs still waiting for a router."""
        stmt = (
            select(JobModel)
            .where(
                and_(
                    JobModel.routing_status == RoutingStatus.UNROUTED.value,
                    JobModel.status.in_(ROUTABLE_STATUSES),
                    JobModel.archived.is_(False),
                    JobModel.posted_at.is_not(None),
                )
            )
            .order_by(JobModel.posted_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_routed_missing_event(self) -> List[Job]:
        """Routed jobs without a JOB_ROUTED monitoring event."""
        stmt = (
            select(JobModel)
            .where(
                and_(
                    JobModel.first_routed_at.is_not(None),
                    JobModel.archived.is_(False),
                    ~self._has_event(MonitoringEventType.JOB_ROUTED),
                )
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def find_completion_candidates(
        self,
    ) -> List[Tuple[Job, Optional[JobAssignment]]]:
        """Jobs that look complete and have no JOB_COMPLETED event yet."""
        stmt = (
            select(JobModel, JobAssignmentModel)
            .outerjoin(JobAssignmentModel, JobAssignmentModel.job_id == JobModel.id)
            .where(
                and_(
                    JobModel.archived.is_(False),
                    or_(
                        JobModel.status == JobStatus.COMPLETED_APPROVED.value,
                        JobModel.customer_approved_at.is_not(None),
                        JobAssignmentModel.completed_at.is_not(None),
                    ),
                    ~self._has_event(MonitoringEventType.JOB_COMPLETED),
                )
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [
            (
                self._model_to_entity(job_model),
                assignment_model_to_entity(assignment_model)
                if assignment_model
                else None,
            )
            for job_model, assignment_model in result.all()
        ]

    @staticmethod
    def _has_event(event_type: MonitoringEventType):
        return exists().where(
            and_(
                MonitoringEventModel.job_id == JobModel.id,
                MonitoringEventModel.type == event_type.value,
            )
        )

    def _model_to_entity(self, model: JobModel) -> Job:
        """Convert SQLAlchemy model to domain entity."""
        return Job(
            id=model.id,
            title=model.title,
            scope=model.scope,
            job_poster_user_id=model.job_poster_user_id,
            status=model.status,
            routing_status=model.routing_status,
            archived=bool(model.archived),
            status_before_dispute=model.status_before_dispute,
            labor_total_cents=model.labor_total_cents,
            materials_total_cents=model.materials_total_cents,
            transaction_fee_cents=model.transaction_fee_cents,
            contractor_payout_cents=model.contractor_payout_cents,
            router_earnings_cents=model.router_earnings_cents,
            broker_fee_cents=model.broker_fee_cents,
            claimed_by_user_id=model.claimed_by_user_id,
            contractor_user_id=model.contractor_user_id,
            admin_routed_by_id=model.admin_routed_by_id,
            posted_at=as_utc(model.posted_at),
            routing_due_at=as_utc(model.routing_due_at),
            claimed_at=as_utc(model.claimed_at),
            first_routed_at=as_utc(model.first_routed_at),
            routed_at=as_utc(model.routed_at),
            contractor_completed_at=as_utc(model.contractor_completed_at),
            customer_approved_at=as_utc(model.customer_approved_at),
            router_approved_at=as_utc(model.router_approved_at),
            escrow_locked_at=as_utc(model.escrow_locked_at),
            payment_captured_at=as_utc(model.payment_captured_at),
            estimated_completion_date=as_utc(model.estimated_completion_date),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
