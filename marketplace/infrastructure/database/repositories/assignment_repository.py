"""Job assignment repository implementation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.application.interfaces.repositories import (
    AssignmentRepositoryInterface,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.assignment import COMPLETED, JobAssignment
from marketplace.domain.exceptions.conflict_error import AlreadyAssignedError
from marketplace.infrastructure.database.models.assignment import JobAssignmentModel
from marketplace.infrastructure.database.utils import as_utc, dialect_insert

logger = get_logger(__name__)


def assignment_model_to_entity(model: JobAssignmentModel) -> JobAssignment:
    """Convert SQLAlchemy model to domain entity."""
    return JobAssignment(
        id=model.id,
        job_id=model.job_id,
        contractor_id=model.contractor_id,
        status=model.status,
        completed_at=as_utc(model.completed_at),
        created_at=as_utc(model.created_at),
    )


class AssignmentRepository(AssignmentRepositoryInterface):
    """Job assignment repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_job_id(self, job_id: UUID) -> Optional[JobAssignment]:
        """Get the assignment for a job."""
        stmt = (
            select(JobAssignmentModel)
            .where(JobAssignmentModel.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return assignment_model_to_entity(model) if model else None

    async def create(self, assignment: JobAssignment) -> JobAssignment:
        """Create the job's only assignment."""
        stmt = (
            dialect_insert(self.db, JobAssignmentModel)
            .values(
                id=assignment.id,
                job_id=assignment.job_id,
                contractor_id=assignment.contractor_id,
                status=assignment.status,
                created_at=assignment.created_at,
                updated_at=assignment.created_at,
            )
            .on_conflict_do_nothing(index_elements=["job_id"])
            .returning(JobAssignmentModel.id)
        )
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise AlreadyAssignedError(assignment.job_id)

        logger.info(
            "Job assignment created",
            job_id=str(assignment.job_id),
            contractor_id=str(assignment.contractor_id),
        )
        return assignment

    async def mark_completed(self, job_id: UUID, now: datetime) -> bool:
        """Stamp completed_at once."""
        stmt = (
            update(JobAssignmentModel)
            .where(
                and_(
                    JobAssignmentModel.job_id == job_id,
                    JobAssignmentModel.completed_at.is_(None),
                )
            )
            .values(completed_at=now, status=COMPLETED)
            .returning(JobAssignmentModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None
