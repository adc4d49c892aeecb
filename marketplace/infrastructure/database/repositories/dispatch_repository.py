"""Dispatch repository implementation."""

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.application.interfaces.repositories import DispatchRepositoryInterface
from marketplace.config.logging import get_logger
from marketplace.domain.entities.dispatch import Dispatch
from marketplace.domain.exceptions.conflict_error import (
    AlreadyAssignedError,
    ConflictError,
)
from marketplace.domain.value_objects.dispatch_status import DispatchStatus
from marketplace.infrastructure.database.models.dispatch import DispatchModel
from marketplace.infrastructure.database.utils import as_utc

logger = get_logger(__name__)


class DispatchRepository(DispatchRepositoryInterface):
    """Dispatch repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_many(self, dispatches: Sequence[Dispatch]) -> List[Dispatch]:
        """Persist a batch of new offers."""
        models = [
            DispatchModel(
                id=dispatch.id,
                job_id=dispatch.job_id,
                contractor_id=dispatch.contractor_id,
                router_user_id=dispatch.router_user_id,
                status=dispatch.status.value,
                token_hash=dispatch.token_hash,
                expires_at=dispatch.expires_at,
                created_at=dispatch.created_at,
                updated_at=dispatch.updated_at,
            )
            for dispatch in dispatches
        ]
        self.db.add_all(models)
        await self.db.flush()

        logger.info(
            "Dispatches created",
            count=len(models),
            job_ids=sorted({str(model.job_id) for model in models}),
        )
        return [self._model_to_entity(model) for model in models]

    async def get_by_token_hash(self, token_hash: str) -> Optional[Dispatch]:
        """Find the offer for a hashed token."""
        stmt = (
            select(DispatchModel)
            .where(DispatchModel.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return self._model_to_entity(model) if model else None

    async def list_pending_for_job(self, job_id: UUID, now: datetime) -> List[Dispatch]:
        """Pending, unexpired offers on a job."""
        stmt = (
            select(DispatchModel)
            .where(
                and_(
                    DispatchModel.job_id == job_id,
                    DispatchModel.status == DispatchStatus.PENDING.value,
                    DispatchModel.expires_at > now,
                )
            )
            .order_by(DispatchModel.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def list_open_for_contractor(
        self, contractor_id: UUID, now: datetime
    ) -> List[Dispatch]:
        """Pending, unexpired offers addressed to a contractor."""
        stmt = (
            select(DispatchModel)
            .where(
                and_(
                    DispatchModel.contractor_id == contractor_id,
                    DispatchModel.status == DispatchStatus.PENDING.value,
                    DispatchModel.expires_at > now,
                )
            )
            .order_by(DispatchModel.expires_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return [self._model_to_entity(model) for model in result.scalars().all()]

    async def has_accepted(self, job_id: UUID) -> bool:
        """Check if any offer on the job was accepted."""
        stmt = (
            select(DispatchModel.id)
            .where(
                and_(
                    DispatchModel.job_id == job_id,
                    DispatchModel.status == DispatchStatus.ACCEPTED.value,
                )
            )
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_accepted(self, dispatch_id: UUID, now: datetime) -> bool:
        """PENDING and unexpired to ACCEPTED.

        A sibling that won concurrently trips the single-accepted index.
        """
        try:
            return await self._respond(dispatch_id, DispatchStatus.ACCEPTED, now)
        except IntegrityError as e:
            raise ConflictError(
                f"Another offer on the job of dispatch {dispatch_id} was accepted",
                code=AlreadyAssignedError.code,
            ) from e

    async def mark_declined(self, dispatch_id: UUID, now: datetime) -> bool:
        """PENDING and unexpired to DECLINED."""
        return await self._respond(dispatch_id, DispatchStatus.DECLINED, now)

    async def expire_pending_for_job(
        self, job_id: UUID, now: datetime, exclude_id: Optional[UUID] = None
    ) -> int:
        """Expire every other pending offer on a job."""
        conditions = [
            DispatchModel.job_id == job_id,
            DispatchModel.status == DispatchStatus.PENDING.value,
        ]
        if exclude_id is not None:
            conditions.append(DispatchModel.id != exclude_id)

        stmt = (
            update(DispatchModel)
            .where(and_(*conditions))
            .values(status=DispatchStatus.EXPIRED.value)
            .returning(DispatchModel.id)
        )
        result = await self.db.execute(stmt)
        expired = len(result.scalars().all())

        if expired:
            logger.info("Sibling dispatches expired", job_id=str(job_id), count=expired)
        return expired

    async def expire_stale(self, now: datetime) -> int:
        """Expire pending offers whose window has closed."""
        stmt = (
            update(DispatchModel)
            .where(
                and_(
                    DispatchModel.status == DispatchStatus.PENDING.value,
                    DispatchModel.expires_at <= now,
                )
            )
            .values(status=DispatchStatus.EXPIRED.value)
            .returning(DispatchModel.id)
        )
        result = await self.db.execute(stmt)
        return len(result.scalars().all())

    async def _respond(
        self, dispatch_id: UUID, status: DispatchStatus, now: datetime
    ) -> bool:
        stmt = (
            update(DispatchModel)
            .where(
                and_(
                    DispatchModel.id == dispatch_id,
                    DispatchModel.status == DispatchStatus.PENDING.value,
                    DispatchModel.expires_at > now,
                )
            )
            .values(status=status.value, responded_at=now)
            .returning(DispatchModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    def _model_to_entity(self, model: DispatchModel) -> Dispatch:
        """Convert SQLAlchemy model to domain entity."""
        return Dispatch(
            id=model.id,
            job_id=model.job_id,
            contractor_id=model.contractor_id,
            router_user_id=model.router_user_id,
            status=model.status,
            token_hash=model.token_hash,
            expires_at=as_utc(model.expires_at),
            responded_at=as_utc(model.responded_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
