"""Monitoring event repository implementation."""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.application.interfaces.repositories import (
    MonitoringEventRepositoryInterface,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.monitoring_event import (
    JobSummary,
    MonitoringEvent,
    MonitoringEventView,
)
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.monitoring import MonitoringEventType
from marketplace.infrastructure.database.models.job import JobModel
from marketplace.infrastructure.database.models.monitoring_event import (
    MonitoringEventModel,
)
from marketplace.infrastructure.database.utils import as_utc, dialect_insert

logger = get_logger(__name__)

# Seven bind parameters per row; asyncpg caps a statement at 32767.
INSERT_BATCH_SIZE = 1000


class MonitoringEventRepository(MonitoringEventRepositoryInterface):
    """Monitoring event repository implementation."""

    def __init__(self, db: AsyncSession, batch_size: int = INSERT_BATCH_SIZE):
        self.db = db
        self.batch_size = batch_size

    async def insert_ignoring_duplicates(
        self, events: Sequence[MonitoringEvent]
    ) -> List[MonitoringEvent]:
        """Insert events, skipping any (job_id, type) already present."""
        if not events:
            return []

        rows = [
            {
                "id": event.id,
                "job_id": event.job_id,
                "type": event.type.value,
                "role": event.role.value,
                "user_id": event.user_id,
                "created_at": event.created_at,
                "updated_at": event.created_at,
            }
            for event in events
        ]
        inserted_ids = set()
        for start in range(0, len(rows), self.batch_size):
            stmt = (
                dialect_insert(self.db, MonitoringEventModel)
                .values(rows[start : start + self.batch_size])
                .on_conflict_do_nothing(index_elements=["job_id", "type"])
                .returning(MonitoringEventModel.id)
            )
            result = await self.db.execute(stmt)
            inserted_ids.update(result.scalars().all())

        inserted = [event for event in events if event.id in inserted_ids]
        logger.debug(
            "Monitoring events inserted",
            attempted=len(events),
            inserted=len(inserted),
        )
        return inserted

    async def list_events(
        self,
        limit: int,
        cursor: Optional[UUID] = None,
        event_type: Optional[MonitoringEventType] = None,
        job_id: Optional[UUID] = None,
        unhandled_only: bool = False,
    ) -> Tuple[List[MonitoringEventView], Optional[UUID]]:
        """Newest-first page of events and the cursor for the next page."""
        stmt = (
            select(MonitoringEventModel, JobModel)
            .outerjoin(JobModel, JobModel.id == MonitoringEventModel.job_id)
            .execution_options(populate_existing=True)
        )

        conditions = []
        if event_type is not None:
            conditions.append(
                MonitoringEventModel.type == MonitoringEventType(event_type).value
            )
        if job_id is not None:
            conditions.append(MonitoringEventModel.job_id == job_id)
        if unhandled_only:
            conditions.append(MonitoringEventModel.handled_at.is_(None))

        if cursor is not None:
            anchor = await self.db.execute(
                select(MonitoringEventModel.created_at).where(
                    MonitoringEventModel.id == cursor
                )
            )
            anchor_created_at = anchor.scalar_one_or_none()
            if anchor_created_at is None:
                raise ValidationError(f"Unknown cursor {cursor}")
            conditions.append(
                or_(
                    MonitoringEventModel.created_at < anchor_created_at,
                    and_(
                        MonitoringEventModel.created_at == anchor_created_at,
                        MonitoringEventModel.id < cursor,
                    ),
                )
            )

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(
            MonitoringEventModel.created_at.desc(), MonitoringEventModel.id.desc()
        ).limit(limit + 1)

        result = await self.db.execute(stmt)
        rows = result.all()

        has_more = len(rows) > limit
        page = rows[:limit]
        views = [
            MonitoringEventView(
                event=self._model_to_entity(event_model),
                job=self._job_summary(job_model) if job_model else None,
            )
            for event_model, job_model in page
        ]
        next_cursor = views[-1].event.id if has_more and views else None
        return views, next_cursor

    async def get_by_id(self, event_id: UUID) -> Optional[MonitoringEvent]:
        """Get monitoring event by ID."""
        result = await self.db.execute(
            select(MonitoringEventModel)
            .where(MonitoringEventModel.id == event_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    async def mark_handled(self, event_id: UUID, now: datetime) -> bool:
        """Stamp handled_at once."""
        stmt = (
            update(MonitoringEventModel)
            .where(
                and_(
                    MonitoringEventModel.id == event_id,
                    MonitoringEventModel.handled_at.is_(None),
                )
            )
            .values(handled_at=now)
            .returning(MonitoringEventModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    def _job_summary(model: JobModel) -> JobSummary:
        return JobSummary(
            job_id=model.id,
            title=model.title,
            status=model.status,
            routing_status=model.routing_status,
            posted_at=as_utc(model.posted_at),
            routing_due_at=as_utc(model.routing_due_at),
            first_routed_at=as_utc(model.first_routed_at),
        )

    def _model_to_entity(self, model: MonitoringEventModel) -> MonitoringEvent:
        """Convert SQLAlchemy model to domain entity."""
        return MonitoringEvent(
            id=model.id,
            job_id=model.job_id,
            type=model.type,
            role=model.role,
            user_id=model.user_id,
            created_at=as_utc(model.created_at),
            handled_at=as_utc(model.handled_at),
        )
