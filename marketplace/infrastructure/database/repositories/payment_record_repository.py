"""Payment record repository implementation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.application.interfaces.repositories import (
    PaymentRecordRepositoryInterface,
)
from marketplace.config.logging import get_logger
from marketplace.domain.entities.payment_record import PaymentRecord
from marketplace.domain.value_objects.payment_status import PaymentStatus
from marketplace.infrastructure.database.models.payment_record import (
    PaymentRecordModel,
)
from marketplace.infrastructure.database.utils import as_utc, dialect_insert

logger = get_logger(__name__)

_REPLACEABLE = [status.value for status in PaymentStatus if status.can_be_replaced()]


class PaymentRecordRepository(PaymentRecordRepositoryInterface):
    """Payment record repository implementation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_job_id(self, job_id: UUID) -> Optional[PaymentRecord]:
        """Get the payment record for a job."""
        stmt = (
            select(PaymentRecordModel)
            .where(PaymentRecordModel.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        model = result.scalar_one_or_none()

        return self._model_to_entity(model) if model else None

    async def upsert_pending(self, record: PaymentRecord) -> Optional[PaymentRecord]:
        """Insert the job's record, or overwrite a not-yet-captured one.

        Concurrent callers with the same (job, amount) send identical values,
        so whichever write lands last leaves the same row behind.
        """
        insert_stmt = dialect_insert(self.db, PaymentRecordModel).values(
            id=record.id,
            job_id=record.job_id,
            provider_intent_id=record.provider_intent_id,
            provider_status=record.provider_status,
            client_secret=record.client_secret,
            amount_cents=record.amount_cents,
            currency=record.currency,
            idempotency_key=record.idempotency_key,
            intent_revision=record.intent_revision,
            status=PaymentStatus.PENDING.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        excluded = insert_stmt.excluded
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["job_id"],
            set_={
                "provider_intent_id": excluded.provider_intent_id,
                "provider_status": excluded.provider_status,
                "client_secret": excluded.client_secret,
                "amount_cents": excluded.amount_cents,
                "currency": excluded.currency,
                "idempotency_key": excluded.idempotency_key,
                "intent_revision": excluded.intent_revision,
                "status": PaymentStatus.PENDING.value,
                "updated_at": excluded.updated_at,
            },
            where=PaymentRecordModel.status.in_(_REPLACEABLE),
        ).returning(PaymentRecordModel.id)

        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None

        logger.info(
            "Payment record upserted",
            job_id=str(record.job_id),
            provider_intent_id=record.provider_intent_id,
            amount_cents=record.amount_cents,
        )
        return await self.get_by_job_id(record.job_id)

    async def mark_captured(
        self, job_id: UUID, intent_id: str, provider_status: str, now: datetime
    ) -> bool:
        """PENDING or FAILED to CAPTURED for the given intent."""
        stmt = (
            update(PaymentRecordModel)
            .where(
                and_(
                    PaymentRecordModel.job_id == job_id,
                    PaymentRecordModel.provider_intent_id == intent_id,
                    PaymentRecordModel.status.in_(_REPLACEABLE),
                )
            )
            .values(
                status=PaymentStatus.CAPTURED.value,
                provider_status=provider_status,
                captured_at=now,
            )
            .returning(PaymentRecordModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_failed(
        self, job_id: UUID, intent_id: str, provider_status: str
    ) -> bool:
        """PENDING to FAILED for the given intent."""
        stmt = (
            update(PaymentRecordModel)
            .where(
                and_(
                    PaymentRecordModel.job_id == job_id,
                    PaymentRecordModel.provider_intent_id == intent_id,
                    PaymentRecordModel.status == PaymentStatus.PENDING.value,
                )
            )
            .values(status=PaymentStatus.FAILED.value, provider_status=provider_status)
            .returning(PaymentRecordModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def mark_refunded(
        self, job_id: UUID, refund_id: str, amount_cents: int, now: datetime
    ) -> bool:
        """CAPTURED to REFUNDED."""
        stmt = (
            update(PaymentRecordModel)
            .where(
                and_(
                    PaymentRecordModel.job_id == job_id,
                    PaymentRecordModel.status == PaymentStatus.CAPTURED.value,
                )
            )
            .values(
                status=PaymentStatus.REFUNDED.value,
                provider_refund_id=refund_id,
                refund_amount_cents=amount_cents,
                refunded_at=now,
            )
            .returning(PaymentRecordModel.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    def _model_to_entity(self, model: PaymentRecordModel) -> PaymentRecord:
        """Convert SQLAlchemy model to domain entity."""
        return PaymentRecord(
            id=model.id,
            job_id=model.job_id,
            provider_intent_id=model.provider_intent_id,
            provider_status=model.provider_status,
            client_secret=model.client_secret,
            amount_cents=model.amount_cents,
            currency=model.currency,
            idempotency_key=model.idempotency_key,
            intent_revision=model.intent_revision or 0,
            status=model.status,
            provider_refund_id=model.provider_refund_id,
            refund_amount_cents=model.refund_amount_cents,
            captured_at=as_utc(model.captured_at),
            refunded_at=as_utc(model.refunded_at),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
