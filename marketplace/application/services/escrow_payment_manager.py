"""
Escrow payment manager.

Creates the job poster's payment intent, confirms captures and locks escrow.
Intent creation is idempotent per (job, amount, revision): the provider
idempotency key is derived from all three, so retries replay the same intent.
A changed amount cancels the stale intent and bumps the revision, so going
back to an earlier amount never replays an intent that was already canceled.
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID

from marketplace.application.interfaces.providers import (
    CreateIntentRequest,
    PaymentIntent,
    PaymentProviderInterface,
)
from marketplace.application.interfaces.repositories import (
    JobRepositoryInterface,
    PaymentRecordRepositoryInterface,
)
from marketplace.application.services.job_state_machine import JobStateMachine
from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.domain.entities.job import Job
from marketplace.domain.entities.payment_record import PaymentRecord
from marketplace.domain.exceptions.conflict_error import (
    AlreadyFundedError,
    ConflictError,
    StaleStateError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.exceptions.validation_error import ValidationError
from marketplace.domain.value_objects.job_status import JobEvent, JobStatus
from marketplace.domain.value_objects.payment_status import PaymentStatus
from marketplace.infrastructure.monitoring.metrics import record_payment_intent

logger = get_logger(__name__)

UNPAID = "UNPAID"


def intent_idempotency_key(job_id: UUID, amount_cents: int, revision: int = 0) -> str:
    """Stable per (job, amount, revision); revision counts replaced intents."""
    raw = f"job_{job_id}_amount_{amount_cents}"
    if revision:
        raw = f"{raw}_rev_{revision}"
    return hashlib.sha256(raw.encode()).hexdigest()


def refund_idempotency_key(job_id: UUID, amount_cents: int) -> str:
    return hashlib.sha256(f"job_{job_id}_refund_{amount_cents}".encode()).hexdigest()


@dataclass
class PaymentIntentResult:
    """What the job poster's client needs to complete payment."""

    job_id: UUID
    provider_intent_id: str
    client_secret: Optional[str]
    amount_cents: int
    currency: str
    replaced_intent_id: Optional[str] = None


@dataclass
class PaymentStatusView:
    job_id: UUID
    status: str
    amount_cents: Optional[int] = None
    currency: Optional[str] = None
    provider_intent_id: Optional[str] = None
    escrow_locked_at: Optional[datetime] = None
    captured_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_amount_cents: Optional[int] = None


class EscrowPaymentManager:
    """Owns the payment record lifecycle for a job's escrow."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        payment_repo: PaymentRecordRepositoryInterface,
        provider: PaymentProviderInterface,
        state_machine: JobStateMachine,
        currency: Optional[str] = None,
    ):
        self.job_repo = job_repo
        self.payment_repo = payment_repo
        self.provider = provider
        self.state_machine = state_machine
        self.currency = currency or settings.PAYMENT_CURRENCY

    async def create_payment_intent(self, job_id: UUID) -> PaymentIntentResult:
        """Create or reuse the escrow intent for the job's current total.

        Raises:
            NotFoundError: job missing or archived
            ValidationError: no job poster, or nothing to charge
            AlreadyFundedError: escrow already locked or payment captured
            ConflictError: the provider only returns canceled intents
            ProviderError: the provider call failed
        """
        job = await self._get_job(job_id)
        if job.job_poster_user_id is None:
            raise ValidationError(f"Job {job_id} has no job poster")

        existing = await self.payment_repo.get_by_job_id(job_id)
        if job.is_escrow_locked or (existing and existing.status.is_funded()):
            record_payment_intent("already_funded")
            raise AlreadyFundedError(job_id)
        if existing and not existing.status.can_be_replaced():
            raise ConflictError(
                f"Payment for job {job_id} was refunded", code="PAYMENT_REFUNDED"
            )

        amount_cents = job.payout_breakdown().total_cents
        if amount_cents <= 0:
            raise ValidationError(f"Job {job_id} has no amount to charge")

        revision = existing.intent_revision if existing else 0
        if existing and not existing.matches_amount(amount_cents):
            await self._cancel_stale_intent(existing, amount_cents)
            revision += 1

        intent, revision = await self._create_live_intent(job, amount_cents, revision)
        replaced_intent_id = (
            existing.provider_intent_id
            if existing and existing.provider_intent_id != intent.id
            else None
        )

        record = await self.payment_repo.upsert_pending(
            PaymentRecord(
                job_id=job_id,
                provider_intent_id=intent.id,
                amount_cents=amount_cents,
                idempotency_key=intent_idempotency_key(job_id, amount_cents, revision),
                intent_revision=revision,
                currency=self.currency,
                provider_status=intent.status,
                client_secret=intent.client_secret,
            )
        )
        if record is None:
            record_payment_intent("already_funded")
            raise AlreadyFundedError(job_id)

        record_payment_intent("replaced" if replaced_intent_id else "created")
        logger.info(
            "Payment intent ready",
            job_id=str(job_id),
            intent_id=intent.id,
            amount_cents=amount_cents,
            intent_revision=revision,
            replaced_intent_id=replaced_intent_id,
        )
        return PaymentIntentResult(
            job_id=job_id,
            provider_intent_id=intent.id,
            client_secret=intent.client_secret,
            amount_cents=amount_cents,
            currency=self.currency,
            replaced_intent_id=replaced_intent_id,
        )

    async def confirm_payment(
        self, job_id: UUID, intent_id: str, now: Optional[datetime] = None
    ) -> PaymentRecord:
        """Verify a succeeded intent with the provider and lock escrow."""
        now = now or datetime.now(timezone.utc)

        record = await self.payment_repo.get_by_job_id(job_id)
        if record is None:
            raise NotFoundError("Payment", job_id)
        if record.provider_intent_id != intent_id:
            raise ConflictError(
                f"Intent {intent_id} does not belong to job {job_id}",
                code="INTENT_MISMATCH",
            )
        if record.status == PaymentStatus.CAPTURED:
            return record
        if record.status == PaymentStatus.REFUNDED:
            raise ConflictError(
                f"Payment for job {job_id} was refunded", code="PAYMENT_REFUNDED"
            )

        intent = await self.provider.retrieve_intent(intent_id)
        if not intent.succeeded:
            raise ConflictError(
                f"Intent {intent_id} has not succeeded (status {intent.status})",
                code="PAYMENT_NOT_SUCCEEDED",
            )
        if intent.amount_cents != record.amount_cents:
            raise ConflictError(
                f"Intent {intent_id} amount {intent.amount_cents} does not match "
                f"expected {record.amount_cents}",
                code="AMOUNT_MISMATCH",
            )

        job = await self._get_job(job_id)

        if not await self.payment_repo.mark_captured(job_id, intent_id, intent.status, now):
            current = await self.payment_repo.get_by_job_id(job_id)
            if current and current.status == PaymentStatus.CAPTURED:
                return current
            raise StaleStateError("Payment", job_id)

        await self.job_repo.lock_escrow(job_id, now)
        if job.status in (JobStatus.DRAFT, JobStatus.PUBLISHED):
            await self.state_machine.apply(job_id, JobEvent.OPEN_FOR_ROUTING, now)

        record_payment_intent("captured")
        logger.info(
            "Escrow locked",
            job_id=str(job_id),
            intent_id=intent_id,
            amount_cents=record.amount_cents,
        )
        return await self.payment_repo.get_by_job_id(job_id)

    async def mark_payment_failed(
        self, job_id: UUID, intent_id: str, provider_status: str
    ) -> bool:
        """Record a provider-reported failure on a pending intent."""
        failed = await self.payment_repo.mark_failed(job_id, intent_id, provider_status)
        if failed:
            record_payment_intent("failed")
            logger.warning(
                "Payment failed",
                job_id=str(job_id),
                intent_id=intent_id,
                provider_status=provider_status,
            )
        return failed

    async def get_payment_status(self, job_id: UUID) -> PaymentStatusView:
        """Current escrow view of a job."""
        job = await self._get_job(job_id)
        record = await self.payment_repo.get_by_job_id(job_id)
        if record is None:
            return PaymentStatusView(job_id=job_id, status=UNPAID)

        return PaymentStatusView(
            job_id=job_id,
            status=record.status.value,
            amount_cents=record.amount_cents,
            currency=record.currency,
            provider_intent_id=record.provider_intent_id,
            escrow_locked_at=job.escrow_locked_at,
            captured_at=record.captured_at,
            refunded_at=record.refunded_at,
            refund_amount_cents=record.refund_amount_cents,
        )

    async def refund_payment(
        self, job_id: UUID, now: Optional[datetime] = None
    ) -> PaymentRecord:
        """Refund a captured escrow in full.

        Escrow that was released by completion, or is frozen by a dispute,
        cannot be refunded here.
        """
        now = now or datetime.now(timezone.utc)
        job = await self.job_repo.get_by_id(job_id, include_archived=True)
        if job is None:
            raise NotFoundError("Job", job_id)

        record = await self.payment_repo.get_by_job_id(job_id)
        if record is not None and record.status == PaymentStatus.REFUNDED:
            return record
        if record is None or record.status != PaymentStatus.CAPTURED:
            raise ConflictError(f"Job {job_id} has no captured payment", code="NOT_FUNDED")
        if job.status == JobStatus.COMPLETED_APPROVED:
            raise ConflictError(
                f"Escrow for job {job_id} was already released",
                code="ESCROW_RELEASED",
            )
        if job.status == JobStatus.DISPUTED:
            raise ConflictError(f"Job {job_id} is under dispute", code="DISPUTED")

        refund = await self.provider.create_refund(
            record.provider_intent_id,
            record.amount_cents,
            refund_idempotency_key(job_id, record.amount_cents),
        )
        if not await self.payment_repo.mark_refunded(job_id, refund.id, refund.amount_cents, now):
            raise StaleStateError("Payment", job_id)

        record_payment_intent("refunded")
        logger.info(
            "Payment refunded",
            job_id=str(job_id),
            refund_id=refund.id,
            amount_cents=refund.amount_cents,
        )
        return await self.payment_repo.get_by_job_id(job_id)

    async def _create_live_intent(
        self, job: Job, amount_cents: int, revision: int
    ) -> Tuple[PaymentIntent, int]:
        """Create the intent for a revision, moving past one that was canceled.

        A replayed key returns whatever the provider holds for it, including an
        intent canceled out of band. Such an intent can never be paid, so the
        next revision is tried once before giving up.
        """
        intent = await self.provider.create_intent(
            self._intent_request(job, amount_cents, revision)
        )
        if not intent.canceled:
            return intent, revision

        logger.warning(
            "Provider replayed a canceled payment intent",
            job_id=str(job.id),
            intent_id=intent.id,
            intent_revision=revision,
        )
        revision += 1
        intent = await self.provider.create_intent(
            self._intent_request(job, amount_cents, revision)
        )
        if intent.canceled:
            raise ConflictError(
                f"Provider returned canceled intent {intent.id} for job {job.id}",
                code="INTENT_CANCELED",
            )
        return intent, revision

    def _intent_request(
        self, job: Job, amount_cents: int, revision: int
    ) -> CreateIntentRequest:
        return CreateIntentRequest(
            amount_cents=amount_cents,
            currency=self.currency,
            idempotency_key=intent_idempotency_key(job.id, amount_cents, revision),
            metadata={
                "job_id": str(job.id),
                "job_poster_user_id": str(job.job_poster_user_id),
                "type": "job_escrow",
            },
        )

    async def _cancel_stale_intent(
        self, existing: PaymentRecord, amount_cents: int
    ) -> None:
        """Best-effort cancel of an intent created for an outdated amount."""
        result = await self.provider.cancel_intent(existing.provider_intent_id)
        if not result.ok:
            logger.warning(
                "Failed to cancel stale payment intent",
                job_id=str(existing.job_id),
                intent_id=existing.provider_intent_id,
                error=result.error,
            )

        logger.info(
            "Stale payment intent replaced",
            job_id=str(existing.job_id),
            intent_id=existing.provider_intent_id,
            old_amount_cents=existing.amount_cents,
            new_amount_cents=amount_cents,
        )

    async def _get_job(self, job_id: UUID) -> Job:
        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job
