"""
Dispatch fan-out engine.

Sends a routed job to a small set of contractors as time-boxed offers and
resolves the race between them: the first ACCEPT wins, every other pending
offer on the job is expired in the same transaction.
"""

import hashlib
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
from uuid import UUID

from marketplace.application.interfaces.repositories import (
    AssignmentRepositoryInterface,
    DispatchRepositoryInterface,
    JobRepositoryInterface,
)
from marketplace.application.services.claim_lock import ClaimLock
from marketplace.config.logging import get_logger
from marketplace.config.settings import settings
from marketplace.domain.entities.assignment import JobAssignment
from marketplace.domain.entities.dispatch import Dispatch
from marketplace.domain.entities.job import Job
from marketplace.domain.exceptions.conflict_error import (
    AlreadyAssignedError,
    AlreadyClaimedError,
    AlreadyRespondedError,
    ConflictError,
    NotEligibleError,
    StaleStateError,
)
from marketplace.domain.exceptions.expired_error import ExpiredError
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.exceptions.validation_error import (
    InvalidContractorSelectionError,
)
from marketplace.domain.value_objects.dispatch_status import (
    DispatchDecision,
    DispatchStatus,
)
from marketplace.domain.value_objects.job_status import RoutingStatus
from marketplace.infrastructure.monitoring.metrics import (
    record_dispatch_response,
    record_dispatches_expired,
    record_dispatches_issued,
)

logger = get_logger(__name__)

TOKEN_BYTES = 24


def generate_dispatch_token() -> str:
    """Random URL-safe token handed to the contractor."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_dispatch_token(token: str) -> str:
    """Only this digest is stored; the plaintext token never is."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass
class IssuedDispatch:
    """A freshly created offer together with its plaintext token."""

    dispatch: Dispatch
    token: str


@dataclass
class FanoutResult:
    job: Job
    issued: List[IssuedDispatch] = field(default_factory=list)
    skipped_contractor_ids: List[UUID] = field(default_factory=list)


@dataclass
class DispatchResponseResult:
    dispatch: Dispatch
    job: Optional[Job] = None
    assignment: Optional[JobAssignment] = None
    expired_siblings: int = 0


class DispatchFanoutEngine:
    """Creates offers for a routed job and settles contractor responses."""

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        dispatch_repo: DispatchRepositoryInterface,
        assignment_repo: AssignmentRepositoryInterface,
        claim_lock: Optional[ClaimLock] = None,
        ttl_hours: Optional[int] = None,
        max_contractors: Optional[int] = None,
    ):
        self.job_repo = job_repo
        self.dispatch_repo = dispatch_repo
        self.assignment_repo = assignment_repo
        self.claim_lock = claim_lock or ClaimLock(job_repo)
        self.ttl_hours = ttl_hours or settings.DISPATCH_TTL_HOURS
        self.max_contractors = max_contractors or settings.MAX_DISPATCH_CONTRACTORS

    def normalize_contractor_ids(self, contractor_ids: Iterable[UUID]) -> List[UUID]:
        """Deduplicate, keep order, and enforce the 1..max bound."""
        unique = list(dict.fromkeys(contractor_ids))
        if not 1 <= len(unique) <= self.max_contractors:
            raise InvalidContractorSelectionError(len(unique), self.max_contractors)
        return unique

    async def apply_routing(
        self,
        router_id: UUID,
        job_id: UUID,
        contractor_ids: Iterable[UUID],
        now: Optional[datetime] = None,
    ) -> FanoutResult:
        """Fan a job out to contractors on behalf of a router.

        An unclaimed job is claimed first. A job the same router already
        fanned out can be topped up with more contractors while the total of
        pending offers stays within the limit.
        """
        now = now or datetime.now(timezone.utc)
        selected = self.normalize_contractor_ids(contractor_ids)

        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)

        if job.claimed_by_user_id is None and job.routing_status == RoutingStatus.UNROUTED:
            job = await self.claim_lock.claim(job_id, router_id, now)
        elif job.claimed_by_user_id != router_id:
            if job.routing_status == RoutingStatus.ROUTED_BY_ADMIN:
                raise NotEligibleError(job_id, "job was routed by an admin")
            raise AlreadyClaimedError(job_id)

        self._ensure_dispatchable(job)
        result = await self._issue(job, router_id, selected, now, source="router")

        if job.routing_status == RoutingStatus.UNROUTED:
            if not await self.job_repo.mark_routed_by_router(job_id, router_id):
                raise StaleStateError("Job", job_id)
            result.job = await self.job_repo.get_by_id(job_id)

        logger.info(
            "Job fanned out by router",
            job_id=str(job_id),
            router_id=str(router_id),
            issued=len(result.issued),
            skipped=len(result.skipped_contractor_ids),
        )
        return result

    async def fan_out_as_admin(
        self,
        admin_id: UUID,
        job_id: UUID,
        contractor_ids: Iterable[UUID],
        now: Optional[datetime] = None,
    ) -> FanoutResult:
        """Send offers for a job an admin has taken over."""
        now = now or datetime.now(timezone.utc)
        selected = self.normalize_contractor_ids(contractor_ids)

        job = await self.job_repo.get_by_id(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        if job.routing_status != RoutingStatus.ROUTED_BY_ADMIN:
            raise NotEligibleError(job_id, "job is not routed by an admin")

        self._ensure_dispatchable(job)
        result = await self._issue(job, admin_id, selected, now, source="admin")
        logger.info(
            "Job fanned out by admin",
            job_id=str(job_id),
            admin_id=str(admin_id),
            issued=len(result.issued),
        )
        return result

    async def respond(
        self,
        token: str,
        decision: DispatchDecision,
        estimated_completion_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> DispatchResponseResult:
        """Record a contractor's answer to an offer."""
        now = now or datetime.now(timezone.utc)
        decision = DispatchDecision(decision)

        dispatch = await self.dispatch_repo.get_by_token_hash(hash_dispatch_token(token))
        if dispatch is None:
            record_dispatch_response(decision.value, "not_found")
            raise NotFoundError("Dispatch", "token")

        try:
            if decision == DispatchDecision.DECLINE:
                result = await self._decline(dispatch, now)
            else:
                result = await self._accept(dispatch, estimated_completion_date, now)
        except (AlreadyAssignedError, AlreadyRespondedError, ExpiredError) as e:
            record_dispatch_response(decision.value, e.code.lower())
            raise

        record_dispatch_response(decision.value, result.dispatch.status.value.lower())
        return result

    async def list_open_offers(
        self, contractor_id: UUID, now: Optional[datetime] = None
    ) -> List[Dispatch]:
        """Pending, unexpired offers for a contractor."""
        now = now or datetime.now(timezone.utc)
        return await self.dispatch_repo.list_open_for_contractor(contractor_id, now)

    async def expire_stale(self, now: Optional[datetime] = None) -> int:
        """Close offers whose window passed without an answer."""
        now = now or datetime.now(timezone.utc)
        expired = await self.dispatch_repo.expire_stale(now)
        record_dispatches_expired(expired, "timeout")
        if expired:
            logger.info("Stale dispatches expired", count=expired)
        return expired

    async def _decline(self, dispatch: Dispatch, now: datetime) -> DispatchResponseResult:
        await self._ensure_answerable(dispatch, now)
        if not await self.dispatch_repo.mark_declined(dispatch.id, now):
            raise StaleStateError("Dispatch", dispatch.id)

        dispatch.status = DispatchStatus.DECLINED
        dispatch.responded_at = now
        logger.info(
            "Dispatch declined",
            dispatch_id=str(dispatch.id),
            job_id=str(dispatch.job_id),
            contractor_id=str(dispatch.contractor_id),
        )
        return DispatchResponseResult(dispatch=dispatch)

    async def _accept(
        self,
        dispatch: Dispatch,
        estimated_completion_date: Optional[datetime],
        now: datetime,
    ) -> DispatchResponseResult:
        await self._ensure_answerable(dispatch, now)

        job = await self.job_repo.get_by_id(dispatch.job_id)
        if job is None:
            raise NotFoundError("Job", dispatch.job_id)
        if job.contractor_user_id is not None:
            raise AlreadyAssignedError(job.id)
        if not job.status.is_routable():
            raise NotEligibleError(job.id, f"job status {job.status.value} cannot be assigned")

        try:
            accepted = await self.dispatch_repo.mark_accepted(dispatch.id, now)
        except ConflictError as e:
            raise AlreadyAssignedError(job.id) from e
        if not accepted:
            raise AlreadyAssignedError(job.id)

        assignment = await self.assignment_repo.create(
            JobAssignment(job_id=job.id, contractor_id=dispatch.contractor_id)
        )
        assigned = await self.job_repo.assign_contractor(
            job.id, dispatch.contractor_id, now, estimated_completion_date
        )
        if not assigned:
            raise AlreadyAssignedError(job.id)

        expired = await self.dispatch_repo.expire_pending_for_job(
            job.id, now, exclude_id=dispatch.id
        )
        record_dispatches_expired(expired, "sibling_accepted")

        dispatch.status = DispatchStatus.ACCEPTED
        dispatch.responded_at = now
        logger.info(
            "Dispatch accepted",
            dispatch_id=str(dispatch.id),
            job_id=str(job.id),
            contractor_id=str(dispatch.contractor_id),
            expired_siblings=expired,
        )
        return DispatchResponseResult(
            dispatch=dispatch,
            job=await self.job_repo.get_by_id(job.id),
            assignment=assignment,
            expired_siblings=expired,
        )

    async def _ensure_answerable(self, dispatch: Dispatch, now: datetime) -> None:
        """Classify an offer that can no longer be answered."""
        if dispatch.status.is_final():
            if await self._job_taken(dispatch.job_id):
                raise AlreadyAssignedError(dispatch.job_id)
            if dispatch.status == DispatchStatus.EXPIRED:
                raise ExpiredError(dispatch.id)
            raise AlreadyRespondedError(dispatch.id, dispatch.status.value)

        if dispatch.is_expired_at(now):
            raise ExpiredError(dispatch.id)

    async def _job_taken(self, job_id: UUID) -> bool:
        if await self.assignment_repo.get_by_job_id(job_id) is not None:
            return True
        return await self.dispatch_repo.has_accepted(job_id)

    @staticmethod
    def _ensure_dispatchable(job: Job) -> None:
        if job.archived:
            raise NotEligibleError(job.id, "job is archived")
        if job.contractor_user_id is not None:
            raise AlreadyAssignedError(job.id)
        if not job.status.is_routable():
            raise NotEligibleError(job.id, f"job status {job.status.value} is not open for routing")

    async def _issue(
        self,
        job: Job,
        actor_id: UUID,
        contractor_ids: List[UUID],
        now: datetime,
        source: str,
    ) -> FanoutResult:
        pending = await self.dispatch_repo.list_pending_for_job(job.id, now)
        already_offered = {dispatch.contractor_id for dispatch in pending}

        new_ids = [cid for cid in contractor_ids if cid not in already_offered]
        skipped = [cid for cid in contractor_ids if cid in already_offered]
        if len(pending) + len(new_ids) > self.max_contractors:
            raise InvalidContractorSelectionError(
                len(pending) + len(new_ids), self.max_contractors
            )

        expires_at = now + timedelta(hours=self.ttl_hours)
        tokens = {}
        dispatches = []
        for contractor_id in new_ids:
            token = generate_dispatch_token()
            dispatch = Dispatch(
                job_id=job.id,
                contractor_id=contractor_id,
                router_user_id=actor_id,
                token_hash=hash_dispatch_token(token),
                expires_at=expires_at,
                created_at=now,
                updated_at=now,
            )
            tokens[dispatch.id] = token
            dispatches.append(dispatch)

        created = await self.dispatch_repo.create_many(dispatches) if dispatches else []
        record_dispatches_issued(len(created), source)

        return FanoutResult(
            job=job,
            issued=[IssuedDispatch(dispatch=d, token=tokens[d.id]) for d in created],
            skipped_contractor_ids=skipped,
        )
