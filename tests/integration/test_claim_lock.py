"""
Integration tests for router claims.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from marketplace.domain.exceptions.conflict_error import (
    AlreadyClaimedError,
    NotEligibleError,
)
from marketplace.domain.exceptions.not_found_error import NotFoundError
from marketplace.domain.value_objects.job_status import JobStatus, RoutingStatus

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class TestClaimLock:
    """Test the one-unrouted-claim-per-router rule against a real database."""

    async def test_second_claim_rejected_until_first_is_routed(
        self, make_job, claim_lock, fanout_engine, job_repo
    ):
        """A router holding an unrouted job cannot claim another one."""
        # Arrange
        router_id = uuid4()
        j1 = await make_job()
        j2 = await make_job()
        now = T0 + timedelta(hours=1)

        # Act / Assert: first claim succeeds
        claimed = await claim_lock.claim(j1.id, router_id, now)
        assert claimed.claimed_by_user_id == router_id
        assert claimed.claimed_at == now

        # Second claim while J1 is still unrouted
        with pytest.raises(NotEligibleError) as exc_info:
            await claim_lock.claim(j2.id, router_id, now)
        assert exc_info.value.code == "NOT_ELIGIBLE"

        # Route J1, then J2 is claimable
        await fanout_engine.apply_routing(router_id, j1.id, [uuid4()], now)
        routed = await job_repo.get_by_id(j1.id)
        assert routed.routing_status == RoutingStatus.ROUTED_BY_ROUTER

        claimed_j2 = await claim_lock.claim(j2.id, router_id, now)
        assert claimed_j2.claimed_by_user_id == router_id

    async def test_reclaiming_own_job_is_idempotent(self, make_job, claim_lock):
        router_id = uuid4()
        job = await make_job()

        first = await claim_lock.claim(job.id, router_id, T0)
        second = await claim_lock.claim(job.id, router_id, T0 + timedelta(minutes=5))

        assert second.claimed_by_user_id == router_id
        assert second.claimed_at == first.claimed_at

    async def test_job_claimed_by_another_router(self, make_job, claim_lock):
        """Test that the first router keeps the job."""
        job = await make_job()
        await claim_lock.claim(job.id, uuid4(), T0)

        with pytest.raises(AlreadyClaimedError):
            await claim_lock.claim(job.id, uuid4(), T0)

    async def test_draft_job_not_eligible(self, make_job, claim_lock):
        job = await make_job(status=JobStatus.DRAFT, posted_at=None)

        with pytest.raises(NotEligibleError):
            await claim_lock.claim(job.id, uuid4(), T0)

    async def test_archived_job(self, make_job, claim_lock, job_repo):
        """Test that archived jobs are not claimable."""
        job = await make_job()
        await job_repo.archive(job.id)

        with pytest.raises(NotEligibleError):
            await claim_lock.claim(job.id, uuid4(), T0)

    async def test_missing_job(self, claim_lock):
        with pytest.raises(NotFoundError):
            await claim_lock.claim(uuid4(), uuid4(), T0)

    async def test_release_frees_router_and_job(self, make_job, claim_lock):
        """Test that releasing a claim lets the router claim something else."""
        # Arrange
        router_id = uuid4()
        j1 = await make_job()
        j2 = await make_job()
        await claim_lock.claim(j1.id, router_id, T0)

        # Act
        released = await claim_lock.release(j1.id, router_id)

        # Assert
        assert released.claimed_by_user_id is None
        assert await claim_lock.active_claim_count(router_id) == 0
        await claim_lock.claim(j2.id, router_id, T0)
        assert await claim_lock.active_claim_count(router_id) == 1

    async def test_release_by_other_router(self, make_job, claim_lock):
        job = await make_job()
        await claim_lock.claim(job.id, uuid4(), T0)

        with pytest.raises(NotEligibleError):
            await claim_lock.release(job.id, uuid4())
