"""
Unit tests for value objects.
"""

import pytest

from marketplace.domain.value_objects.dispatch_status import DispatchStatus
from marketplace.domain.value_objects.job_status import (
    JobEvent,
    JobStatus,
    RoutingStatus,
)
from marketplace.domain.value_objects.job_transition import (
    TRANSITIONS,
    allowed_events,
    find_transition,
)
from marketplace.domain.value_objects.payment_status import PaymentStatus
from marketplace.domain.value_objects.payout_breakdown import (
    calculate_payout_breakdown,
)


class TestJobStatus:
    """Test JobStatus value object."""

    def test_routable_statuses(self):
        """Only published and open jobs are visible to routers."""
        assert JobStatus.PUBLISHED.is_routable() is True
        assert JobStatus.OPEN_FOR_ROUTING.is_routable() is True

        assert JobStatus.DRAFT.is_routable() is False
        assert JobStatus.ASSIGNED.is_routable() is False
        assert JobStatus.DISPUTED.is_routable() is False

    def test_is_terminal(self):
        """Test is_terminal method."""
        assert JobStatus.COMPLETED_APPROVED.is_terminal() is True
        assert JobStatus.ROUTER_APPROVED.is_terminal() is False

    def test_is_disputable(self):
        """Drafts, published and finished jobs cannot be disputed."""
        assert JobStatus.DRAFT.is_disputable() is False
        assert JobStatus.PUBLISHED.is_disputable() is False
        assert JobStatus.COMPLETED_APPROVED.is_disputable() is False
        assert JobStatus.DISPUTED.is_disputable() is False

        assert JobStatus.OPEN_FOR_ROUTING.is_disputable() is True
        assert JobStatus.ROUTER_APPROVED.is_disputable() is True

    def test_string_values(self):
        """Enum members compare equal to their stored strings."""
        assert JobStatus("ASSIGNED") == JobStatus.ASSIGNED
        assert JobStatus.ASSIGNED == "ASSIGNED"


class TestRoutingStatus:
    """Test RoutingStatus value object."""

    def test_is_routed(self):
        """Test is_routed method for all statuses."""
        assert RoutingStatus.UNROUTED.is_routed() is False
        assert RoutingStatus.ROUTED_BY_ROUTER.is_routed() is True
        assert RoutingStatus.ROUTED_BY_ADMIN.is_routed() is True


class TestDispatchStatus:
    """Test DispatchStatus value object."""

    def test_is_final(self):
        """Only pending offers can still be answered."""
        assert DispatchStatus.PENDING.is_final() is False
        assert DispatchStatus.ACCEPTED.is_final() is True
        assert DispatchStatus.DECLINED.is_final() is True
        assert DispatchStatus.EXPIRED.is_final() is True


class TestPaymentStatus:
    """Test PaymentStatus value object."""

    def test_is_funded(self):
        assert PaymentStatus.CAPTURED.is_funded() is True
        assert PaymentStatus.PENDING.is_funded() is False
        assert PaymentStatus.REFUNDED.is_funded() is False

    def test_can_be_replaced(self):
        assert PaymentStatus.PENDING.can_be_replaced() is True
        assert PaymentStatus.FAILED.can_be_replaced() is True
        assert PaymentStatus.CAPTURED.can_be_replaced() is False
        assert PaymentStatus.REFUNDED.can_be_replaced() is False


class TestTransitionTable:
    """Test the job status transition table."""

    @pytest.mark.parametrize(
        "status,event,expected",
        [
            (JobStatus.DRAFT, JobEvent.PUBLISH, JobStatus.PUBLISHED),
            (JobStatus.PUBLISHED, JobEvent.OPEN_FOR_ROUTING, JobStatus.OPEN_FOR_ROUTING),
            (JobStatus.OPEN_FOR_ROUTING, JobEvent.ASSIGN, JobStatus.ASSIGNED),
            (JobStatus.ASSIGNED, JobEvent.START_WORK, JobStatus.IN_PROGRESS),
            (JobStatus.IN_PROGRESS, JobEvent.CONTRACTOR_COMPLETE, JobStatus.CONTRACTOR_COMPLETED),
            (JobStatus.CONTRACTOR_COMPLETED, JobEvent.CUSTOMER_APPROVE, JobStatus.CUSTOMER_APPROVED),
            (JobStatus.CONTRACTOR_COMPLETED, JobEvent.CUSTOMER_REJECT, JobStatus.CUSTOMER_REJECTED),
            (JobStatus.CUSTOMER_REJECTED, JobEvent.FLAG_COMPLETION, JobStatus.COMPLETION_FLAGGED),
            (JobStatus.CUSTOMER_APPROVED, JobEvent.ROUTER_APPROVE, JobStatus.ROUTER_APPROVED),
            (JobStatus.ROUTER_APPROVED, JobEvent.FINALIZE, JobStatus.COMPLETED_APPROVED),
            (JobStatus.ASSIGNED, JobEvent.OPEN_DISPUTE, JobStatus.DISPUTED),
        ],
    )
    def test_legal_transitions(self, status, event, expected):
        """Test that listed transitions resolve to the expected status."""
        rule = find_transition(status, event)

        assert rule is not None
        assert rule.to_status == expected

    @pytest.mark.parametrize(
        "status,event",
        [
            (JobStatus.DRAFT, JobEvent.ASSIGN),
            (JobStatus.PUBLISHED, JobEvent.FINALIZE),
            (JobStatus.COMPLETED_APPROVED, JobEvent.OPEN_DISPUTE),
            (JobStatus.DRAFT, JobEvent.OPEN_DISPUTE),
            (JobStatus.DISPUTED, JobEvent.OPEN_DISPUTE),
            (JobStatus.ASSIGNED, JobEvent.CUSTOMER_APPROVE),
        ],
    )
    def test_illegal_transitions(self, status, event):
        """Test that pairs outside the table are rejected."""
        assert find_transition(status, event) is None

    def test_guards(self):
        """Escrow and assignment guards sit on the expected rules."""
        assert find_transition(JobStatus.PUBLISHED, JobEvent.OPEN_FOR_ROUTING).requires_escrow
        assert find_transition(JobStatus.ASSIGNED, JobEvent.START_WORK).requires_assignment

        complete = find_transition(JobStatus.ASSIGNED, JobEvent.CONTRACTOR_COMPLETE)
        assert complete.requires_escrow and complete.requires_assignment

        assert not find_transition(JobStatus.DRAFT, JobEvent.PUBLISH).requires_escrow

    def test_resolve_dispute_has_no_fixed_target(self):
        """The target of RESOLVE_DISPUTE comes from the job, not the table."""
        rule = find_transition(JobStatus.DISPUTED, JobEvent.RESOLVE_DISPUTE)

        assert rule is not None
        assert rule.to_status is None

    def test_terminal_status_has_no_events(self):
        """Test that a finished job accepts nothing."""
        assert allowed_events(JobStatus.COMPLETED_APPROVED) == []

    def test_every_open_dispute_requires_escrow(self):
        """Test that dispute holds are only placed on funded jobs."""
        rules = [
            rule for (_, event), rule in TRANSITIONS.items() if event == JobEvent.OPEN_DISPUTE
        ]

        assert len(rules) == 8
        assert all(rule.requires_escrow for rule in rules)


class TestPayoutBreakdown:
    """Test payout breakdown calculation."""

    def test_labor_split(self):
        """Test the 75/15/10 labor split."""
        breakdown = calculate_payout_breakdown(30000)

        assert breakdown.contractor_payout_cents == 22500
        assert breakdown.router_earnings_cents == 4500
        assert breakdown.platform_fee_cents == 3000
        assert breakdown.total_cents == 30000

    def test_materials_pass_through_to_contractor(self):
        """Test that materials are paid to the contractor in full."""
        breakdown = calculate_payout_breakdown(10000, 2500)

        assert breakdown.contractor_payout_cents == 7500 + 2500
        assert breakdown.router_earnings_cents == 1500
        assert breakdown.platform_fee_cents == 1000
        assert breakdown.total_cents == 12500

    def test_rounding_remainder_goes_to_platform(self):
        """Test half-up rounding with the remainder kept by the platform."""
        breakdown = calculate_payout_breakdown(10001)

        # 7500.75 -> 7501, 1500.15 -> 1500
        assert breakdown.contractor_payout_cents == 7501
        assert breakdown.router_earnings_cents == 1500
        assert breakdown.platform_fee_cents == 10001 - 7501 - 1500

    def test_parts_always_sum_to_total(self):
        """Test that no cent is lost for awkward amounts."""
        for labor in (1, 3, 7, 99, 333, 12345, 99999):
            breakdown = calculate_payout_breakdown(labor, 17)
            assert (
                breakdown.contractor_payout_cents
                + breakdown.router_earnings_cents
                + breakdown.platform_fee_cents
                + breakdown.transaction_fee_cents
                == breakdown.total_cents
            )

    def test_zero_amounts(self):
        breakdown = calculate_payout_breakdown(0, 0)

        assert breakdown.total_cents == 0
        assert breakdown.contractor_payout_cents == 0

    def test_negative_amount_raises(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            calculate_payout_breakdown(-1)

        with pytest.raises(ValueError):
            calculate_payout_breakdown(100, -5)

    def test_non_integer_amount_raises(self):
        """Test that fractional and boolean amounts are rejected."""
        with pytest.raises(TypeError):
            calculate_payout_breakdown(100.5)

        with pytest.raises(TypeError):
            calculate_payout_breakdown(True)
