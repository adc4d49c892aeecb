"""
Payout breakdown value object.

Labor is split 75/15/10 between contractor, router and platform. Materials
pass through to the contractor untouched. All amounts are integer cents.
"""

from dataclasses import dataclass

CONTRACTOR_LABOR_PERCENT = 75
ROUTER_LABOR_PERCENT = 15
TRANSACTION_FEE_CENTS = 0


def _percent_half_up(amount_cents: int, percent: int) -> int:
    return (amount_cents * percent + 50) // 100


@dataclass(frozen=True)
class PayoutBreakdown:
    """How a job's price is divided between the parties."""

    labor_total_cents: int
    materials_total_cents: int
    transaction_fee_cents: int
    contractor_payout_cents: int
    router_earnings_cents: int
    platform_fee_cents: int
    total_cents: int


def calculate_payout_breakdown(
    labor_total_cents: int, materials_total_cents: int = 0
) -> PayoutBreakdown:
    """Compute the breakdown; the platform keeps the labor rounding remainder."""
    for name, value in (
        ("labor_total_cents", labor_total_cents),
        ("materials_total_cents", materials_total_cents),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{name} must be an integer number of cents")
        if value < 0:
            raise ValueError(f"{name} must not be negative")

    contractor_labor = _percent_half_up(labor_total_cents, CONTRACTOR_LABOR_PERCENT)
    router_labor = _percent_half_up(labor_total_cents, ROUTER_LABOR_PERCENT)
    platform_labor = labor_total_cents - contractor_labor - router_labor

    return PayoutBreakdown(
        labor_total_cents=labor_total_cents,
        materials_total_cents=materials_total_cents,
        transaction_fee_cents=TRANSACTION_FEE_CENTS,
        contractor_payout_cents=contractor_labor + materials_total_cents,
        router_earnings_cents=router_labor,
        platform_fee_cents=platform_labor,
        total_cents=labor_total_cents + materials_total_cents + TRANSACTION_FEE_CENTS,
    )
