"""
Domain value objects package.
"""

from .dispatch_status import DispatchDecision, DispatchStatus
from .job_status import JobEvent, JobStatus, RoutingStatus
from .job_transition import TRANSITIONS, TransitionRule, allowed_events, find_transition
from .monitoring import MonitoringEventType, MonitoringRole
from .payment_status import PaymentStatus
from .payout_breakdown import PayoutBreakdown, calculate_payout_breakdown

__all__ = [
    "DispatchDecision",
    "DispatchStatus",
    "JobEvent",
    "JobStatus",
    "RoutingStatus",
    "TRANSITIONS",
    "TransitionRule",
    "allowed_events",
    "find_transition",
    "MonitoringEventType",
    "MonitoringRole",
    "PaymentStatus",
    "PayoutBreakdown",
    "calculate_payout_breakdown",
]
