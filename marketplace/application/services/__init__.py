"""
Application services package.
"""

from .claim_lock import ClaimLock
from .dispatch_fanout_engine import (
    DispatchFanoutEngine,
    DispatchResponseResult,
    FanoutResult,
    IssuedDispatch,
    generate_dispatch_token,
    hash_dispatch_token,
)
from .escrow_payment_manager import (
    EscrowPaymentManager,
    PaymentIntentResult,
    PaymentStatusView,
)
from .job_state_machine import JobStateMachine
from .sla_monitor import SlaEvaluationResult, SlaMonitor

__all__ = [
    "ClaimLock",
    "DispatchFanoutEngine",
    "DispatchResponseResult",
    "FanoutResult",
    "IssuedDispatch",
    "generate_dispatch_token",
    "hash_dispatch_token",
    "EscrowPaymentManager",
    "PaymentIntentResult",
    "PaymentStatusView",
    "JobStateMachine",
    "SlaEvaluationResult",
    "SlaMonitor",
]
