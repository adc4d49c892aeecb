"""
Application interfaces package.
"""

from .providers import (
    CancelIntentResult,
    CreateIntentRequest,
    PaymentIntent,
    PaymentProviderInterface,
    ProviderHealthStatus,
    RefundResult,
)
from .repositories import (
    AssignmentRepositoryInterface,
    DispatchRepositoryInterface,
    JobRepositoryInterface,
    MonitoringEventRepositoryInterface,
    PaymentRecordRepositoryInterface,
)

__all__ = [
    "CancelIntentResult",
    "CreateIntentRequest",
    "PaymentIntent",
    "PaymentProviderInterface",
    "ProviderHealthStatus",
    "RefundResult",
    "AssignmentRepositoryInterface",
    "DispatchRepositoryInterface",
    "JobRepositoryInterface",
    "MonitoringEventRepositoryInterface",
    "PaymentRecordRepositoryInterface",
]
