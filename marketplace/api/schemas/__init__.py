"""
API schemas for the Marketplace Dispatch Service.
"""

from .common import BaseResponse, ErrorResponse
from .dispatch import (
    AdminRouteRequest,
    ApplyRoutingRequest,
    DispatchRespondRequest,
    DispatchRespondResponse,
    FanoutResponse,
)
from .job import JobCreateRequest, JobResponse, PricingUpdateRequest, TransitionRequest
from .monitoring import MonitoringEventsPage, SlaEvaluationResponse
from .payment import (
    ConfirmPaymentRequest,
    PaymentIntentResponse,
    PaymentRecordResponse,
    PaymentStatusResponse,
)

__all__ = [
    "BaseResponse",
    "ErrorResponse",
    "AdminRouteRequest",
    "ApplyRoutingRequest",
    "DispatchRespondRequest",
    "DispatchRespondResponse",
    "FanoutResponse",
    "JobCreateRequest",
    "JobResponse",
    "PricingUpdateRequest",
    "TransitionRequest",
    "MonitoringEventsPage",
    "SlaEvaluationResponse",
    "ConfirmPaymentRequest",
    "PaymentIntentResponse",
    "PaymentRecordResponse",
    "PaymentStatusResponse",
]
