"""
Use cases package.

This package contains the business logic use cases that orchestrate
the application services and repositories.
"""

from .admin_route_job import AdminRouteJobUseCase, AdminRouteRequest, ArchiveJobUseCase
from .apply_routing import ApplyRoutingRequest, ApplyRoutingUseCase
from .claim_job import ClaimJobUseCase, ReleaseClaimUseCase
from .create_job import CreateJobRequest, CreateJobUseCase
from .payments import (
    ConfirmPaymentUseCase,
    CreatePaymentIntentUseCase,
    GetPaymentStatusUseCase,
    HandlePaymentWebhookUseCase,
    RefundPaymentUseCase,
)
from .respond_to_dispatch import (
    ExpireStaleDispatchesUseCase,
    ListOffersUseCase,
    RespondToDispatchRequest,
    RespondToDispatchUseCase,
)
from .sla_monitoring import (
    MarkEventHandledUseCase,
    QuerySlaEventsRequest,
    QuerySlaEventsUseCase,
    RunSlaEvaluationUseCase,
    SlaEventsPage,
)
from .transition_job import TransitionJobUseCase
from .update_job_pricing import UpdateJobPricingRequest, UpdateJobPricingUseCase

__all__ = [
    "AdminRouteJobUseCase",
    "AdminRouteRequest",
    "ArchiveJobUseCase",
    "ApplyRoutingRequest",
    "ApplyRoutingUseCase",
    "ClaimJobUseCase",
    "ReleaseClaimUseCase",
    "CreateJobRequest",
    "CreateJobUseCase",
    "ConfirmPaymentUseCase",
    "CreatePaymentIntentUseCase",
    "GetPaymentStatusUseCase",
    "HandlePaymentWebhookUseCase",
    "RefundPaymentUseCase",
    "ExpireStaleDispatchesUseCase",
    "ListOffersUseCase",
    "RespondToDispatchRequest",
    "RespondToDispatchUseCase",
    "MarkEventHandledUseCase",
    "QuerySlaEventsRequest",
    "QuerySlaEventsUseCase",
    "RunSlaEvaluationUseCase",
    "SlaEventsPage",
    "TransitionJobUseCase",
    "UpdateJobPricingRequest",
    "UpdateJobPricingUseCase",
]
