"""
Domain package.
"""

from .entities import *
from .exceptions import *
from .value_objects import *

__all__ = [
    # Entities
    "Dispatch",
    "Job",
    "JobAssignment",
    "MonitoringEvent",
    "PaymentRecord",
    # Exceptions
    "ConflictError",
    "ExpiredError",
    "NotFoundError",
    "ProviderError",
    "ValidationError",
    # Value Objects
    "DispatchStatus",
    "JobEvent",
    "JobStatus",
    "MonitoringEventType",
    "PaymentStatus",
    "RoutingStatus",
]
