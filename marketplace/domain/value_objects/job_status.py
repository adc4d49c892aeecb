"""
Job lifecycle value objects.
"""

from enum import Enum


class JobStatus(str, Enum):
    """Job lifecycle status enumeration."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    OPEN_FOR_ROUTING = "OPEN_FOR_ROUTING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    CONTRACTOR_COMPLETED = "CONTRACTOR_COMPLETED"
    CUSTOMER_APPROVED = "CUSTOMER_APPROVED"
    CUSTOMER_REJECTED = "CUSTOMER_REJECTED"
    COMPLETION_FLAGGED = "COMPLETION_FLAGGED"
    ROUTER_APPROVED = "ROUTER_APPROVED"
    COMPLETED_APPROVED = "COMPLETED_APPROVED"
    DISPUTED = "DISPUTED"

    @classmethod
    def routable(cls) -> tuple["JobStatus", ...]:
        """Statuses in which a job is visible to routers."""
        return (cls.PUBLISHED, cls.OPEN_FOR_ROUTING)

    def is_routable(self) -> bool:
        """Check if a router may claim or fan out the job."""
        return self in self.routable()

    def is_terminal(self) -> bool:
        """Check if no further lifecycle event applies."""
        return self == self.COMPLETED_APPROVED

    def is_disputable(self) -> bool:
        """Check if a dispute hold may be placed on the job."""
        return self in (
            self.OPEN_FOR_ROUTING,
            self.ASSIGNED,
            self.IN_PROGRESS,
            self.CONTRACTOR_COMPLETED,
            self.CUSTOMER_APPROVED,
            self.CUSTOMER_REJECTED,
            self.COMPLETION_FLAGGED,
            self.ROUTER_APPROVED,
        )


class JobEvent(str, Enum):
    """Lifecycle events that drive job status transitions."""

    PUBLISH = "PUBLISH"
    OPEN_FOR_ROUTING = "OPEN_FOR_ROUTING"
    ASSIGN = "ASSIGN"
    START_WORK = "START_WORK"
    CONTRACTOR_COMPLETE = "CONTRACTOR_COMPLETE"
    CUSTOMER_APPROVE = "CUSTOMER_APPROVE"
    CUSTOMER_REJECT = "CUSTOMER_REJECT"
    FLAG_COMPLETION = "FLAG_COMPLETION"
    ROUTER_APPROVE = "ROUTER_APPROVE"
    FINALIZE = "FINALIZE"
    OPEN_DISPUTE = "OPEN_DISPUTE"
    RESOLVE_DISPUTE = "RESOLVE_DISPUTE"


class RoutingStatus(str, Enum):
    """Who, if anyone, routed the job."""

    UNROUTED = "UNROUTED"
    ROUTED_BY_ROUTER = "ROUTED_BY_ROUTER"
    ROUTED_BY_ADMIN = "ROUTED_BY_ADMIN"

    def is_routed(self) -> bool:
        return self != self.UNROUTED
