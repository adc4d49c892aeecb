"""
Conflict domain exceptions.

A conflict means the request was well formed but lost against the current
state of the record, usually because a conditional write matched no rows.
"""

from typing import Optional


class ConflictError(Exception):
    """Base exception for state conflicts; ``code`` is machine readable."""

    code = "CONFLICT"

    def __init__(self, message: str, code: Optional[str] = None):
        if code:
            self.code = code
        super().__init__(message)


class AlreadyClaimedError(ConflictError):
    """Raised when another router holds the claim."""

    code = "ALREADY_CLAIMED"

    def __init__(self, job_id: object):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is already claimed by another router")


class NotEligibleError(ConflictError):
    """Raised when a job cannot be claimed or routed right now."""

    code = "NOT_ELIGIBLE"

    def __init__(self, job_id: object, reason: str):
        self.job_id = job_id
        self.reason = reason
        super().__init__(f"Job {job_id} is not eligible: {reason}")


class AlreadyAssignedError(ConflictError):
    """Raised when another contractor already won the job."""

    code = "ALREADY_ASSIGNED"

    def __init__(self, job_id: object):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is already assigned")


class AlreadyRespondedError(ConflictError):
    """Raised when an offer was already answered."""

    code = "ALREADY_RESPONDED"

    def __init__(self, dispatch_id: object, status: str):
        self.dispatch_id = dispatch_id
        self.status = status
        super().__init__(f"Dispatch {dispatch_id} was already answered ({status})")


class AlreadyFundedError(ConflictError):
    """Raised when escrow for the job is already locked."""

    code = "ALREADY_FUNDED"

    def __init__(self, job_id: object):
        self.job_id = job_id
        super().__init__(f"Job {job_id} is already funded")


class IllegalTransitionError(ConflictError):
    """Raised when an event does not apply to the job's current status."""

    code = "ILLEGAL_TRANSITION"

    def __init__(self, current_status: str, event: str, reason: Optional[str] = None):
        self.current_status = current_status
        self.event = event
        message = f"Cannot apply {event} to a job in status {current_status}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class StaleStateError(ConflictError):
    """Raised when the record changed between read and conditional write."""

    code = "STALE_STATE"

    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} was modified concurrently")
