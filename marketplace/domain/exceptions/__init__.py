"""
Domain exceptions package.
"""

from .conflict_error import (
    AlreadyAssignedError,
    AlreadyClaimedError,
    AlreadyFundedError,
    AlreadyRespondedError,
    ConflictError,
    IllegalTransitionError,
    NotEligibleError,
    StaleStateError,
)
from .expired_error import ExpiredError
from .not_found_error import NotFoundError
from .provider_error import ProviderError
from .validation_error import ValidationError

__all__ = [
    "AlreadyAssignedError",
    "AlreadyClaimedError",
    "AlreadyFundedError",
    "AlreadyRespondedError",
    "ConflictError",
    "ExpiredError",
    "IllegalTransitionError",
    "NotEligibleError",
    "NotFoundError",
    "ProviderError",
    "StaleStateError",
    "ValidationError",
]
