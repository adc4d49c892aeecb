"""
Dispatch value objects.
"""

from enum import Enum


class DispatchStatus(str, Enum):
    """Status of a single contractor offer."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    EXPIRED = "EXPIRED"

    def is_final(self) -> bool:
        """Check if the offer can no longer be answered."""
        return self != self.PENDING


class DispatchDecision(str, Enum):
    """Contractor answer to an offer."""

    ACCEPT = "ACCEPT"
    DECLINE = "DECLINE"
