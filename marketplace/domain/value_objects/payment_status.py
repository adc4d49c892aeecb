"""
Payment status value object.
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """Escrow payment record status enumeration."""

    PENDING = "PENDING"
    CAPTURED = "CAPTURED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    def is_funded(self) -> bool:
        """Check if money has been taken from the job poster."""
        return self == self.CAPTURED

    def can_be_replaced(self) -> bool:
        """Check if the record may be cancelled and re-created."""
        return self in [self.PENDING, self.FAILED]
