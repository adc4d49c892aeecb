"""
Mock provider package.
"""

from .provider import MockPaymentProvider

__all__ = ["MockPaymentProvider"]
