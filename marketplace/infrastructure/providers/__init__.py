"""
Payment providers package.
"""

from .factory import ProviderFactory, provider_factory
from .mock.provider import MockPaymentProvider
from .stripe.provider import StripePaymentProvider

__all__ = [
    "ProviderFactory",
    "provider_factory",
    "MockPaymentProvider",
    "StripePaymentProvider",
]
