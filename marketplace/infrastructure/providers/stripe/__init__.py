"""
Stripe provider package.
"""

from .client import StripeClient
from .provider import StripePaymentProvider
from .webhooks import WebhookSignatureError, verify_signature

__all__ = [
    "StripeClient",
    "StripePaymentProvider",
    "WebhookSignatureError",
    "verify_signature",
]
