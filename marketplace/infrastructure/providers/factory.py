"""
Provider factory for creating payment provider instances.
"""

from typing import Callable, Dict, List, Optional

from marketplace.application.interfaces.providers import PaymentProviderInterface
from marketplace.config.settings import settings
from marketplace.domain.exceptions.provider_error import ProviderNotFoundError
from marketplace.infrastructure.providers.mock.provider import MockPaymentProvider
from marketplace.infrastructure.providers.stripe.provider import StripePaymentProvider


class ProviderFactory:
    """Factory for creating payment provider instances."""

    def __init__(self):
        self._providers: Dict[str, Callable[[], PaymentProviderInterface]] = {
            "mock": MockPaymentProvider,
            "stripe": StripePaymentProvider,
        }
        self._instances: Dict[str, PaymentProviderInterface] = {}

    def create_provider(self, provider_type: str) -> PaymentProviderInterface:
        """Create a provider instance of the specified type."""
        provider_class = self._providers.get(provider_type.lower())
        if not provider_class:
            raise ProviderNotFoundError(provider_type)
        return provider_class()

    def get_provider(self, provider_type: Optional[str] = None) -> PaymentProviderInterface:
        """Shared instance per type; the mock keeps its intents between requests."""
        key = (provider_type or settings.PAYMENT_PROVIDER).lower()
        if key not in self._instances:
            self._instances[key] = self.create_provider(key)
        return self._instances[key]

    def get_available_providers(self) -> List[str]:
        """Get list of available provider types."""
        return list(self._providers.keys())

    def register_provider(
        self, provider_type: str, provider_class: Callable[[], PaymentProviderInterface]
    ) -> None:
        """Register a new provider type."""
        self._providers[provider_type.lower()] = provider_class
        self._instances.pop(provider_type.lower(), None)

    def has_provider(self, provider_type: str) -> bool:
        """Check if a provider type is available."""
        return provider_type.lower() in self._providers


provider_factory = ProviderFactory()
