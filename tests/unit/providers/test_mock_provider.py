"""
Unit tests for the mock payment provider.
"""

import pytest

from marketplace.application.interfaces.providers import CreateIntentRequest
from marketplace.domain.exceptions.provider_error import (
    ProviderAPIError,
    ProviderNotFoundError,
)
from marketplace.infrastructure.providers.factory import ProviderFactory
from marketplace.infrastructure.providers.mock import MockPaymentProvider


def _request(amount_cents: int = 30000, key: str = "key-1") -> CreateIntentRequest:
    return CreateIntentRequest(
        amount_cents=amount_cents, currency="usd", idempotency_key=key
    )


class TestMockPaymentProvider:
    """Test MockPaymentProvider."""

    async def test_same_key_returns_same_intent(self):
        """Test provider-side idempotency."""
        provider = MockPaymentProvider()

        first = await provider.create_intent(_request())
        second = await provider.create_intent(_request())

        assert first.id == second.id
        assert len(provider.intents) == 1

    async def test_different_key_creates_new_intent(self):
        provider = MockPaymentProvider()

        first = await provider.create_intent(_request(30000, "key-1"))
        second = await provider.create_intent(_request(35000, "key-2"))

        assert first.id != second.id
        assert second.amount_cents == 35000

    async def test_cancel(self):
        provider = MockPaymentProvider()
        intent = await provider.create_intent(_request())

        result = await provider.cancel_intent(intent.id)

        assert result.ok is True
        assert provider.intents[intent.id].status == "canceled"

    async def test_cannot_cancel_succeeded_intent(self):
        provider = MockPaymentProvider()
        intent = await provider.create_intent(_request())
        provider.simulate_success(intent.id)

        result = await provider.cancel_intent(intent.id)

        assert result.ok is False

    async def test_refund_requires_success(self):
        """Test that refunds are only possible for captured intents."""
        provider = MockPaymentProvider()
        intent = await provider.create_intent(_request())

        with pytest.raises(ProviderAPIError):
            await provider.create_refund(intent.id, 30000, "refund-1")

        provider.simulate_success(intent.id)
        refund = await provider.create_refund(intent.id, 30000, "refund-1")
        again = await provider.create_refund(intent.id, 30000, "refund-1")

        assert refund.amount_cents == 30000
        assert again.id == refund.id

    async def test_retrieve_unknown_intent(self):
        provider = MockPaymentProvider()

        with pytest.raises(ProviderAPIError):
            await provider.retrieve_intent("pi_missing")


class TestProviderFactory:
    """Test ProviderFactory."""

    def test_get_provider_is_cached(self):
        factory = ProviderFactory()

        assert factory.get_provider("mock") is factory.get_provider("mock")

    def test_unknown_provider(self):
        factory = ProviderFactory()

        with pytest.raises(ProviderNotFoundError):
            factory.create_provider("paypal")

    def test_available_providers(self):
        factory = ProviderFactory()

        assert set(factory.get_available_providers()) == {"mock", "stripe"}
        assert factory.has_provider("STRIPE") is True
