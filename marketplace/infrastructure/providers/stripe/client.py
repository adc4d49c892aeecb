"""
Stripe REST API client.

Stripe takes form-encoded bodies with bracketed keys for nested fields and
honours an ``Idempotency-Key`` header on POST requests.
"""

from typing import Any, Dict, Optional

import httpx

from marketplace.config.logging import get_logger
from marketplace.domain.exceptions.provider_error import (
    ProviderAPIError,
    ProviderConfigurationError,
)

logger = get_logger(__name__)

PROVIDER = "stripe"


def encode_form(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested dicts to Stripe's ``parent[child]`` form keys."""
    encoded: Dict[str, str] = {}
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else key
        if value is None:
            continue
        if isinstance(value, dict):
            encoded.update(encode_form(value, name))
        elif isinstance(value, bool):
            encoded[name] = "true" if value else "false"
        else:
            encoded[name] = str(value)
    return encoded


class StripeClient:
    """Stripe API client."""

    def __init__(
        self,
        secret_key: Optional[str],
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not secret_key:
            raise ProviderConfigurationError("STRIPE_SECRET_KEY is not configured")
        self.secret_key = secret_key
        self.base_url = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        idempotency_key: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/payment_intents",
            data={
                "amount": amount_cents,
                "currency": currency,
                "automatic_payment_methods": {"enabled": True},
                "metadata": metadata or {},
            },
            idempotency_key=idempotency_key,
        )

    async def retrieve_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payment_intents/{intent_id}")

    async def cancel_payment_intent(self, intent_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/payment_intents/{intent_id}/cancel")

    async def create_refund(
        self, intent_id: str, amount_cents: int, idempotency_key: str
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/refunds",
            data={"payment_intent": intent_id, "amount": amount_cents},
            idempotency_key=idempotency_key,
        )

    async def retrieve_balance(self) -> Dict[str, Any]:
        return await self._request("GET", "/balance")

    async def _request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.secret_key}"}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    data=encode_form(data) if data else None,
                    headers=headers,
                )
        except httpx.TimeoutException:
            raise ProviderAPIError(PROVIDER, 408, "Request timeout")
        except httpx.RequestError as e:
            raise ProviderAPIError(PROVIDER, 0, f"Network error: {str(e)}")

        if response.status_code >= 400:
            raise ProviderAPIError(
                PROVIDER, response.status_code, self._error_message(response)
            )

        logger.debug(
            "Stripe request completed",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            return response.text
