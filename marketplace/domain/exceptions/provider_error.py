"""
Payment provider domain exceptions.
"""

from typing import Optional


class ProviderError(Exception):
    """Base exception for payment provider errors."""

    code = "PROVIDER_ERROR"


class ProviderConfigurationError(ProviderError):
    """Raised when provider configuration is invalid."""

    pass


class ProviderAPIError(ProviderError):
    """Raised when provider API returns an error."""

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"Provider {provider} API error ({status_code}): {message}")


class ProviderNotFoundError(ProviderError):
    """Raised when provider type is not found."""

    def __init__(self, provider_type: str, detail: Optional[str] = None):
        self.provider_type = provider_type
        super().__init__(detail or f"Provider type '{provider_type}' not found")
