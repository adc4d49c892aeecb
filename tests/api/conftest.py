"""
API test fixtures.
"""

from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from marketplace.api.app import create_app
from marketplace.api.dependencies import get_payment_provider
from marketplace.config.database import get_db_session


@pytest.fixture
def app(session_factory, mock_payment_provider):
    """Application wired to the test database and the mock provider."""
    application = create_app()

    async def override_db_session():
        async with session_factory() as session:
            yield session

    async def override_payment_provider():
        return mock_payment_provider

    application.dependency_overrides[get_db_session] = override_db_session
    application.dependency_overrides[get_payment_provider] = override_payment_provider
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as http_client:
        yield http_client


@pytest.fixture
def poster_id() -> UUID:
    return uuid4()


@pytest.fixture
def router_id() -> UUID:
    return uuid4()
