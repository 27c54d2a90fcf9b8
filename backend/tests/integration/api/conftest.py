"""Fixtures for API tests.

``client`` talks to the real FastAPI app through ASGITransport. The DI
container is swapped for ``test_container`` and the database session for a
mock, so no lifespan, Postgres or Stripe is involved. With AUTH_ENABLED=false
every request runs as LOCAL_USER_ID.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from vatcounsel.api import deps
from vatcounsel.core.config import settings
from vatcounsel.domains.usage.periods import get_period_info
from vatcounsel.main import app


@pytest.fixture
def local_user_id() -> UUID:
    return UUID(settings.LOCAL_USER_ID)


@pytest.fixture
def mock_db():
    return AsyncMock()


@pytest.fixture
def local_user(fake_user_repo, local_user_id):
    """The request user as the identity provider mirror knows it."""
    return fake_user_repo.seed(
        local_user_id, created_at=datetime(2024, 1, 1, 9, 30), email="local@example.com"
    )


@pytest.fixture
def current_period(local_user):
    """The local user's accounting period as of now."""
    return get_period_info(local_user.created_at, datetime.now(timezone.utc))


@pytest_asyncio.fixture
async def client(test_container, mock_db):
    app.dependency_overrides[deps.get_container] = lambda: test_container
    app.dependency_overrides[deps.get_db] = lambda: mock_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
