"""Shared test fixtures.

Settings are read at import time, so the environment is prepared before
anything under src/ is imported.
"""

import os

os.environ.setdefault("JWT_SECRET", "unit-test-secret-key-not-for-production")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
