"""Integration-test fixtures (requires running PG + Redis).

Run: INTEGRATION_DB=1 pytest tests/integration -v
Pre-condition: PostgreSQL and Redis reachable at DATABASE_URL / REDIS_URL, then `alembic upgrade head`

The application lifespan is entered once per session so that the engine
and Redis pools on app.state stay valid for every test.
"""

import os
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app

# Without a database these modules are not collected at all
if not os.environ.get("INTEGRATION_DB"):
    collect_ignore_glob = ["test_*.py"]


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client with the lifespan running."""
    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def grant(user_id: str, **flags: bool) -> None:
    """Flip permission flags directly; there is no bootstrap admin."""
    assignments = ", ".join(f"{name} = :{name}" for name in flags)
    async with app.state.db.session_factory() as session:
        await session.execute(
            text(f"UPDATE users SET {assignments} WHERE id = CAST(:id AS UUID)"),
            {"id": user_id, **flags},
        )
        await session.commit()


async def register_trader(client: AsyncClient) -> tuple[str, dict[str, str]]:
    """Register a verified, trading-enabled user; return (user_id, auth headers)."""
    uid = uuid.uuid4().hex[:8]
    resp = await client.post("/api/v1/auth/register", json={
        "username": f"trader_{uid}",
        "email": f"trader_{uid}@example.com",
        "password": "TestPass123",
        "firstName": "Test",
        "lastName": uid,
    })
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    user_id = data["user"]["userId"]
    await grant(user_id, is_verified=True, can_trade=True)
    return user_id, {"Authorization": f"Bearer {data['token']}"}
