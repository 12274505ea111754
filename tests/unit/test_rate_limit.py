"""Unit tests for RateLimitMiddleware over an in-memory counter store."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.cm_gateway.middleware.rate_limit import WINDOW_SECONDS, RateLimitMiddleware


class FakeRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True


@pytest.fixture
def limited_app(monkeypatch: pytest.MonkeyPatch) -> FastAPI:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_AUTH_PER_MIN", 2)
    monkeypatch.setattr(settings, "RATE_LIMIT_WRITE_PER_MIN", 3)
    monkeypatch.setattr(settings, "RATE_LIMIT_READ_PER_MIN", 5)

    app = FastAPI()
    app.state.redis = FakeRedis()
    app.add_middleware(RateLimitMiddleware)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/v1/auth/login")
    async def login() -> dict:
        return {}

    @app.get("/api/v1/cards")
    async def cards() -> dict:
        return {}

    @app.post("/api/v1/offers")
    async def offers() -> dict:
        return {}

    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_auth_limit_returns_429(limited_app: FastAPI) -> None:
    async with _client(limited_app) as client:
        statuses = [(await client.post("/api/v1/auth/login")).status_code for _ in range(3)]
        assert statuses == [200, 200, 429]
        resp = await client.post("/api/v1/auth/login")
    assert resp.headers["retry-after"] == str(WINDOW_SECONDS)
    assert resp.json()["code"] == 9001


async def test_window_expiry_set_once(limited_app: FastAPI) -> None:
    async with _client(limited_app) as client:
        await client.get("/api/v1/cards")
        await client.get("/api/v1/cards")
    redis = limited_app.state.redis
    [key] = redis.counts
    assert key.endswith(":read")
    assert redis.ttls == {key: WINDOW_SECONDS}


async def test_groups_are_counted_separately(limited_app: FastAPI) -> None:
    async with _client(limited_app) as client:
        for _ in range(3):
            assert (await client.post("/api/v1/offers")).status_code == 200
        assert (await client.post("/api/v1/offers")).status_code == 429
        assert (await client.get("/api/v1/cards")).status_code == 200


async def test_forwarded_for_identifies_client(limited_app: FastAPI) -> None:
    async with _client(limited_app) as client:
        for _ in range(2):
            await client.post("/api/v1/auth/login", headers={"X-Forwarded-For": "1.1.1.1, 10.0.0.1"})
        blocked = await client.post("/api/v1/auth/login", headers={"X-Forwarded-For": "1.1.1.1"})
        other = await client.post("/api/v1/auth/login", headers={"X-Forwarded-For": "2.2.2.2"})
    assert blocked.status_code == 429
    assert other.status_code == 200


async def test_health_is_never_limited(limited_app: FastAPI) -> None:
    async with _client(limited_app) as client:
        for _ in range(10):
            assert (await client.get("/health")).status_code == 200
    assert limited_app.state.redis.counts == {}


async def test_disabled(limited_app: FastAPI, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)
    async with _client(limited_app) as client:
        for _ in range(5):
            assert (await client.post("/api/v1/auth/login")).status_code == 200
