"""Rate limiting middleware — Redis fixed-window counters.

Rules (requests per minute, per client):
  - auth:  /api/v1/auth/*            (anti brute-force)
  - write: any non-GET request       (anti spam)
  - read:  everything else

Key pattern: "ratelimit:{client}:{group}". The client is the first
X-Forwarded-For hop when present (reverse proxy), else the peer address.
Over the limit the request is answered here with a 429 ApiResponse and a
Retry-After header; exception handlers do not see middleware errors.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.cm_common.errors import RateLimitError
from src.cm_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def endpoint_group(request: Request) -> tuple[str, int]:
    if request.url.path.startswith("/api/v1/auth"):
        return "auth", settings.RATE_LIMIT_AUTH_PER_MIN
    if request.method != "GET":
        return "write", settings.RATE_LIMIT_WRITE_PER_MIN
    return "read", settings.RATE_LIMIT_READ_PER_MIN


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or request.url.path == "/health":
            return await call_next(request)

        group, limit = endpoint_group(request)
        key = f"ratelimit:{client_key(request)}:{group}"
        redis = request.app.state.redis

        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, WINDOW_SECONDS)
        if count > limit:
            logger.warning("Rate limit hit: key=%s count=%d limit=%d", key, count, limit)
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(err.code, err.message).model_dump(),
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
