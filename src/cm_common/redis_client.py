"""Redis client factory — used for rate limiting only.

The pool is created in the application lifespan and kept on
`app.state.redis`; nothing here is a process-wide singleton.
"""

import redis.asyncio as aioredis


def create_redis(url: str) -> aioredis.Redis:
    """Create a Redis connection pool (lazy: connects on first command)."""
    return aioredis.from_url(url, decode_responses=True)


async def close_redis(client: aioredis.Redis) -> None:
    """Close the Redis connection pool."""
    await client.aclose()
