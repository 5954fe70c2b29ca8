"""
Shared redis.asyncio connection pool.

The API runs one long-lived event loop; the Celery worker runs a fresh
loop per task (``asyncio.run``). Connections cannot cross loops, so the
pool remembers the loop it was created on and is rebuilt when a client
is requested from a different one.
"""

import asyncio
from typing import Optional

import structlog
from redis.asyncio import ConnectionPool as AsyncConnectionPool
from redis.asyncio import Redis as AsyncRedis

from generation_layer.config import Settings

logger = structlog.get_logger(__name__)


def _current_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class RedisClient:
    """Process-wide async pool, one per event loop."""

    _async_pool: Optional[AsyncConnectionPool] = None
    _pool_loop: Optional[asyncio.AbstractEventLoop] = None

    @classmethod
    def get_async_client(cls, settings: Settings) -> AsyncRedis:
        """Client backed by the pool of the running loop."""
        loop = _current_loop()
        if cls._async_pool is not None and loop is not None and cls._pool_loop not in (None, loop):
            # Sockets of the old loop are unusable here; drop without awaiting
            logger.info("Event loop changed, discarding Redis pool")
            cls._async_pool = None

        if cls._async_pool is None:
            cls._async_pool = AsyncConnectionPool.from_url(
                settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
                decode_responses=True,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
            )
            cls._pool_loop = loop
            logger.info(
                "Initialized Redis connection pool",
                max_connections=settings.REDIS_MAX_CONNECTIONS,
            )

        return AsyncRedis(connection_pool=cls._async_pool)

    @classmethod
    async def close_async_pool(cls) -> None:
        if cls._async_pool is None:
            return
        pool, cls._async_pool, cls._pool_loop = cls._async_pool, None, None
        await pool.disconnect()
        logger.info("Closed Redis connection pool")
