# backend/app/redis_client.py
"""
Shared Redis connection.

None when REDIS_URL is not configured: slot caching and event emission
are then skipped.
"""

from redis import Redis

from .config import settings


redis_client: Redis | None = (
    Redis.from_url(settings.redis_url) if settings.redis_url else None
)


def get_redis() -> Redis | None:
    """FastAPI dependency returning the shared client."""
    return redis_client
