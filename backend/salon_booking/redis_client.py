"""
Shared Redis client for the availability cache.

The cache is optional: without REDIS_URL every listing is computed
from the database.
"""

from redis import Redis

from .config import settings

redis_client: Redis | None = (
    Redis.from_url(settings.redis_url, socket_timeout=2.0)
    if settings.redis_url
    else None
)


def get_redis() -> Redis | None:
    return redis_client
