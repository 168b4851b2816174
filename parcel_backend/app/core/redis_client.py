"""
Redis client for the token revocation list.

The client connects lazily; nothing is opened until the first command.
"""

import redis.asyncio as redis
from parcel_backend.app.core.config import settings


redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """
    Report whether the revocation store answers.

    Used by the health endpoint; never raises.
    """
    try:
        return bool(await redis_client.ping())
    except Exception:
        return False
