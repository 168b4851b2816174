"""
Token Revocation using Redis.

A revoked bearer token is treated exactly like an invalid one by the
identity gate. Entries expire when the token itself would have expired.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from parcel_backend.app.core import redis_client as redis_module
from parcel_backend.app.core.config import settings

logger = logging.getLogger("parcel_backend.auth")

# Redis key prefix for revoked tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


def _ttl_for(expires_at: Optional[int]) -> int:
    """Seconds until the token's own expiry, falling back to the configured lifetime."""
    if expires_at:
        remaining = int(expires_at - datetime.now(timezone.utc).timestamp())
        if remaining > 0:
            return remaining
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, email: str, expires_at: Optional[int] = None) -> bool:
    """
    Revoke a bearer token by adding it to the denylist.

    Args:
        token: The JWT token string to revoke
        email: Identity the token was issued to (stored for audit purposes)
        expires_at: The token's `exp` claim, if known

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_module.redis_client.setex(key, _ttl_for(expires_at), email)
        return True
    except Exception as e:
        logger.warning("Error revoking token for %s: %s", email, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Fails open: if Redis is unreachable the token is treated as not revoked.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_module.redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False
