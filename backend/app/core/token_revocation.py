"""
Token Revocation System using Redis.

Implements token blacklisting to immediately invalidate JWT tokens
when users log out or are blocked by an administrator. The blacklist is
the only state kept in Redis, so the client lives here too.
"""

import logging
import redis.asyncio as redis
from backend.app.core.config import settings

logger = logging.getLogger(__name__)

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _token_ttl_seconds() -> int:
    # Tokens expire on their own after this window
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: str) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Returns:
        True if successfully revoked, False otherwise
    """
    client = await get_redis()
    try:
        await client.setex(f"{TOKEN_BLACKLIST_PREFIX}{token}", _token_ttl_seconds(), str(user_id))
        return True
    except Exception:
        logger.exception("Error revoking token for user %s", user_id)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the request is allowed (availability over strictness).
    """
    client = await get_redis()
    try:
        return await client.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}") > 0
    except Exception:
        logger.exception("Error checking token revocation")
        return False


async def revoke_all_user_tokens(user_id: str) -> bool:
    """
    Revoke all active tokens for a user.

    Called when a user is blocked to immediately terminate all sessions.
    """
    client = await get_redis()
    try:
        await client.setex(f"{USER_TOKENS_PREFIX}{user_id}:revoked", _token_ttl_seconds(), "1")
        return True
    except Exception:
        logger.exception("Error revoking all tokens for user %s", user_id)
        return False


async def are_user_tokens_revoked(user_id: str) -> bool:
    """Check if all tokens for a user have been revoked."""
    client = await get_redis()
    try:
        return await client.exists(f"{USER_TOKENS_PREFIX}{user_id}:revoked") > 0
    except Exception:
        logger.exception("Error checking user token revocation for %s", user_id)
        return False


async def clear_user_token_revocation(user_id: str) -> bool:
    """
    Clear the global token revocation flag for a user.

    Called when a blocked user is unblocked.
    """
    client = await get_redis()
    try:
        await client.delete(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return True
    except Exception:
        logger.exception("Error clearing token revocation for user %s", user_id)
        return False


async def get_redis():
    # Looked up at call time so tests can swap the module-level client
    return redis_client


async def ping_redis() -> bool:
    """Reachability of the blacklist store, reported by /health."""
    try:
        return await redis_client.ping()
    except Exception:
        logger.warning("Redis ping failed", exc_info=True)
        return False
