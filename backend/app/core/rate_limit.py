"""
Rate limiting and account lockout backed by Redis.

Key patterns:
- ``ratelimit:{endpoint}:{ip}``  fixed-window request counter
- ``failed_login:{user_id}``     consecutive failed logins
- ``lockout:{user_id}``          present while the account is locked

Redis outages must not lock everyone out, so every check fails open and logs.
"""
import logging
from typing import Optional

from redis.exceptions import RedisError

from app.config import get_settings
from app.database.connections import get_redis_client

logger = logging.getLogger(__name__)


async def check_rate_limit(
    ip: str,
    endpoint: str,
    limit: Optional[int] = None,
    window_seconds: Optional[int] = None,
) -> bool:
    """
    Check if a request should be rate limited.

    Args:
        ip: Client IP address
        endpoint: Endpoint identifier (e.g., "/auth/login")
        limit: Max requests allowed (defaults to config value)
        window_seconds: Time window in seconds (defaults to config value)

    Returns:
        True if request is allowed, False if rate limited
    """
    settings = get_settings()
    if limit is None:
        limit = settings.login_rate_limit_attempts
    if window_seconds is None:
        window_seconds = settings.login_rate_limit_window_seconds

    key = f"ratelimit:{endpoint}:{ip}"
    try:
        redis = await get_redis_client()
        current = await redis.incr(key)
        if current == 1:
            await redis.expire(key, window_seconds)
    except RedisError as e:
        logger.warning("Rate limit check skipped for %s: %s", endpoint, e)
        return True

    return current <= limit


async def increment_failed_login(user_id: str) -> int:
    """
    Increment failed login attempts counter for a user.

    Returns:
        Current number of failed attempts (0 if Redis is unavailable)
    """
    settings = get_settings()
    key = f"failed_login:{user_id}"
    try:
        redis = await get_redis_client()
        count = await redis.incr(key)
        await redis.expire(key, settings.user_lockout_duration_minutes * 60)
    except RedisError as e:
        logger.warning("Could not record failed login for user %s: %s", user_id, e)
        return 0
    return count


async def check_user_lockout(user_id: str) -> bool:
    """Return True if the user is currently locked out."""
    try:
        redis = await get_redis_client()
        return bool(await redis.exists(f"lockout:{user_id}"))
    except RedisError as e:
        logger.warning("Lockout check skipped for user %s: %s", user_id, e)
        return False


async def set_user_lockout(user_id: str, duration_minutes: int) -> None:
    """Lock out a user for the given duration."""
    try:
        redis = await get_redis_client()
        await redis.setex(f"lockout:{user_id}", duration_minutes * 60, "1")
    except RedisError as e:
        logger.warning("Could not lock out user %s: %s", user_id, e)
        return
    logger.info("User %s locked out for %d minutes", user_id, duration_minutes)


async def reset_failed_attempts(user_id: str) -> None:
    """Reset failed login attempts counter after successful login."""
    try:
        redis = await get_redis_client()
        await redis.delete(f"failed_login:{user_id}")
    except RedisError as e:
        logger.warning("Could not reset failed logins for user %s: %s", user_id, e)
