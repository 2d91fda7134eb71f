"""
Rate Limiter Configuration

Supports both in-memory and Redis storage for rate limiting.
Redis is recommended for production (multiple instances).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
import logging
import os

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """Get real client IP behind reverse proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (original client)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


def create_limiter() -> Limiter:
    """
    Create a rate limiter with appropriate storage backend.
    Uses REDIS_URL when set, otherwise in-memory storage.
    """
    redis_url = os.getenv("REDIS_URL")
    enabled = os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false"

    if redis_url:
        logger.info("Using Redis rate limiter storage")
        return Limiter(
            key_func=get_real_client_ip,
            storage_uri=redis_url,
            default_limits=["100/minute"],
            enabled=enabled
        )

    # In-memory storage (for development or single instance)
    return Limiter(
        key_func=get_real_client_ip,
        default_limits=["100/minute"],
        enabled=enabled
    )


# Global rate limiter instance
limiter = create_limiter()


# ================================
# RATE LIMIT CONFIGURATIONS
# ================================

RATE_LIMITS = {
    # Writes - moderate limits
    "reservation_create": "30/minute",
    "reservation_update": "60/minute",
    "reservation_cancel": "20/minute",

    # Reads - relaxed limits
    "reservation_get": "200/minute",
    "availability": "200/minute",
}


def get_rate_limit(operation: str) -> str:
    """Get rate limit for a specific operation."""
    return RATE_LIMITS.get(operation, "100/minute")
