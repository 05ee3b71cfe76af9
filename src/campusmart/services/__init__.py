"""Business logic services."""

from campusmart.services.redis_service import RedisService

__all__ = [
    "RedisService",
]
