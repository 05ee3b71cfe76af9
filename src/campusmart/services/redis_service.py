"""Redis service for booking locks and the audit trail."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis


class RedisService:
    """Service class for Redis operations."""

    # Lua script for safe lock release (only delete own lock)
    RELEASE_LOCK_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis: Redis):
        """Initialize Redis service with a Redis client.

        Args:
            redis: Async Redis client instance
        """
        self.redis = redis
        self._release_lock_script = None

    async def _get_release_lock_script(self):
        """Get or register the release lock Lua script."""
        if self._release_lock_script is None:
            self._release_lock_script = self.redis.register_script(self.RELEASE_LOCK_SCRIPT)
        return self._release_lock_script

    # ==================== Distributed Lock Operations ====================

    async def acquire_lock(
        self, schedule_id: str, owner_id: str | None = None, ttl: int = 5
    ) -> tuple[bool, str]:
        """Acquire the booking lock for a schedule.

        Key pattern: lock:schedule:{schedule_id}
        Uses SET NX EX for atomic lock acquisition.

        Args:
            schedule_id: Schedule UUID string
            owner_id: Unique identifier for lock owner (auto-generated if None)
            ttl: Lock timeout in seconds so a crashed holder cannot deadlock the slot

        Returns:
            Tuple of (success, owner_id)
        """
        key = f"lock:schedule:{schedule_id}"
        if owner_id is None:
            owner_id = str(uuid.uuid4())

        acquired = await self.redis.set(key, owner_id, nx=True, ex=ttl)
        return (bool(acquired), owner_id)

    async def release_lock(self, schedule_id: str, owner_id: str) -> bool:
        """Release a schedule lock (only if owner matches).

        Args:
            schedule_id: Schedule UUID string
            owner_id: The owner_id returned from acquire_lock

        Returns:
            True if lock was released, False if not owner or not locked
        """
        key = f"lock:schedule:{schedule_id}"
        script = await self._get_release_lock_script()
        result = await script(keys=[key], args=[owner_id])
        return int(result) == 1

    # ==================== Audit Trail ====================

    async def append_audit(
        self,
        entity: str,
        entity_id: str,
        action: str,
        actor_id: str,
        details: dict[str, Any] | None = None,
        max_entries: int = 200,
    ) -> None:
        """Push an audit entry onto the entity's list, newest first.

        Key pattern: audit:{entity}:{entity_id}
        """
        key = f"audit:{entity}:{entity_id}"
        entry = {
            "action": action,
            "actor_id": actor_id,
            "details": details or {},
            "at": datetime.now(timezone.utc).isoformat(),
        }

        pipe = self.redis.pipeline()
        pipe.lpush(key, json.dumps(entry, default=str))
        pipe.ltrim(key, 0, max_entries - 1)
        await pipe.execute()

    async def get_audit(
        self, entity: str, entity_id: str, limit: int = 50
    ) -> list[dict[str, Any]]:
        """Get the most recent audit entries for an entity."""
        key = f"audit:{entity}:{entity_id}"
        raw = await self.redis.lrange(key, 0, limit - 1)
        return [json.loads(item) for item in raw]
