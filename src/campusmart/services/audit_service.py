"""Best-effort audit trail for booking and order changes."""

import logging
from typing import Any
from uuid import UUID

from campusmart.core.config import settings
from campusmart.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class AuditService:
    """Records who changed what. Never fails the operation being audited."""

    def __init__(self, redis_service: RedisService | None = None):
        self.redis_service = redis_service

    async def record(
        self,
        entity: str,
        entity_id: UUID,
        action: str,
        actor_id: UUID,
        details: dict[str, Any] | None = None,
    ) -> None:
        if self.redis_service is None:
            return
        try:
            await self.redis_service.append_audit(
                entity,
                str(entity_id),
                action,
                str(actor_id),
                details=details,
                max_entries=settings.AUDIT_LOG_MAX_ENTRIES,
            )
        except Exception as e:
            # The change is already committed
            logger.warning(f"Failed to audit {action} on {entity} {entity_id}: {e}")
