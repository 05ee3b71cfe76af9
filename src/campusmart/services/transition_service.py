"""Admin-driven state changes: booking status and order assignment."""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.models.order import Order
from campusmart.models.user import User
from campusmart.services.audit_service import AuditService
from campusmart.services.booking_service import Booking, BookingService
from campusmart.services.exceptions import (
    AuthorizationError,
    InternalError,
    UserNotFoundError,
)
from campusmart.services.order_service import OrderService
from campusmart.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class TransitionService:
    """Service class for admin status transitions and order assignment.

    Booking status never feeds back into the order status.
    """

    def __init__(self, db: AsyncSession, redis_service: RedisService | None = None):
        self.db = db
        self.bookings = BookingService(db, redis_service)
        self.audit = AuditService(redis_service)

    async def _get_admin(self, user_id: UUID) -> User | None:
        result = await self.db.execute(
            select(User).where(User.user_id == user_id, User.role == "admin")
        )
        return result.scalar_one_or_none()

    async def _require_admin(self, admin_id: UUID) -> None:
        if await self._get_admin(admin_id) is None:
            raise AuthorizationError("Admin privileges required")

    async def transition_booking_status(
        self,
        admin_id: UUID,
        kind: str,
        booking_id: UUID,
        new_status: str,
        notes: str | None = None,
    ) -> Booking:
        """Move a pickup or delivery to ``new_status``.

        Raises:
            AuthorizationError: Caller is not an admin
            BookingNotFoundError: Booking does not exist
            InvalidTransitionError: Unknown status for this kind
        """
        await self._require_admin(admin_id)

        booking = await self.bookings.get_booking(kind, booking_id)
        previous = booking.status
        booking = await self.bookings.update_status(
            kind, booking_id, new_status, notes, booking=booking
        )

        await self.audit.record(
            kind,
            booking_id,
            "status_changed",
            admin_id,
            {"from": previous, "to": new_status},
        )
        return booking

    async def assign_admin_to_order(
        self, admin_id: UUID, order_id: UUID, assigned_admin_id: UUID
    ) -> Order:
        """Point an order at the admin whose schedules its buyer and seller may use.

        Re-assigning the same admin only advances ``assigned_at``.

        Raises:
            AuthorizationError: Caller is not an admin
            UserNotFoundError: Target user is missing or not an admin
            OrderNotFoundError: Order does not exist
        """
        await self._require_admin(admin_id)

        if await self._get_admin(assigned_admin_id) is None:
            raise UserNotFoundError("Admin not found")

        order = await OrderService(self.db).get_order_by_id(order_id)

        previous = order.assigned_admin_id
        order.assigned_admin_id = assigned_admin_id
        order.assigned_at = datetime.now(timezone.utc).replace(tzinfo=None)
        order.assigned_by = admin_id

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to assign admin to order {order_id}: {e}")
            raise InternalError("Failed to assign admin") from e

        await self.db.refresh(order)

        logger.info(f"Admin {admin_id} assigned order {order_id} to admin {assigned_admin_id}")
        await self.audit.record(
            "order",
            order_id,
            "admin_assigned",
            admin_id,
            {"from": previous, "to": assigned_admin_id},
        )
        return order
