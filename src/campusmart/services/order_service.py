"""Order service for order query operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.models.order import Order
from campusmart.services.exceptions import OrderNotFoundError, ValidationError


class OrderService:
    """Service class for order operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_participant_orders(
        self, participant_id: UUID, role: str, skip: int = 0, limit: int = 100
    ) -> tuple[list[Order], int]:
        """Get orders where the participant is the buyer or the seller.

        Args:
            participant_id: User UUID
            role: "buyer" or "seller", selects which side of the order to match
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (orders list, total count)
        """
        if role == "buyer":
            owner_column = Order.buyer_id
        elif role == "seller":
            owner_column = Order.seller_id
        else:
            raise ValidationError("Only buyers and sellers have orders")

        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(owner_column == participant_id)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .where(owner_column == participant_id)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        orders = list(result.scalars().all())

        return orders, total

    async def list_orders(
        self,
        assigned_admin_id: UUID | None = None,
        unassigned: bool = False,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[list[Order], int]:
        """List orders for admins, newest first.

        Args:
            assigned_admin_id: Only orders assigned to this admin
            unassigned: Only orders no admin has been assigned to yet
            status: Only orders in this status
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (orders list, total count)

        Raises:
            ValidationError: Both an admin and ``unassigned`` were requested
        """
        if unassigned and assigned_admin_id is not None:
            raise ValidationError("Filter by an admin or by unassigned orders, not both")

        conditions = []
        if unassigned:
            conditions.append(Order.assigned_admin_id.is_(None))
        elif assigned_admin_id is not None:
            conditions.append(Order.assigned_admin_id == assigned_admin_id)
        if status is not None:
            conditions.append(Order.status == status)

        count_result = await self.db.execute(
            select(func.count(Order.order_id)).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        orders = list(result.scalars().all())

        return orders, total

    async def get_order_by_id(self, order_id: UUID) -> Order:
        """Get order by ID.

        Raises:
            OrderNotFoundError: Order does not exist
        """
        result = await self.db.execute(
            select(Order).where(Order.order_id == order_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} not found")
        return order
