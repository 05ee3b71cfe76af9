"""Order model linking a buyer, a seller's listing and the logistics admin."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campusmart.core.database import Base
from campusmart.models.base import TimestampMixin

if TYPE_CHECKING:
    from campusmart.models.product import Product


class Order(Base, TimestampMixin):
    """Order model.

    ``assigned_admin_id`` is the join key the eligibility gate uses to decide
    which admin schedules a buyer or seller may see. Re-assignment overwrites
    it; no history is kept.
    """

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.product_id"),
        nullable=False,
    )
    assigned_admin_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=True,
    )
    assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="in_progress",
    )

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="orders")

    __table_args__ = (
        Index("idx_orders_buyer_admin", "buyer_id", "assigned_admin_id"),
        Index("idx_orders_seller_admin", "seller_id", "assigned_admin_id"),
        Index("idx_orders_status", "status"),
    )
