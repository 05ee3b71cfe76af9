"""Product model for marketplace listings."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campusmart.core.database import Base
from campusmart.models.base import TimestampMixin

if TYPE_CHECKING:
    from campusmart.models.order import Order


class Product(Base, TimestampMixin):
    """A listing put up for sale by a seller."""

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )

    # Relationships
    orders: Mapped[List["Order"]] = relationship("Order", back_populates="product")

    __table_args__ = (
        Index("idx_products_seller", "seller_id"),
    )
