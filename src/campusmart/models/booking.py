"""Booking ledger models: pickups (buyers) and deliveries (sellers)."""

import uuid
from datetime import time

from sqlalchemy import ForeignKey, Index, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from campusmart.core.database import Base
from campusmart.models.base import TimestampMixin


class BookingMixin(TimestampMixin):
    """Columns shared by both ledgers.

    ``admin_id`` is copied from the schedule and ``product_id`` from the order
    when the booking is written, so eligibility checks can match on them
    without joins.
    """

    booking_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    @declared_attr
    def schedule_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("admin_schedules.schedule_id"),
            nullable=False,
        )

    @declared_attr
    def order_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("orders.order_id"),
            nullable=False,
        )

    @declared_attr
    def participant_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("users.user_id"),
            nullable=False,
        )

    @declared_attr
    def admin_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("users.user_id"),
            nullable=False,
        )

    @declared_attr
    def product_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("products.product_id"),
            nullable=False,
        )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )
    preferred_time: Mapped[time | None] = mapped_column(
        Time,
        nullable=True,
    )
    notes: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    admin_notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )


class Pickup(Base, BookingMixin):
    """A buyer's claim on a pickup slot."""

    __tablename__ = "pickups"

    delivery_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("deliveries.booking_id"),
        nullable=True,
    )

    __table_args__ = (
        # No unique constraint on (schedule_id, order_id): duplicates are a soft check
        Index("idx_pickups_schedule", "schedule_id"),
        Index("idx_pickups_order", "order_id"),
        Index("idx_pickups_participant", "participant_id"),
    )


class Delivery(Base, BookingMixin):
    """A seller's claim on a delivery slot."""

    __tablename__ = "deliveries"

    __table_args__ = (
        Index("idx_deliveries_schedule", "schedule_id"),
        Index("idx_deliveries_order", "order_id"),
        # Eligibility gate lookup: completed deliveries by admin and product
        Index("idx_deliveries_admin_status_product", "admin_id", "status", "product_id"),
    )
