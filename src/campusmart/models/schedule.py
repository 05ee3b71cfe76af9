"""Admin schedule model for pickup and delivery slots."""

import datetime as dt
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campusmart.core.database import Base
from campusmart.models.base import TimestampMixin

if TYPE_CHECKING:
    from campusmart.models.user import User


class AdminSchedule(Base, TimestampMixin):
    """A time-boxed slot published by an admin.

    Occupancy is never stored here; it is counted from the pickups or
    deliveries table on every read.
    """

    __tablename__ = "admin_schedules"

    schedule_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    admin_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.user_id"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
    )
    start_time: Mapped[dt.time] = mapped_column(
        Time,
        nullable=False,
    )
    end_time: Mapped[dt.time] = mapped_column(
        Time,
        nullable=False,
    )
    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    max_slots: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )
    notes: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    # Relationships
    admin: Mapped["User"] = relationship("User", back_populates="schedules")

    __table_args__ = (
        CheckConstraint("kind IN ('pickup', 'delivery')", name="chk_schedule_kind"),
        CheckConstraint("max_slots >= 1", name="chk_schedule_max_slots_positive"),
        CheckConstraint("end_time > start_time", name="chk_schedule_time"),
        Index("idx_schedules_admin_kind_date", "admin_id", "kind", "date"),
        Index("idx_schedules_status", "status"),
    )
