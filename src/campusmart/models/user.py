"""User model for marketplace participants and admins."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Index, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campusmart.core.database import Base
from campusmart.models.base import TimestampMixin

if TYPE_CHECKING:
    from campusmart.models.schedule import AdminSchedule


class User(Base, TimestampMixin):
    """A buyer, seller or logistics admin.

    Accounts are managed by the account service; this table only carries what
    the logistics core needs to resolve roles.
    """

    __tablename__ = "users"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="buyer",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="active",
    )

    # Relationships
    schedules: Mapped[List["AdminSchedule"]] = relationship(
        "AdminSchedule", back_populates="admin"
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'buyer', 'seller')", name="chk_user_role"),
        Index("idx_users_role", "role"),
    )
