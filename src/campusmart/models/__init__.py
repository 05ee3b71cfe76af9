"""SQLAlchemy ORM models."""

from campusmart.models.base import TimestampMixin
from campusmart.models.booking import BookingMixin, Delivery, Pickup
from campusmart.models.order import Order
from campusmart.models.product import Product
from campusmart.models.schedule import AdminSchedule
from campusmart.models.user import User

__all__ = [
    "TimestampMixin",
    "BookingMixin",
    "User",
    "Product",
    "Order",
    "AdminSchedule",
    "Pickup",
    "Delivery",
]
