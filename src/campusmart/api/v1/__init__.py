"""API v1 routers."""

from campusmart.api.v1 import deliveries, orders, pickups, schedules

__all__ = ["deliveries", "orders", "pickups", "schedules"]
