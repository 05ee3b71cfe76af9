"""Pydantic schemas for request/response validation."""

from campusmart.schemas.booking import (
    BookingResponse,
    BookingStatusUpdate,
    DeliveryCreate,
    DeliveryListResponse,
    PickupCreate,
    PickupListResponse,
    PickupResponse,
)
from campusmart.schemas.order import AssignAdminRequest, OrderListResponse, OrderResponse
from campusmart.schemas.schedule import (
    EligibleScheduleListResponse,
    ScheduleAvailabilityResponse,
    ScheduleCreate,
    ScheduleListResponse,
    ScheduleResponse,
    ScheduleStatusUpdate,
)

__all__ = [
    "ScheduleCreate",
    "ScheduleStatusUpdate",
    "ScheduleResponse",
    "ScheduleListResponse",
    "ScheduleAvailabilityResponse",
    "EligibleScheduleListResponse",
    "PickupCreate",
    "DeliveryCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "PickupResponse",
    "PickupListResponse",
    "DeliveryListResponse",
    "OrderResponse",
    "OrderListResponse",
    "AssignAdminRequest",
]
