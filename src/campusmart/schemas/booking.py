"""Booking schemas for pickups and deliveries."""

from datetime import datetime, time
from uuid import UUID

from pydantic import BaseModel, Field


class DeliveryCreate(BaseModel):
    """Schema for a seller booking a delivery slot."""

    schedule_id: UUID
    order_id: UUID
    preferred_time: time | None = None
    notes: str = Field("", max_length=2000)


class PickupCreate(DeliveryCreate):
    """Schema for a buyer booking a pickup slot."""

    delivery_id: UUID | None = None


class BookingStatusUpdate(BaseModel):
    """Schema for an admin status transition.

    ``status`` is validated against the ledger's vocabulary by the service so
    that unknown values surface as a domain validation error.
    """

    status: str = Field(..., min_length=1, max_length=20)
    admin_notes: str | None = None


class BookingResponse(BaseModel):
    """Schema for booking response."""

    booking_id: UUID
    schedule_id: UUID
    order_id: UUID
    participant_id: UUID
    admin_id: UUID
    product_id: UUID
    status: str
    preferred_time: time | None
    notes: str
    admin_notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PickupResponse(BookingResponse):
    """Schema for pickup response."""

    delivery_id: UUID | None = None


class PickupListResponse(BaseModel):
    pickups: list[PickupResponse]
    total: int


class DeliveryListResponse(BaseModel):
    deliveries: list[BookingResponse]
    total: int
