"""Schedule schemas for request/response validation."""

from datetime import date, datetime, time
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

ScheduleKind = Literal["pickup", "delivery"]
ScheduleStatus = Literal["active", "inactive"]


class ScheduleCreate(BaseModel):
    """Schema for schedule creation request."""

    kind: ScheduleKind
    date: date
    start_time: time
    end_time: time
    location: str = Field(..., min_length=1, max_length=255)
    max_slots: int = Field(..., ge=1)
    notes: str = ""


class ScheduleStatusUpdate(BaseModel):
    """Schema for toggling a schedule on or off."""

    status: ScheduleStatus


class ScheduleResponse(BaseModel):
    """Schema for schedule response."""

    schedule_id: UUID
    admin_id: UUID
    kind: str
    date: date
    start_time: time
    end_time: time
    location: str
    max_slots: int
    status: str
    notes: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ScheduleListResponse(BaseModel):
    """Schema for schedule list response."""

    schedules: list[ScheduleResponse]
    total: int


class ScheduleAvailabilityResponse(ScheduleResponse):
    """A schedule annotated with derived occupancy for a participant."""

    current_slots: int
    available_slots: int
    is_available: bool
    assigned_admin_id: UUID
    requires_completed_delivery: bool = False


class EligibleScheduleListResponse(BaseModel):
    """Schema for the eligible schedules a buyer or seller may book."""

    schedules: list[ScheduleAvailabilityResponse]
    total: int
