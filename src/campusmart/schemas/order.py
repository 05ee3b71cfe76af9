"""Order schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class OrderResponse(BaseModel):
    """Schema for order response."""

    order_id: UUID
    buyer_id: UUID
    seller_id: UUID
    product_id: UUID
    assigned_admin_id: UUID | None
    assigned_at: datetime | None
    assigned_by: UUID | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    """Schema for order list response."""

    orders: list[OrderResponse]
    total: int


class AssignAdminRequest(BaseModel):
    """Schema for assigning a logistics admin to an order."""

    assigned_admin_id: UUID
