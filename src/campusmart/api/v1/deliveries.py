"""Delivery booking API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from campusmart.api.deps import (
    AdminParticipant,
    DbSession,
    RedisServiceDep,
    SellerParticipant,
)
from campusmart.schemas.booking import (
    BookingResponse,
    BookingStatusUpdate,
    DeliveryCreate,
    DeliveryListResponse,
)
from campusmart.services.booking_service import BookingService
from campusmart.services.transition_service import TransitionService

router = APIRouter()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def book_delivery(
    delivery_data: DeliveryCreate,
    db: DbSession,
    seller: SellerParticipant,
    redis_service: RedisServiceDep,
):
    """Book a delivery slot to hand an item over to the admin."""
    service = BookingService(db, redis_service)
    delivery = await service.create_booking(
        kind="delivery",
        schedule_id=delivery_data.schedule_id,
        order_id=delivery_data.order_id,
        participant_id=seller.participant_id,
        preferred_time=delivery_data.preferred_time,
        notes=delivery_data.notes,
    )
    return BookingResponse.model_validate(delivery)


@router.get("/mine", response_model=DeliveryListResponse)
async def list_my_deliveries(
    db: DbSession,
    seller: SellerParticipant,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """List the seller's own deliveries, newest first."""
    service = BookingService(db)
    deliveries, total = await service.list_bookings(
        "delivery", participant_id=seller.participant_id, skip=skip, limit=limit
    )
    return DeliveryListResponse(
        deliveries=[BookingResponse.model_validate(d) for d in deliveries],
        total=total,
    )


@router.get("", response_model=DeliveryListResponse)
async def list_deliveries(
    db: DbSession,
    admin: AdminParticipant,
    booking_status: str | None = Query(None, alias="status"),
    schedule_id: UUID | None = None,
    mine: bool = Query(True, description="Only deliveries on the caller's schedules"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List deliveries for admins."""
    service = BookingService(db)
    deliveries, total = await service.list_bookings(
        "delivery",
        admin_id=admin.participant_id if mine else None,
        status=booking_status,
        schedule_id=schedule_id,
        skip=skip,
        limit=limit,
    )
    return DeliveryListResponse(
        deliveries=[BookingResponse.model_validate(d) for d in deliveries],
        total=total,
    )


@router.put("/{delivery_id}/status", response_model=BookingResponse)
async def update_delivery_status(
    delivery_id: UUID,
    status_data: BookingStatusUpdate,
    db: DbSession,
    admin: AdminParticipant,
    redis_service: RedisServiceDep,
):
    """Move a delivery to a new status (admin only).

    Completing a delivery is what opens pickup booking for the buyer.
    """
    service = TransitionService(db, redis_service)
    delivery = await service.transition_booking_status(
        admin_id=admin.participant_id,
        kind="delivery",
        booking_id=delivery_id,
        new_status=status_data.status,
        notes=status_data.admin_notes,
    )
    return BookingResponse.model_validate(delivery)
