"""Pickup booking API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from campusmart.api.deps import (
    AdminParticipant,
    BuyerParticipant,
    DbSession,
    RedisServiceDep,
)
from campusmart.schemas.booking import (
    BookingStatusUpdate,
    PickupCreate,
    PickupListResponse,
    PickupResponse,
)
from campusmart.services.booking_service import BookingService
from campusmart.services.transition_service import TransitionService

router = APIRouter()


@router.post("", response_model=PickupResponse, status_code=status.HTTP_201_CREATED)
async def book_pickup(
    pickup_data: PickupCreate,
    db: DbSession,
    buyer: BuyerParticipant,
    redis_service: RedisServiceDep,
):
    """Book a pickup slot for one of the buyer's orders."""
    service = BookingService(db, redis_service)
    pickup = await service.create_booking(
        kind="pickup",
        schedule_id=pickup_data.schedule_id,
        order_id=pickup_data.order_id,
        participant_id=buyer.participant_id,
        preferred_time=pickup_data.preferred_time,
        notes=pickup_data.notes,
        delivery_id=pickup_data.delivery_id,
    )
    return PickupResponse.model_validate(pickup)


@router.get("/mine", response_model=PickupListResponse)
async def list_my_pickups(
    db: DbSession,
    buyer: BuyerParticipant,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """List the buyer's own pickups, newest first."""
    service = BookingService(db)
    pickups, total = await service.list_bookings(
        "pickup", participant_id=buyer.participant_id, skip=skip, limit=limit
    )
    return PickupListResponse(
        pickups=[PickupResponse.model_validate(p) for p in pickups],
        total=total,
    )


@router.get("", response_model=PickupListResponse)
async def list_pickups(
    db: DbSession,
    admin: AdminParticipant,
    booking_status: str | None = Query(None, alias="status"),
    schedule_id: UUID | None = None,
    mine: bool = Query(True, description="Only pickups on the caller's schedules"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """List pickups for admins."""
    service = BookingService(db)
    pickups, total = await service.list_bookings(
        "pickup",
        admin_id=admin.participant_id if mine else None,
        status=booking_status,
        schedule_id=schedule_id,
        skip=skip,
        limit=limit,
    )
    return PickupListResponse(
        pickups=[PickupResponse.model_validate(p) for p in pickups],
        total=total,
    )


@router.put("/{pickup_id}/status", response_model=PickupResponse)
async def update_pickup_status(
    pickup_id: UUID,
    status_data: BookingStatusUpdate,
    db: DbSession,
    admin: AdminParticipant,
    redis_service: RedisServiceDep,
):
    """Move a pickup to a new status (admin only)."""
    service = TransitionService(db, redis_service)
    pickup = await service.transition_booking_status(
        admin_id=admin.participant_id,
        kind="pickup",
        booking_id=pickup_id,
        new_status=status_data.status,
        notes=status_data.admin_notes,
    )
    return PickupResponse.model_validate(pickup)
