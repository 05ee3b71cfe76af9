"""Schedule API endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from campusmart.api.deps import AdminParticipant, DbSession, TraderParticipant
from campusmart.schemas.schedule import (
    EligibleScheduleListResponse,
    ScheduleAvailabilityResponse,
    ScheduleCreate,
    ScheduleKind,
    ScheduleListResponse,
    ScheduleResponse,
    ScheduleStatus,
    ScheduleStatusUpdate,
)
from campusmart.services.availability_service import AvailabilityService
from campusmart.services.eligibility_service import BOOKING_ROLE
from campusmart.services.schedule_service import ScheduleService

router = APIRouter()


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    schedule_data: ScheduleCreate,
    db: DbSession,
    admin: AdminParticipant,
):
    """Publish a pickup or delivery slot (admin only)."""
    service = ScheduleService(db)
    schedule = await service.create_schedule(
        admin_id=admin.participant_id,
        kind=schedule_data.kind,
        day=schedule_data.date,
        start_time=schedule_data.start_time,
        end_time=schedule_data.end_time,
        max_slots=schedule_data.max_slots,
        location=schedule_data.location,
        notes=schedule_data.notes,
    )
    return ScheduleResponse.model_validate(schedule)


@router.get("", response_model=ScheduleListResponse)
async def list_my_schedules(
    db: DbSession,
    admin: AdminParticipant,
    kind: ScheduleKind | None = None,
    schedule_status: ScheduleStatus | None = Query(None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
):
    """List the calling admin's own schedules."""
    service = ScheduleService(db)
    schedules = await service.list_schedules(
        admin_id=admin.participant_id,
        kind=kind,
        status=schedule_status,
        date_from=date_from,
        date_to=date_to,
    )
    return ScheduleListResponse(
        schedules=[ScheduleResponse.model_validate(s) for s in schedules],
        total=len(schedules),
    )


@router.get("/eligible", response_model=EligibleScheduleListResponse)
async def list_eligible_schedules(
    db: DbSession,
    participant: TraderParticipant,
    kind: ScheduleKind | None = None,
    schedule_status: ScheduleStatus = Query("active", alias="status"),
    day: date | None = Query(None, alias="date"),
):
    """List schedules the caller can book right now.

    Buyers see pickup slots and sellers see delivery slots when ``kind`` is
    omitted. Fully booked or not-yet-eligible schedules are left out.
    """
    if kind is None:
        kind = next(k for k, role in BOOKING_ROLE.items() if role == participant.role)

    service = AvailabilityService(db)
    items = await service.list_eligible_schedules(
        participant_id=participant.participant_id,
        role=participant.role,
        kind=kind,
        status=schedule_status,
        day=day,
    )
    return EligibleScheduleListResponse(
        schedules=[ScheduleAvailabilityResponse(**item.to_dict()) for item in items],
        total=len(items),
    )


@router.patch("/{schedule_id}/status", response_model=ScheduleResponse)
async def update_schedule_status(
    schedule_id: UUID,
    status_data: ScheduleStatusUpdate,
    db: DbSession,
    admin: AdminParticipant,
):
    """Activate or deactivate one of the caller's schedules."""
    service = ScheduleService(db)
    schedule = await service.set_status(
        admin_id=admin.participant_id,
        schedule_id=schedule_id,
        status=status_data.status,
    )
    return ScheduleResponse.model_validate(schedule)
