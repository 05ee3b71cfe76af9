"""Slot availability projection for eligible schedules."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.models.schedule import AdminSchedule
from campusmart.services.booking_service import BookingService
from campusmart.services.eligibility_service import EligibilityService

logger = logging.getLogger(__name__)


@dataclass
class ScheduleAvailability:
    """A schedule with occupancy derived from its ledger."""

    schedule: AdminSchedule
    current_slots: int
    available_slots: int
    is_available: bool
    requires_completed_delivery: bool

    @property
    def assigned_admin_id(self) -> UUID:
        return self.schedule.admin_id

    def to_dict(self) -> dict:
        """Flatten into the shape of ``ScheduleAvailabilityResponse``."""
        schedule = self.schedule
        return {
            "schedule_id": schedule.schedule_id,
            "admin_id": schedule.admin_id,
            "kind": schedule.kind,
            "date": schedule.date,
            "start_time": schedule.start_time,
            "end_time": schedule.end_time,
            "location": schedule.location,
            "max_slots": schedule.max_slots,
            "status": schedule.status,
            "notes": schedule.notes,
            "created_at": schedule.created_at,
            "current_slots": self.current_slots,
            "available_slots": self.available_slots,
            "is_available": self.is_available,
            "assigned_admin_id": self.assigned_admin_id,
            "requires_completed_delivery": self.requires_completed_delivery,
        }


def project_availability(
    schedules: Iterable[AdminSchedule],
    occupancy: dict[UUID, int],
    is_eligible: Callable[[AdminSchedule], bool],
    requires_completed_delivery: bool = False,
) -> list[ScheduleAvailability]:
    """Annotate schedules with remaining capacity and keep only bookable ones.

    ``available_slots`` can go negative if capacity was overrun; such a
    schedule is simply not available.
    """
    projected = []
    for schedule in schedules:
        current = occupancy.get(schedule.schedule_id, 0)
        available = schedule.max_slots - current
        item = ScheduleAvailability(
            schedule=schedule,
            current_slots=current,
            available_slots=available,
            is_available=available > 0 and is_eligible(schedule),
            requires_completed_delivery=requires_completed_delivery,
        )
        if item.is_available:
            projected.append(item)
    return projected


class AvailabilityService:
    """Service class for the eligible-schedules query."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.eligibility = EligibilityService(db)
        self.bookings = BookingService(db)

    async def list_eligible_schedules(
        self,
        participant_id: UUID,
        role: str,
        kind: str,
        status: str = "active",
        day: date | None = None,
    ) -> list[ScheduleAvailability]:
        """Schedules the participant can book right now, ordered by date and start.

        Raises:
            ValidationError: The role never books this kind of slot
        """
        candidates = await self.eligibility.get_candidates(
            participant_id, role, kind, status=status, day=day
        )
        if not candidates.schedules:
            return []

        occupancy = await self.bookings.count_occupancy(
            kind, [schedule.schedule_id for schedule in candidates.schedules]
        )
        projected = project_availability(
            candidates.schedules,
            occupancy,
            candidates.is_eligible,
            requires_completed_delivery=candidates.policy.requires_completed_delivery,
        )

        logger.info(
            f"{role.capitalize()} {participant_id} sees {len(projected)} of "
            f"{len(candidates.schedules)} {kind} schedules"
        )
        return projected
