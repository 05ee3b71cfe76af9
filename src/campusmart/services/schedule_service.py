"""Schedule registry: admin-published pickup and delivery slots."""

import logging
from datetime import date, time
from uuid import UUID

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.core.config import settings
from campusmart.models.schedule import AdminSchedule
from campusmart.services.exceptions import (
    AuthorizationError,
    InternalError,
    ScheduleConflictError,
    ScheduleNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SCHEDULE_KINDS = ("pickup", "delivery")
SCHEDULE_STATUSES = ("active", "inactive")


class ScheduleService:
    """Service class for schedule registry operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _validate(
        self, kind: str, start_time: time, end_time: time, max_slots: int
    ) -> None:
        if kind not in SCHEDULE_KINDS:
            raise ValidationError("Kind must be either pickup or delivery")
        if max_slots < 1 or max_slots > settings.MAX_SLOTS_PER_SCHEDULE:
            raise ValidationError(
                f"Max slots must be between 1 and {settings.MAX_SLOTS_PER_SCHEDULE}"
            )
        if end_time <= start_time:
            raise ValidationError("end_time must be after start_time")

    async def find_overlapping(
        self,
        admin_id: UUID,
        kind: str,
        day: date,
        start_time: time,
        end_time: time,
    ) -> AdminSchedule | None:
        """Find a schedule of the same admin and kind whose window overlaps."""
        result = await self.db.execute(
            select(AdminSchedule)
            .where(
                and_(
                    AdminSchedule.admin_id == admin_id,
                    AdminSchedule.kind == kind,
                    AdminSchedule.date == day,
                    AdminSchedule.start_time < end_time,
                    AdminSchedule.end_time > start_time,
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_schedule(
        self,
        admin_id: UUID,
        kind: str,
        day: date,
        start_time: time,
        end_time: time,
        max_slots: int,
        location: str,
        notes: str = "",
    ) -> AdminSchedule:
        """Create a new active schedule owned by ``admin_id``.

        Raises:
            ValidationError: Unknown kind, capacity out of range or empty window
            ScheduleConflictError: Admin already has an overlapping slot
        """
        self._validate(kind, start_time, end_time, max_slots)

        existing = await self.find_overlapping(admin_id, kind, day, start_time, end_time)
        if existing is not None:
            raise ScheduleConflictError(
                "You already have a schedule that overlaps with this time slot"
            )

        schedule = AdminSchedule(
            admin_id=admin_id,
            kind=kind,
            date=day,
            start_time=start_time,
            end_time=end_time,
            location=location,
            max_slots=max_slots,
            status="active",
            notes=notes,
        )

        self.db.add(schedule)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create {kind} schedule for admin {admin_id}: {e}")
            raise InternalError("Failed to create schedule") from e

        await self.db.refresh(schedule)

        logger.info(
            f"Admin {admin_id} created {kind} schedule {schedule.schedule_id} "
            f"on {day} {start_time}-{end_time} ({max_slots} slots)"
        )
        return schedule

    async def list_schedules(
        self,
        admin_id: UUID | None = None,
        admin_ids: list[UUID] | None = None,
        kind: str | None = None,
        status: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AdminSchedule]:
        """List schedules matching every given filter, ordered by date and start.

        Date bounds are inclusive. ``admin_ids`` restricts to a set of owners
        and an empty set matches nothing.
        """
        query = select(AdminSchedule)

        if admin_id is not None:
            query = query.where(AdminSchedule.admin_id == admin_id)
        if admin_ids is not None:
            if not admin_ids:
                return []
            query = query.where(AdminSchedule.admin_id.in_(admin_ids))
        if kind is not None:
            query = query.where(AdminSchedule.kind == kind)
        if status is not None:
            query = query.where(AdminSchedule.status == status)
        if date_from is not None:
            query = query.where(AdminSchedule.date >= date_from)
        if date_to is not None:
            query = query.where(AdminSchedule.date <= date_to)

        result = await self.db.execute(
            query.order_by(AdminSchedule.date.asc(), AdminSchedule.start_time.asc())
        )
        return list(result.scalars().all())

    async def get_schedule(self, schedule_id: UUID) -> AdminSchedule:
        """Get schedule by ID.

        Raises:
            ScheduleNotFoundError: Schedule does not exist
        """
        result = await self.db.execute(
            select(AdminSchedule).where(AdminSchedule.schedule_id == schedule_id)
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    async def set_status(
        self, admin_id: UUID, schedule_id: UUID, status: str
    ) -> AdminSchedule:
        """Activate or deactivate a schedule. Only the owning admin may do this.

        Capacity is fixed at creation and schedules are never deleted.
        """
        if status not in SCHEDULE_STATUSES:
            raise ValidationError("Status must be either active or inactive")

        schedule = await self.get_schedule(schedule_id)
        if schedule.admin_id != admin_id:
            raise AuthorizationError("Schedule belongs to another admin")

        try:
            await self.db.execute(
                update(AdminSchedule)
                .where(AdminSchedule.schedule_id == schedule_id)
                .values(status=status)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to set schedule {schedule_id} to {status}: {e}")
            raise InternalError("Failed to update schedule status") from e

        await self.db.refresh(schedule)

        logger.info(f"Admin {admin_id} set schedule {schedule_id} to {status}")
        return schedule
