"""Booking ledger for pickups and deliveries.

Occupancy is always counted from the ledger, never stored. Creating a booking
is a read-then-write, so it is serialized per schedule with two layers:

- Layer 1: Redis lock on lock:schedule:{id} (SET NX EX, bounded retries)
- Layer 2: PostgreSQL row lock on the schedule (SELECT FOR UPDATE), held
  until the insert commits, so capacity holds even if the Redis lock expires
"""

import asyncio
import logging
import time
from datetime import time as time_of_day
from uuid import UUID

from redis.exceptions import RedisError
from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.core.config import settings
from campusmart.middleware.metrics import (
    BOOKING_COUNTER,
    BOOKING_LATENCY,
    BOOKING_LOCK_CONTENTION,
)
from campusmart.models.booking import Delivery, Pickup
from campusmart.models.order import Order
from campusmart.models.schedule import AdminSchedule
from campusmart.services.eligibility_service import EligibilityService
from campusmart.services.exceptions import (
    BookingNotFoundError,
    CapacityExceededError,
    DuplicateBookingError,
    InternalError,
    InvalidTransitionError,
    LogisticsError,
    OrderNotFoundError,
    ScheduleInactiveError,
    ScheduleNotFoundError,
    SlotBusyError,
    ValidationError,
)
from campusmart.services.order_service import OrderService
from campusmart.services.redis_service import RedisService

logger = logging.getLogger(__name__)

PICKUP_STATUSES = ("pending", "confirmed", "in_progress", "completed", "cancelled")
# Deliveries never go through in_progress
DELIVERY_STATUSES = ("pending", "confirmed", "completed", "cancelled")

STATUS_VOCABULARY: dict[str, tuple[str, ...]] = {
    "pickup": PICKUP_STATUSES,
    "delivery": DELIVERY_STATUSES,
}

# Any status may follow any other. Narrow a row here to enforce ordering.
TRANSITIONS: dict[str, dict[str, frozenset[str]]] = {
    kind: {status: frozenset(statuses) for status in statuses}
    for kind, statuses in STATUS_VOCABULARY.items()
}

LEDGERS: dict[str, type[Pickup] | type[Delivery]] = {
    "pickup": Pickup,
    "delivery": Delivery,
}

Booking = Pickup | Delivery


def get_ledger(kind: str) -> type[Pickup] | type[Delivery]:
    ledger = LEDGERS.get(kind)
    if ledger is None:
        raise ValidationError("Kind must be either pickup or delivery")
    return ledger


def validate_transition(kind: str, current: str, new: str) -> None:
    """Check a status change against the ledger's vocabulary and transition table.

    Raises:
        InvalidTransitionError: ``new`` is unknown, or not allowed after ``current``
    """
    vocabulary = STATUS_VOCABULARY[kind]
    if new not in vocabulary:
        raise InvalidTransitionError(
            f"Invalid {kind} status '{new}'. Expected one of: {', '.join(vocabulary)}"
        )
    allowed = TRANSITIONS[kind].get(current, frozenset(vocabulary))
    if new not in allowed:
        raise InvalidTransitionError(f"Cannot move {kind} from '{current}' to '{new}'")


class BookingService:
    """Service class for the pickup and delivery ledgers."""

    def __init__(self, db: AsyncSession, redis_service: RedisService | None = None):
        """Initialize booking service.

        Args:
            db: SQLAlchemy async session
            redis_service: Redis service for the schedule lock; without it only
                the database row lock serializes bookings
        """
        self.db = db
        self.redis_service = redis_service
        self.eligibility = EligibilityService(db)

    # ==================== Occupancy ====================

    async def count_occupancy(
        self, kind: str, schedule_ids: list[UUID]
    ) -> dict[UUID, int]:
        """Count ledger rows per schedule in one grouped query.

        Schedules without bookings are absent from the result.
        """
        if not schedule_ids:
            return {}

        ledger = get_ledger(kind)
        result = await self.db.execute(
            select(ledger.schedule_id, func.count(ledger.booking_id))
            .where(ledger.schedule_id.in_(schedule_ids))
            .group_by(ledger.schedule_id)
        )
        return {schedule_id: count for schedule_id, count in result.all()}

    # ==================== Booking creation ====================

    async def _acquire_schedule_lock(self, schedule_id: UUID) -> str | None:
        """Layer 1: take the Redis lock for a schedule, retrying briefly.

        Returns the owner id, or None when Redis is not configured or down
        (the row lock still serializes writers in that case).

        Raises:
            SlotBusyError: Lock still held after all retries
        """
        if self.redis_service is None:
            return None

        owner_id = None
        try:
            for _ in range(settings.BOOKING_LOCK_RETRIES):
                acquired, owner_id = await self.redis_service.acquire_lock(
                    str(schedule_id),
                    owner_id=owner_id,
                    ttl=settings.BOOKING_LOCK_TTL_SECONDS,
                )
                if acquired:
                    return owner_id
                BOOKING_LOCK_CONTENTION.inc()
                await asyncio.sleep(settings.BOOKING_LOCK_RETRY_DELAY_SECONDS)
        except RedisError as e:
            logger.warning(f"Schedule lock unavailable, relying on row lock: {e}")
            return None

        raise SlotBusyError(f"Schedule {schedule_id} is busy, please retry")

    async def _release_schedule_lock(self, schedule_id: UUID, owner_id: str | None) -> None:
        if owner_id is None or self.redis_service is None:
            return
        try:
            released = await self.redis_service.release_lock(str(schedule_id), owner_id)
            if not released:
                logger.warning(f"Schedule lock for {schedule_id} expired before release")
        except RedisError as e:
            logger.warning(f"Failed to release schedule lock {schedule_id}: {e}")

    async def _lock_schedule(self, schedule_id: UUID, kind: str) -> AdminSchedule:
        """Layer 2: SELECT ... FOR UPDATE on the schedule row.

        Raises:
            ScheduleNotFoundError: Missing, or not a schedule of this kind
            ScheduleInactiveError: Schedule was deactivated
        """
        result = await self.db.execute(
            select(AdminSchedule)
            .where(AdminSchedule.schedule_id == schedule_id)
            .with_for_update()
        )
        schedule = result.scalar_one_or_none()

        if schedule is None or schedule.kind != kind:
            raise ScheduleNotFoundError(f"{kind.capitalize()} schedule {schedule_id} not found")
        if schedule.status != "active":
            raise ScheduleInactiveError(f"Schedule {schedule_id} is inactive")
        return schedule

    async def _get_order(self, order_id: UUID) -> Order:
        return await OrderService(self.db).get_order_by_id(order_id)

    async def _find_existing(self, kind: str, order_id: UUID) -> Booking | None:
        ledger = get_ledger(kind)
        result = await self.db.execute(
            select(ledger).where(ledger.order_id == order_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def _check_linked_delivery(self, delivery_id: UUID, order: Order) -> None:
        result = await self.db.execute(
            select(Delivery.booking_id).where(
                and_(
                    Delivery.booking_id == delivery_id,
                    Delivery.product_id == order.product_id,
                )
            )
        )
        if result.scalar_one_or_none() is None:
            raise BookingNotFoundError("Delivery not found for this product")

    async def _insert_within_capacity(
        self,
        kind: str,
        schedule_id: UUID,
        order_id: UUID,
        participant_id: UUID,
        preferred_time: time_of_day | None,
        notes: str,
        delivery_id: UUID | None,
    ) -> Booking:
        """Check every precondition and insert, inside the schedule row lock."""
        try:
            schedule = await self._lock_schedule(schedule_id, kind)
            order = await self._get_order(order_id)
            await self.eligibility.check_booking_eligibility(participant_id, order, schedule)

            if await self._find_existing(kind, order_id) is not None:
                raise DuplicateBookingError(f"Order {order_id} already has a {kind} booked")

            if kind == "pickup" and delivery_id is not None:
                await self._check_linked_delivery(delivery_id, order)

            occupancy = (await self.count_occupancy(kind, [schedule_id])).get(schedule_id, 0)
            if occupancy >= schedule.max_slots:
                raise CapacityExceededError(
                    f"No available slots for schedule {schedule_id} "
                    f"({occupancy}/{schedule.max_slots})"
                )

            ledger = get_ledger(kind)
            booking = ledger(
                schedule_id=schedule_id,
                order_id=order_id,
                participant_id=participant_id,
                admin_id=schedule.admin_id,
                product_id=order.product_id,
                status="pending",
                preferred_time=preferred_time or schedule.start_time,
                notes=notes,
            )
            if kind == "pickup":
                booking.delivery_id = delivery_id

            self.db.add(booking)
            await self.db.commit()
        except LogisticsError:
            # Releases the row lock
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to write {kind} booking for schedule {schedule_id}: {e}")
            raise InternalError(f"Failed to create {kind} booking") from e

        await self.db.refresh(booking)
        return booking

    async def create_booking(
        self,
        kind: str,
        schedule_id: UUID,
        order_id: UUID,
        participant_id: UUID,
        preferred_time: time_of_day | None = None,
        notes: str = "",
        delivery_id: UUID | None = None,
    ) -> Booking:
        """Book one unit of a schedule's capacity for an order.

        Flow:
        1. Acquire the Redis schedule lock (Layer 1)
        2. Lock the schedule row and re-check it is active (Layer 2)
        3. Re-apply the eligibility gate for this order
        4. Recount occupancy and insert only if below max_slots

        Raises:
            ScheduleNotFoundError, ScheduleInactiveError, OrderNotFoundError,
            AuthorizationError, IneligibleScheduleError, DuplicateBookingError,
            CapacityExceededError, SlotBusyError, InternalError
        """
        get_ledger(kind)
        start = time.perf_counter()
        outcome = "error"

        try:
            owner_id = await self._acquire_schedule_lock(schedule_id)
            try:
                booking = await self._insert_within_capacity(
                    kind, schedule_id, order_id, participant_id, preferred_time, notes, delivery_id
                )
            finally:
                await self._release_schedule_lock(schedule_id, owner_id)

            outcome = "success"
            logger.info(
                f"{kind.capitalize()} {booking.booking_id} booked on schedule {schedule_id} "
                f"for order {order_id}"
            )
            return booking

        except LogisticsError as e:
            outcome = e.code.lower()
            if isinstance(e, CapacityExceededError):
                logger.warning(str(e))
            raise
        finally:
            BOOKING_COUNTER.labels(kind=kind, outcome=outcome).inc()
            BOOKING_LATENCY.labels(kind=kind).observe(time.perf_counter() - start)

    # ==================== Status updates ====================

    async def get_booking(self, kind: str, booking_id: UUID) -> Booking:
        ledger = get_ledger(kind)
        result = await self.db.execute(select(ledger).where(ledger.booking_id == booking_id))
        booking = result.scalar_one_or_none()
        if booking is None:
            raise BookingNotFoundError(f"{kind.capitalize()} {booking_id} not found")
        return booking

    async def update_status(
        self,
        kind: str,
        booking_id: UUID,
        status: str,
        admin_notes: str | None = None,
        booking: Booking | None = None,
    ) -> Booking:
        """Set a booking's status (and optionally admin notes).

        The booking is left untouched when the status is rejected. Pass
        ``booking`` when the caller already loaded it.

        Raises:
            BookingNotFoundError: Booking does not exist
            InvalidTransitionError: Status is not valid for this ledger
        """
        if booking is None:
            booking = await self.get_booking(kind, booking_id)
        previous = booking.status
        validate_transition(kind, previous, status)

        booking.status = status
        if admin_notes:
            booking.admin_notes = admin_notes

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update {kind} {booking_id} status: {e}")
            raise InternalError(f"Failed to update {kind} status") from e

        await self.db.refresh(booking)
        logger.info(f"{kind.capitalize()} {booking_id} moved from {previous} to {status}")
        return booking

    # ==================== Queries ====================

    async def list_bookings(
        self,
        kind: str,
        participant_id: UUID | None = None,
        admin_id: UUID | None = None,
        status: str | None = None,
        schedule_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[list[Booking], int]:
        """List bookings of one kind, newest first.

        Returns:
            Tuple of (bookings list, total count)
        """
        ledger = get_ledger(kind)

        conditions = []
        if participant_id is not None:
            conditions.append(ledger.participant_id == participant_id)
        if admin_id is not None:
            conditions.append(ledger.admin_id == admin_id)
        if status is not None:
            conditions.append(ledger.status == status)
        if schedule_id is not None:
            conditions.append(ledger.schedule_id == schedule_id)

        count_result = await self.db.execute(
            select(func.count(ledger.booking_id)).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            select(ledger)
            .where(*conditions)
            .order_by(ledger.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total
