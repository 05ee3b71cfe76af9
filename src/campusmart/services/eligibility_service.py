"""Eligibility gate: which admin schedules a buyer or seller may see and book.

A participant only ever sees schedules published by the admins assigned to
their orders. On top of that, some (role, kind) pairs require an upstream
booking to be completed first. The pairs are listed in ``GATE_POLICIES`` so
the buyer/seller asymmetry is explicit:

- buyers book pickups, and only once a delivery for one of their products
  has been completed under the same admin
- sellers book deliveries with no upstream requirement

The completed-delivery check is a proxy: it matches on admin and on any
product the buyer has an assigned order for, not on the specific order.
"""

import logging
from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.models.booking import Delivery
from campusmart.models.order import Order
from campusmart.models.schedule import AdminSchedule
from campusmart.services.exceptions import (
    AuthorizationError,
    IneligibleScheduleError,
    ValidationError,
)
from campusmart.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatePolicy:
    """Upstream requirement for a (role, kind) pair."""

    requires_completed_delivery: bool


GATE_POLICIES: dict[tuple[str, str], GatePolicy] = {
    ("buyer", "pickup"): GatePolicy(requires_completed_delivery=True),
    ("seller", "delivery"): GatePolicy(requires_completed_delivery=False),
}

# Which participant books each kind of slot
BOOKING_ROLE = {"pickup": "buyer", "delivery": "seller"}


def get_policy(role: str, kind: str) -> GatePolicy:
    """Look up the gate policy for a role and schedule kind.

    Raises:
        ValidationError: The role never books this kind of slot
    """
    policy = GATE_POLICIES.get((role, kind))
    if policy is None:
        raise ValidationError(f"A {role} cannot book {kind} schedules")
    return policy


@dataclass
class EligibleCandidates:
    """Candidate schedules plus the per-admin eligibility flag."""

    schedules: list[AdminSchedule]
    eligible_admins: set[UUID]
    policy: GatePolicy

    def is_eligible(self, schedule: AdminSchedule) -> bool:
        return schedule.admin_id in self.eligible_admins


class EligibilityService:
    """Service class for the eligibility gate."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_assigned_orders(self, participant_id: UUID, role: str) -> list[Order]:
        """Orders where the participant is buyer (or seller) and an admin is assigned."""
        owner_column = Order.buyer_id if role == "buyer" else Order.seller_id
        result = await self.db.execute(
            select(Order).where(
                and_(
                    owner_column == participant_id,
                    Order.assigned_admin_id.is_not(None),
                )
            )
        )
        return list(result.scalars().all())

    async def get_admins_with_completed_delivery(
        self, admin_ids: set[UUID], product_ids: set[UUID]
    ) -> set[UUID]:
        """Admins among ``admin_ids`` with a completed delivery for any of the products."""
        if not admin_ids or not product_ids:
            return set()

        result = await self.db.execute(
            select(Delivery.admin_id)
            .where(
                and_(
                    Delivery.admin_id.in_(admin_ids),
                    Delivery.status == "completed",
                    Delivery.product_id.in_(product_ids),
                )
            )
            .distinct()
        )
        return set(result.scalars().all())

    async def _eligible_admins(
        self, policy: GatePolicy, orders: list[Order], admin_ids: set[UUID]
    ) -> set[UUID]:
        if not policy.requires_completed_delivery:
            return set(admin_ids)
        product_ids = {order.product_id for order in orders}
        return await self.get_admins_with_completed_delivery(admin_ids, product_ids)

    async def get_candidates(
        self,
        participant_id: UUID,
        role: str,
        kind: str,
        status: str = "active",
        day: date | None = None,
    ) -> EligibleCandidates:
        """Resolve the schedules a participant may see, and which are eligible.

        Returns no schedules when none of the participant's orders has an
        assigned admin, regardless of what is published system-wide.
        """
        policy = get_policy(role, kind)

        orders = await self.get_assigned_orders(participant_id, role)
        if not orders:
            logger.info(f"No orders with assigned admins for {role} {participant_id}")
            return EligibleCandidates(schedules=[], eligible_admins=set(), policy=policy)

        admin_ids = {order.assigned_admin_id for order in orders}

        schedules = await ScheduleService(self.db).list_schedules(
            admin_ids=list(admin_ids),
            kind=kind,
            status=status,
            date_from=day,
            date_to=day,
        )

        eligible_admins = await self._eligible_admins(policy, orders, admin_ids)
        return EligibleCandidates(
            schedules=schedules, eligible_admins=eligible_admins, policy=policy
        )

    async def check_booking_eligibility(
        self, participant_id: UUID, order: Order, schedule: AdminSchedule
    ) -> None:
        """Re-apply the gate for one booking request.

        Raises:
            AuthorizationError: Order does not belong to the participant
            IneligibleScheduleError: Schedule is not from the order's admin, or
                the upstream delivery is not completed yet
        """
        role = BOOKING_ROLE[schedule.kind]
        policy = get_policy(role, schedule.kind)

        owner_id = order.buyer_id if role == "buyer" else order.seller_id
        if owner_id != participant_id:
            raise AuthorizationError(f"Order {order.order_id} does not belong to this {role}")

        if order.assigned_admin_id is None or order.assigned_admin_id != schedule.admin_id:
            raise IneligibleScheduleError(
                "Schedule is not published by the admin assigned to this order"
            )

        if policy.requires_completed_delivery:
            orders = await self.get_assigned_orders(participant_id, role)
            eligible = await self._eligible_admins(policy, orders, {schedule.admin_id})
            if schedule.admin_id not in eligible:
                raise IneligibleScheduleError(
                    "Pickup opens once the delivery for your item is completed"
                )
