"""Tests for the eligibility gate.

Buyers may only book pickups from their order's admin once a delivery for
one of their products is completed there; sellers book deliveries from
their order's admin with no upstream requirement.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from campusmart.services.eligibility_service import (
    BOOKING_ROLE,
    GATE_POLICIES,
    EligibilityService,
    get_policy,
)
from campusmart.services.exceptions import (
    AuthorizationError,
    IneligibleScheduleError,
    ValidationError,
)
from campusmart.services.schedule_service import ScheduleService


class TestGatePolicies:
    """Test the (role, kind) policy table."""

    def test_buyer_pickup_requires_completed_delivery(self):
        assert get_policy("buyer", "pickup").requires_completed_delivery is True

    def test_seller_delivery_has_no_upstream_gate(self):
        assert get_policy("seller", "delivery").requires_completed_delivery is False

    @pytest.mark.parametrize(
        "role,kind",
        [("buyer", "delivery"), ("seller", "pickup"), ("admin", "pickup")],
    )
    def test_unsupported_pairs_rejected(self, role, kind):
        """Test buyers never book deliveries and sellers never book pickups."""
        with pytest.raises(ValidationError):
            get_policy(role, kind)

    def test_booking_role_matches_policies(self):
        """Test every bookable kind has a policy for the role that books it."""
        for kind, role in BOOKING_ROLE.items():
            assert (role, kind) in GATE_POLICIES


class TestCandidates:
    """Test resolving candidate schedules for a participant."""

    @pytest.mark.asyncio
    async def test_no_assigned_orders_means_no_schedules(self, mock_db, buyer_id):
        """Test a buyer without admin-assigned orders sees nothing."""
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[])), \
             patch.object(ScheduleService, "list_schedules", AsyncMock()) as list_schedules:
            candidates = await service.get_candidates(buyer_id, "buyer", "pickup")

        assert candidates.schedules == []
        list_schedules.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_buyer_without_completed_delivery_is_not_eligible(
        self, mock_db, buyer_id, make_order, make_schedule
    ):
        """Test schedules are found but none is eligible before the delivery completes."""
        order = make_order()
        schedule = make_schedule()
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[order])), \
             patch.object(ScheduleService, "list_schedules", AsyncMock(return_value=[schedule])), \
             patch.object(
                 service, "get_admins_with_completed_delivery", AsyncMock(return_value=set())
             ) as completed:
            candidates = await service.get_candidates(buyer_id, "buyer", "pickup")

        assert candidates.schedules == [schedule]
        assert candidates.is_eligible(schedule) is False
        completed.assert_awaited_once_with({order.assigned_admin_id}, {order.product_id})

    @pytest.mark.asyncio
    async def test_buyer_with_completed_delivery_is_eligible(
        self, mock_db, admin_id, buyer_id, make_order, make_schedule
    ):
        order = make_order()
        schedule = make_schedule()
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[order])), \
             patch.object(ScheduleService, "list_schedules", AsyncMock(return_value=[schedule])), \
             patch.object(
                 service, "get_admins_with_completed_delivery", AsyncMock(return_value={admin_id})
             ):
            candidates = await service.get_candidates(buyer_id, "buyer", "pickup")

        assert candidates.is_eligible(schedule) is True
        assert candidates.policy.requires_completed_delivery is True

    @pytest.mark.asyncio
    async def test_seller_needs_no_completed_delivery(
        self, mock_db, seller_id, make_order, make_schedule
    ):
        """Test sellers are eligible for every schedule of their assigned admins."""
        schedule = make_schedule(kind="delivery")
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[make_order()])), \
             patch.object(ScheduleService, "list_schedules", AsyncMock(return_value=[schedule])), \
             patch.object(service, "get_admins_with_completed_delivery", AsyncMock()) as completed:
            candidates = await service.get_candidates(seller_id, "seller", "delivery")

        assert candidates.is_eligible(schedule) is True
        completed.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_candidates_restricted_to_assigned_admins_and_day(
        self, mock_db, buyer_id, make_order, make_schedule
    ):
        """Test the schedule query is limited to assigned admins, kind and a single day."""
        first_admin, second_admin = uuid4(), uuid4()
        orders = [make_order(assigned_admin_id=first_admin), make_order(assigned_admin_id=second_admin)]
        service = EligibilityService(mock_db)
        day = make_schedule().date

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=orders)), \
             patch.object(ScheduleService, "list_schedules", AsyncMock(return_value=[])) as list_schedules, \
             patch.object(service, "get_admins_with_completed_delivery", AsyncMock(return_value=set())):
            await service.get_candidates(buyer_id, "buyer", "pickup", day=day)

        kwargs = list_schedules.await_args.kwargs
        assert set(kwargs["admin_ids"]) == {first_admin, second_admin}
        assert kwargs["kind"] == "pickup"
        assert kwargs["status"] == "active"
        assert kwargs["date_from"] == kwargs["date_to"] == day

    @pytest.mark.asyncio
    async def test_unsupported_pair_fails_before_querying(self, mock_db, buyer_id):
        with pytest.raises(ValidationError):
            await EligibilityService(mock_db).get_candidates(buyer_id, "buyer", "delivery")

        mock_db.execute.assert_not_awaited()


class TestBookingEligibility:
    """Test re-applying the gate to a single booking request."""

    @pytest.mark.asyncio
    async def test_order_of_another_buyer(self, mock_db, make_order, make_schedule):
        """Test booking with someone else's order is forbidden."""
        service = EligibilityService(mock_db)

        with pytest.raises(AuthorizationError):
            await service.check_booking_eligibility(uuid4(), make_order(), make_schedule())

    @pytest.mark.asyncio
    async def test_schedule_of_another_admin(self, mock_db, buyer_id, make_order, make_schedule):
        """Test the schedule must belong to the order's assigned admin."""
        service = EligibilityService(mock_db)

        with pytest.raises(IneligibleScheduleError):
            await service.check_booking_eligibility(
                buyer_id, make_order(), make_schedule(admin_id=uuid4())
            )

    @pytest.mark.asyncio
    async def test_unassigned_order(self, mock_db, seller_id, make_order, make_schedule):
        service = EligibilityService(mock_db)

        with pytest.raises(IneligibleScheduleError):
            await service.check_booking_eligibility(
                seller_id, make_order(assigned_admin_id=None), make_schedule(kind="delivery")
            )

    @pytest.mark.asyncio
    async def test_pickup_before_delivery_completed(
        self, mock_db, buyer_id, make_order, make_schedule
    ):
        """Test a buyer cannot book a pickup before the delivery is completed."""
        order = make_order()
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[order])), \
             patch.object(service, "get_admins_with_completed_delivery", AsyncMock(return_value=set())):
            with pytest.raises(IneligibleScheduleError):
                await service.check_booking_eligibility(buyer_id, order, make_schedule())

    @pytest.mark.asyncio
    async def test_pickup_after_delivery_completed(
        self, mock_db, admin_id, buyer_id, make_order, make_schedule
    ):
        order = make_order()
        service = EligibilityService(mock_db)

        with patch.object(service, "get_assigned_orders", AsyncMock(return_value=[order])), \
             patch.object(
                 service, "get_admins_with_completed_delivery", AsyncMock(return_value={admin_id})
             ):
            await service.check_booking_eligibility(buyer_id, order, make_schedule())

    @pytest.mark.asyncio
    async def test_seller_delivery_allowed(self, mock_db, seller_id, make_order, make_schedule):
        """Test a seller with an assigned order may book the admin's delivery slot."""
        service = EligibilityService(mock_db)

        await service.check_booking_eligibility(
            seller_id, make_order(), make_schedule(kind="delivery")
        )

        mock_db.execute.assert_not_awaited()
