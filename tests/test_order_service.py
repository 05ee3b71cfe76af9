"""Tests for order listing and lookup."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from campusmart.services.exceptions import OrderNotFoundError, ValidationError
from campusmart.services.order_service import OrderService


def executed_sql(mock_db, call: int = 0) -> str:
    return str(mock_db.execute.await_args_list[call].args[0])


class TestListOrders:
    """Test the admin order listing filters."""

    @pytest.mark.asyncio
    async def test_unassigned_filter(self, mock_db, make_result, make_order):
        orders = [make_order(assigned_admin_id=None)]
        mock_db.execute = AsyncMock(
            side_effect=[make_result(value=1), make_result(values=orders)]
        )

        result, total = await OrderService(mock_db).list_orders(unassigned=True)

        assert result == orders
        assert total == 1
        assert "orders.assigned_admin_id IS NULL" in executed_sql(mock_db, 0)
        assert "orders.assigned_admin_id IS NULL" in executed_sql(mock_db, 1)

    @pytest.mark.asyncio
    async def test_filter_by_assigned_admin(self, mock_db, make_result, make_order, admin_id):
        orders = [make_order(), make_order()]
        mock_db.execute = AsyncMock(
            side_effect=[make_result(value=2), make_result(values=orders)]
        )

        result, total = await OrderService(mock_db).list_orders(assigned_admin_id=admin_id)

        assert result == orders
        assert total == 2
        sql = executed_sql(mock_db, 1)
        assert "orders.assigned_admin_id = " in sql
        assert "IS NULL" not in sql

    @pytest.mark.asyncio
    async def test_status_filter_and_paging(self, mock_db, make_result):
        mock_db.execute = AsyncMock(side_effect=[make_result(value=45), make_result(values=[])])

        result, total = await OrderService(mock_db).list_orders(
            status="completed", skip=40, limit=20
        )

        assert result == []
        assert total == 45
        sql = executed_sql(mock_db, 1)
        assert "orders.status = " in sql
        assert "ORDER BY orders.created_at DESC" in sql

    @pytest.mark.asyncio
    async def test_no_filters_lists_everything(self, mock_db, make_result):
        mock_db.execute = AsyncMock(side_effect=[make_result(value=0), make_result(values=[])])

        await OrderService(mock_db).list_orders()

        assert "WHERE" not in executed_sql(mock_db, 1)

    @pytest.mark.asyncio
    async def test_admin_and_unassigned_together_rejected(self, mock_db, admin_id):
        """Test asking for one admin's orders and unassigned orders at once fails."""
        with pytest.raises(ValidationError):
            await OrderService(mock_db).list_orders(assigned_admin_id=admin_id, unassigned=True)

        mock_db.execute.assert_not_awaited()


class TestParticipantOrders:
    """Test buyer and seller order listing."""

    @pytest.mark.asyncio
    async def test_buyer_orders(self, mock_db, make_result, make_order, buyer_id):
        orders = [make_order()]
        mock_db.execute = AsyncMock(
            side_effect=[make_result(value=1), make_result(values=orders)]
        )

        result, total = await OrderService(mock_db).get_participant_orders(buyer_id, "buyer")

        assert (result, total) == (orders, 1)
        assert "orders.buyer_id = " in executed_sql(mock_db, 1)

    @pytest.mark.asyncio
    async def test_admins_have_no_participant_orders(self, mock_db, admin_id):
        with pytest.raises(ValidationError):
            await OrderService(mock_db).get_participant_orders(admin_id, "admin")


class TestGetOrder:
    """Test order lookup."""

    @pytest.mark.asyncio
    async def test_found(self, mock_db, make_result, make_order):
        order = make_order()
        mock_db.execute = AsyncMock(return_value=make_result(value=order))

        assert await OrderService(mock_db).get_order_by_id(order.order_id) is order

    @pytest.mark.asyncio
    async def test_not_found(self, mock_db, make_result):
        mock_db.execute = AsyncMock(return_value=make_result(value=None))

        with pytest.raises(OrderNotFoundError):
            await OrderService(mock_db).get_order_by_id(uuid4())
