"""Tests for the schedule registry."""

from datetime import date, time
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from campusmart.services.exceptions import (
    AuthorizationError,
    InternalError,
    ScheduleConflictError,
    ScheduleNotFoundError,
    ValidationError,
)
from campusmart.services.schedule_service import ScheduleService


def create_kwargs(admin_id, **overrides):
    kwargs = {
        "admin_id": admin_id,
        "kind": "pickup",
        "day": date(2024, 5, 1),
        "start_time": time(14, 0),
        "end_time": time(16, 0),
        "max_slots": 2,
        "location": "Library lobby",
    }
    kwargs.update(overrides)
    return kwargs


class TestScheduleValidation:
    """Test schedule input validation."""

    @pytest.mark.parametrize("max_slots", [0, -1, 101])
    def test_max_slots_out_of_range(self, mock_db, max_slots):
        """Test capacity must be between 1 and 100."""
        service = ScheduleService(mock_db)

        with pytest.raises(ValidationError):
            service._validate("pickup", time(9), time(10), max_slots)

    @pytest.mark.parametrize("max_slots", [1, 100])
    def test_max_slots_bounds_accepted(self, mock_db, max_slots):
        """Test the capacity bounds themselves are valid."""
        ScheduleService(mock_db)._validate("delivery", time(9), time(10), max_slots)

    def test_unknown_kind(self, mock_db):
        """Test kinds other than pickup and delivery are rejected."""
        with pytest.raises(ValidationError):
            ScheduleService(mock_db)._validate("shipping", time(9), time(10), 5)

    @pytest.mark.parametrize("end", [time(9), time(8, 30)])
    def test_empty_window(self, mock_db, end):
        """Test end_time must be after start_time."""
        with pytest.raises(ValidationError):
            ScheduleService(mock_db)._validate("pickup", time(9), end, 5)


class TestCreateSchedule:
    """Test schedule creation."""

    @pytest.mark.asyncio
    async def test_create_schedule_starts_active(self, mock_db, admin_id):
        """Test a new schedule is stored active with the given capacity."""
        service = ScheduleService(mock_db)

        with patch.object(service, "find_overlapping", AsyncMock(return_value=None)):
            schedule = await service.create_schedule(**create_kwargs(admin_id))

        assert schedule.status == "active"
        assert schedule.max_slots == 2
        assert schedule.admin_id == admin_id
        mock_db.add.assert_called_once_with(schedule)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_schedule_overlap_conflict(self, mock_db, admin_id, make_schedule):
        """Test an overlapping window of the same admin and kind is rejected."""
        service = ScheduleService(mock_db)

        with patch.object(service, "find_overlapping", AsyncMock(return_value=make_schedule())):
            with pytest.raises(ScheduleConflictError):
                await service.create_schedule(**create_kwargs(admin_id))

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_schedule_validates_before_querying(self, mock_db, admin_id):
        """Test invalid capacity fails without touching the database."""
        service = ScheduleService(mock_db)

        with pytest.raises(ValidationError):
            await service.create_schedule(**create_kwargs(admin_id, max_slots=0))

        mock_db.execute.assert_not_awaited()


class TestScheduleQueries:
    """Test schedule lookups and listing."""

    @pytest.mark.asyncio
    async def test_list_with_no_admins_is_empty(self, mock_db):
        """Test an empty admin set matches nothing without a query."""
        service = ScheduleService(mock_db)

        schedules = await service.list_schedules(admin_ids=[], kind="pickup")

        assert schedules == []
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_returns_rows(self, mock_db, make_result, make_schedule):
        """Test rows from the query are returned as a list."""
        rows = [make_schedule(), make_schedule()]
        mock_db.execute = AsyncMock(return_value=make_result(values=rows))
        service = ScheduleService(mock_db)

        schedules = await service.list_schedules(
            admin_ids=[uuid4()], kind="pickup", status="active",
            date_from=date(2024, 5, 1), date_to=date(2024, 5, 1),
        )

        assert schedules == rows

    @pytest.mark.asyncio
    async def test_get_schedule_not_found(self, mock_db, make_result):
        """Test a missing schedule raises ScheduleNotFoundError."""
        mock_db.execute = AsyncMock(return_value=make_result(value=None))

        with pytest.raises(ScheduleNotFoundError):
            await ScheduleService(mock_db).get_schedule(uuid4())


class TestScheduleStatus:
    """Test activating and deactivating schedules."""

    @pytest.mark.asyncio
    async def test_only_owner_can_toggle(self, mock_db, make_schedule):
        """Test another admin cannot deactivate the schedule."""
        service = ScheduleService(mock_db)

        with patch.object(service, "get_schedule", AsyncMock(return_value=make_schedule())):
            with pytest.raises(AuthorizationError):
                await service.set_status(uuid4(), uuid4(), "inactive")

        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_status(self, mock_db, admin_id):
        """Test statuses other than active/inactive are rejected."""
        with pytest.raises(ValidationError):
            await ScheduleService(mock_db).set_status(admin_id, uuid4(), "archived")

    @pytest.mark.asyncio
    async def test_owner_deactivates(self, mock_db, admin_id, make_schedule):
        """Test the owning admin can deactivate their schedule."""
        schedule = make_schedule()
        service = ScheduleService(mock_db)

        with patch.object(service, "get_schedule", AsyncMock(return_value=schedule)):
            result = await service.set_status(admin_id, schedule.schedule_id, "inactive")

        assert result is schedule
        mock_db.execute.assert_awaited_once()
        mock_db.commit.assert_awaited_once()


class TestScheduleStorageFailures:
    """Test failed writes are rolled back and surfaced as InternalError."""

    @pytest.mark.asyncio
    async def test_create_commit_failure(self, mock_db, admin_id):
        mock_db.commit = AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("down")))
        service = ScheduleService(mock_db)

        with patch.object(service, "find_overlapping", AsyncMock(return_value=None)):
            with pytest.raises(InternalError):
                await service.create_schedule(**create_kwargs(admin_id))

        mock_db.rollback.assert_awaited_once()
        mock_db.refresh.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_status_update_failure(self, mock_db, admin_id, make_schedule):
        schedule = make_schedule()
        mock_db.execute = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("down")))
        service = ScheduleService(mock_db)

        with patch.object(service, "get_schedule", AsyncMock(return_value=schedule)):
            with pytest.raises(InternalError):
                await service.set_status(admin_id, schedule.schedule_id, "inactive")

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()
