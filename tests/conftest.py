"""Pytest configuration and fixtures for testing."""

import asyncio
from datetime import date, datetime, time
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest


class FakeRedis:
    """In-memory stand-in for the Redis commands the services use.

    Keeps real state so lock contention between concurrent tasks can be
    observed. Expiry is ignored; tests release locks explicitly.
    """

    def __init__(self):
        self.store: dict[str, Any] = {}
        self.lists: dict[str, list[str]] = {}

    async def set(self, key: str, value: str, nx: bool = False, ex: int | None = None):
        await asyncio.sleep(0)
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def get(self, key: str):
        return self.store.get(key)

    def register_script(self, script: str) -> Callable:
        async def compare_and_delete(keys: list[str], args: list[str]) -> int:
            await asyncio.sleep(0)
            if self.store.get(keys[0]) == args[0]:
                del self.store[keys[0]]
                return 1
            return 0

        return compare_and_delete

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        return self.lists.get(key, [])[start : end + 1]

    def pipeline(self) -> "FakePipeline":
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, redis: FakeRedis):
        self.redis = redis
        self.commands: list[Callable[[], None]] = []

    def lpush(self, key: str, value: str) -> None:
        self.commands.append(lambda: self.redis.lists.setdefault(key, []).insert(0, value))

    def ltrim(self, key: str, start: int, end: int) -> None:
        def trim():
            items = self.redis.lists.get(key, [])
            self.redis.lists[key] = items[start : end + 1]

        self.commands.append(trim)

    async def execute(self) -> list:
        for command in self.commands:
            command()
        return [True] * len(self.commands)


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()

    # Mock common Redis operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.lrange = AsyncMock(return_value=[])

    return redis


# Stateful Redis fixture
@pytest.fixture
def fake_redis() -> FakeRedis:
    """Create an in-memory Redis with working locks and lists."""
    return FakeRedis()


# Mock database session fixture
@pytest.fixture
def mock_db() -> AsyncMock:
    """Create a mock AsyncSession."""
    db = AsyncMock()
    db.add = MagicMock()
    db.execute = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    return db


# Query result factory fixture
@pytest.fixture
def make_result() -> Callable[..., MagicMock]:
    """Build a mock of what ``AsyncSession.execute`` returns."""

    def _make(value: Any = None, values: list | None = None, rows: list | None = None) -> MagicMock:
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        result.scalar_one.return_value = value
        result.scalars.return_value.all.return_value = values or []
        result.all.return_value = rows or []
        return result

    return _make


@pytest.fixture
def admin_id() -> UUID:
    return uuid4()


@pytest.fixture
def buyer_id() -> UUID:
    return uuid4()


@pytest.fixture
def seller_id() -> UUID:
    return uuid4()


# Schedule factory fixture
@pytest.fixture
def make_schedule(admin_id: UUID) -> Callable[..., MagicMock]:
    """Create mock schedules owned by ``admin_id`` unless told otherwise."""

    def _make(**overrides: Any) -> MagicMock:
        schedule = MagicMock()
        schedule.schedule_id = uuid4()
        schedule.admin_id = admin_id
        schedule.kind = "pickup"
        schedule.date = date(2024, 5, 1)
        schedule.start_time = time(14, 0)
        schedule.end_time = time(16, 0)
        schedule.location = "Library lobby"
        schedule.max_slots = 2
        schedule.status = "active"
        schedule.notes = ""
        schedule.created_at = datetime(2024, 4, 20, 9, 0)
        for name, value in overrides.items():
            setattr(schedule, name, value)
        return schedule

    return _make


# Order factory fixture
@pytest.fixture
def make_order(admin_id: UUID, buyer_id: UUID, seller_id: UUID) -> Callable[..., MagicMock]:
    """Create mock orders between ``buyer_id`` and ``seller_id``, assigned to ``admin_id``."""

    def _make(**overrides: Any) -> MagicMock:
        order = MagicMock()
        order.order_id = uuid4()
        order.buyer_id = buyer_id
        order.seller_id = seller_id
        order.product_id = uuid4()
        order.assigned_admin_id = admin_id
        order.assigned_at = None
        order.assigned_by = None
        order.status = "in_progress"
        for name, value in overrides.items():
            setattr(order, name, value)
        return order

    return _make
