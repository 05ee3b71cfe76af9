"""Seed data script for development and testing.

Creates:
- 2 logistics admins, SELLER_COUNT sellers and BUYER_COUNT buyers
- one product and one order per buyer, assigned round-robin to the admins
- for each admin, a delivery schedule and a pickup schedule on SEED_DATE

Environment Variables:
    SEED_DATE: Date of the seeded schedules, YYYY-MM-DD (default: tomorrow)
    SLOTS_PER_SCHEDULE: max_slots of every seeded schedule (default: 10)
    BUYER_COUNT: Number of buyers/orders (default: 20)
    SELLER_COUNT: Number of sellers (default: 5)

Usage:
    python -m scripts.seed_data

Prints a development bearer token for one user of each role. Tokens are
signed with JWT_SECRET_KEY, so only use this against a local instance.
"""

import asyncio
import os
from datetime import date, time, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campusmart.core.database import async_session_maker, engine
from campusmart.core.security import create_access_token
from campusmart.models import AdminSchedule, Order, Product, User
from campusmart.services.schedule_service import ScheduleService

# Configuration from environment variables
SEED_DATE = date.fromisoformat(
    os.getenv("SEED_DATE", (date.today() + timedelta(days=1)).isoformat())
)
SLOTS_PER_SCHEDULE = int(os.getenv("SLOTS_PER_SCHEDULE", "10"))
BUYER_COUNT = int(os.getenv("BUYER_COUNT", "20"))
SELLER_COUNT = int(os.getenv("SELLER_COUNT", "5"))


async def seed_users(session: AsyncSession) -> dict[str, list[User]]:
    """Create admins, sellers and buyers, grouped by role."""
    print("Seeding users...")

    result = await session.execute(select(User).limit(1))
    if result.scalar_one_or_none():
        print("  Users already exist, skipping...")
        result = await session.execute(select(User))
        existing = list(result.scalars().all())
        return {role: [u for u in existing if u.role == role] for role in ("admin", "seller", "buyer")}

    users = {
        "admin": [
            User(email=f"admin{i}@test.com", username=f"admin{i}", role="admin")
            for i in range(1, 3)
        ],
        "seller": [
            User(email=f"seller{i:03d}@test.com", username=f"seller{i:03d}", role="seller")
            for i in range(1, SELLER_COUNT + 1)
        ],
        "buyer": [
            User(email=f"buyer{i:03d}@test.com", username=f"buyer{i:03d}", role="buyer")
            for i in range(1, BUYER_COUNT + 1)
        ],
    }

    for group in users.values():
        session.add_all(group)
    await session.commit()

    for group in users.values():
        for user in group:
            await session.refresh(user)

    print(
        f"  Created {len(users['admin'])} admins, {len(users['seller'])} sellers, "
        f"{len(users['buyer'])} buyers"
    )
    return users


async def seed_orders(session: AsyncSession, users: dict[str, list[User]]) -> list[Order]:
    """Create one product and one admin-assigned order per buyer."""
    print("Seeding products and orders...")

    result = await session.execute(select(Order).limit(1))
    if result.scalar_one_or_none():
        print("  Orders already exist, skipping...")
        result = await session.execute(select(Order))
        return list(result.scalars().all())

    admins, sellers, buyers = users["admin"], users["seller"], users["buyer"]
    orders = []
    for i, buyer in enumerate(buyers):
        seller = sellers[i % len(sellers)]
        admin = admins[i % len(admins)]

        product = Product(seller_id=seller.user_id, title=f"Used textbook #{i + 1}")
        session.add(product)
        await session.flush()

        orders.append(
            Order(
                buyer_id=buyer.user_id,
                seller_id=seller.user_id,
                product_id=product.product_id,
                assigned_admin_id=admin.user_id,
                assigned_by=admin.user_id,
            )
        )

    session.add_all(orders)
    await session.commit()

    print(f"  Created {len(orders)} products and orders")
    return orders


async def seed_schedules(session: AsyncSession, admins: list[User]) -> list[AdminSchedule]:
    """Publish a morning delivery window and an afternoon pickup window per admin."""
    print("Seeding schedules...")

    service = ScheduleService(session)
    schedules = []
    for admin in admins:
        existing = await service.list_schedules(admin_id=admin.user_id, date_from=SEED_DATE, date_to=SEED_DATE)
        if existing:
            print(f"  {admin.username} already has schedules on {SEED_DATE}, skipping...")
            schedules.extend(existing)
            continue

        schedules.append(
            await service.create_schedule(
                admin_id=admin.user_id,
                kind="delivery",
                day=SEED_DATE,
                start_time=time(9, 0),
                end_time=time(12, 0),
                max_slots=SLOTS_PER_SCHEDULE,
                location="Student Union, Room 101",
            )
        )
        schedules.append(
            await service.create_schedule(
                admin_id=admin.user_id,
                kind="pickup",
                day=SEED_DATE,
                start_time=time(14, 0),
                end_time=time(17, 0),
                max_slots=SLOTS_PER_SCHEDULE,
                location="Student Union, Room 101",
            )
        )

    print(f"  {len(schedules)} schedules on {SEED_DATE}")
    return schedules


async def main():
    """Main seed function."""
    print("=" * 60)
    print("CampusMart Logistics - Seed Data Script")
    print("=" * 60)
    print(f"  SEED_DATE: {SEED_DATE}")
    print(f"  SLOTS_PER_SCHEDULE: {SLOTS_PER_SCHEDULE}")
    print(f"  BUYER_COUNT: {BUYER_COUNT}")
    print(f"  SELLER_COUNT: {SELLER_COUNT}")
    print("=" * 60)

    async with async_session_maker() as session:
        users = await seed_users(session)
        orders = await seed_orders(session, users)
        schedules = await seed_schedules(session, users["admin"])

    print("=" * 60)
    print("Seed data complete!")
    print(f"  Orders: {len(orders)}")
    print(f"  Schedules: {len(schedules)}")
    print("=" * 60)
    print("Development tokens:")
    for role in ("admin", "seller", "buyer"):
        if users[role]:
            user = users[role][0]
            token = create_access_token({"sub": str(user.user_id), "role": role})
            print(f"  {role:<7} {user.email}: {token}")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
