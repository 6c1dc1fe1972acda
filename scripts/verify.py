"""
Order Integrity Verification Script

Checks the database after a simulation:
    - every order has at least one item
    - every order total equals the sum of its item totals
    - order numbers are unique and well formed
Run from project root: python scripts/verify.py

Version: 1.0.0
"""

import asyncio
import re
import sys
from datetime import datetime

from sqlalchemy import func, select

from order_desk.core.config import get_settings
from order_desk.database import Database
from order_desk.models import Order, OrderItem

ORDER_NUMBER_PATTERN = re.compile(r"^ORD-[A-Z0-9]{8}$")


async def verify_orders(database: Database) -> list[str]:
    """Return a list of human-readable problems (empty when all is well)."""
    problems = []

    item_totals = (
        select(
            OrderItem.order_id,
            func.count(OrderItem.id).label("item_count"),
            func.sum(OrderItem.total_price).label("items_total"),
        )
        .group_by(OrderItem.order_id)
        .subquery()
    )
    query = (
        select(
            Order.id,
            Order.order_number,
            Order.total_amount,
            item_totals.c.item_count,
            item_totals.c.items_total,
        )
        .outerjoin(item_totals, item_totals.c.order_id == Order.id)
        .order_by(Order.id)
    )

    async with database.session() as session:
        rows = (await session.execute(query)).all()

    print(f"\n📊 Orders checked: {len(rows)}")

    seen_numbers = set()
    for order_id, order_number, total_amount, item_count, items_total in rows:
        if not item_count:
            problems.append(f"Order #{order_id} has no items")
            continue
        if round(items_total or 0.0, 2) != round(total_amount, 2):
            problems.append(
                f"Order #{order_id} total {total_amount} != items sum {round(items_total, 2)}"
            )
        if not ORDER_NUMBER_PATTERN.match(order_number):
            problems.append(f"Order #{order_id} has malformed number {order_number!r}")
        if order_number in seen_numbers:
            problems.append(f"Order number {order_number} is used more than once")
        seen_numbers.add(order_number)

    return problems


async def main() -> int:
    print("=" * 60)
    print("🔍 ORDER INTEGRITY REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    database = Database.from_settings(get_settings())
    try:
        problems = await verify_orders(database)
    finally:
        await database.dispose()

    if problems:
        print(f"\n❌ {len(problems)} problem(s) found:")
        for problem in problems[:20]:
            print(f"   - {problem}")
        return 1

    print("\n✅ All orders consistent")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
