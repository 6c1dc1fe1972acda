"""
Rush Hour Simulation Script

Fires concurrent table orders at a running server to check that every
submission either lands completely or fails cleanly.
Run from project root: python scripts/simulate.py

Follow up with: python scripts/verify.py

Version: 1.0.0
"""

import asyncio
import sys
import random
import time
import argparse
from datetime import datetime
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:3000"
TOTAL_ORDERS = 50

# Sample data for random orders
MENU_ITEMS = [
    {"menu_item_id": 1, "unit_price": 8.50},
    {"menu_item_id": 2, "unit_price": 12.50},
    {"menu_item_id": 3, "unit_price": 14.00},
    {"menu_item_id": 4, "unit_price": 6.25},
    {"menu_item_id": 5, "unit_price": 3.00},
]
PROTEINS = ["Original", "Chicken", "Pork", "Beef", "Tofu", "Shrimp"]
NOTES = [None, "No peanuts", "Extra lime", "Sauce on the side"]


def generate_random_items() -> list[dict[str, Any]]:
    """Generate random order items for one table."""
    items = []
    diners = random.randint(1, 3)
    for diner in range(diners):
        for _ in range(random.randint(1, 3)):
            item = random.choice(MENU_ITEMS).copy()
            item["quantity"] = random.randint(1, 3)
            item["customer_id"] = f"C{diner + 1}"
            item["spicy_level"] = random.randint(0, 4)
            item["protein_choice"] = random.choice(PROTEINS)
            item["special_notes"] = random.choice(NOTES)
            items.append(item)
    return items


def generate_order_payload() -> dict[str, Any]:
    """Generate payload for /api/orders endpoint."""
    return {
        "items": generate_random_items(),
        "table_id": random.randint(1, 20),
        "queue_number": f"A{random.randint(1, 99):02d}",
        "special_instructions": random.choice([None, "Birthday", "Window seat", "In a hurry"]),
    }


async def send_order(client: httpx.AsyncClient, order_num: int) -> dict[str, Any]:
    """Send one order and time the round trip."""
    payload = generate_order_payload()
    expected_total = round(sum(i["unit_price"] * i["quantity"] for i in payload["items"]), 2)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data.get("order_id"),
                "order_number": data.get("order_number"),
                "total": expected_total,
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    """
    Run the rush hour simulation.

    Args:
        num_orders: Number of orders to submit concurrently
    """
    print("=" * 70)
    print("🔥 RUSH HOUR SIMULATION - CONCURRENT ORDERS")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        tasks = [send_order(client, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    numbers = {r["order_number"] for r in successful}

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"🔢 Distinct order numbers: {len(numbers)}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Expected Revenue: ${sum(r['total'] for r in successful):.2f}")

    if failed:
        print(f"\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 Next: python scripts/verify.py")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def preflight() -> bool:
    """Check the server is up before the rush."""
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/api/health", timeout=5.0)
        except httpx.HTTPError as e:
            print(f"❌ Server unreachable: {e}")
            return False
    if response.status_code != 200:
        print(f"❌ Health check failed: {response.text}")
        return False
    print(f"✅ Server healthy: {response.json()}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rush Hour Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()
    API_BASE_URL = args.url.rstrip("/")

    if not asyncio.run(preflight()):
        sys.exit(1)

    summary = asyncio.run(run_simulation(args.orders))
    sys.exit(0 if summary["failed"] == 0 else 1)
