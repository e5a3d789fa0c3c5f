"""
Checkout Simulation Script

Seeds a demo restaurant (owner, menu, tables) and fires many customer
checkouts at once, the way a full dining room would.
Run from project root with the server up: python scripts/simulate.py
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from servelink.client import Cart, ServeLinkClient

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
OWNER_EMAIL = "demo-owner@servelink.local"
OWNER_PASSWORD = "demo-password"

MENU = {
    "Starters": [
        {"name": "Paneer Tikka", "price": 249.0, "is_veg": True},
        {"name": "Chicken 65", "price": 279.0, "is_veg": False},
        {"name": "Veg Spring Roll", "price": 189.0, "is_veg": True},
    ],
    "Mains": [
        {"name": "Butter Chicken", "price": 349.0, "is_veg": False},
        {"name": "Dal Makhani", "price": 259.0, "is_veg": True},
        {"name": "Veg Biryani", "price": 299.0, "is_veg": True},
    ],
    "Drinks": [
        {"name": "Masala Chai", "price": 49.0, "is_veg": True},
        {"name": "Sweet Lassi", "price": 89.0, "is_veg": True},
    ],
}
TABLE_NUMBERS = [str(n) for n in range(1, 9)]
NOTES = [None, "Less spicy", "No onions", "Extra napkins", "Birthday table"]


# =============================================================================
# SEEDING
# =============================================================================

async def seed(client: ServeLinkClient) -> dict[str, Any]:
    """Sign in (or up) the demo owner and make sure the menu and tables exist."""
    result = await client.login(OWNER_EMAIL, OWNER_PASSWORD)
    if result.error:
        result = await client.signup(OWNER_EMAIL, OWNER_PASSWORD, full_name="Demo Owner")
        if result.error:
            raise SystemExit(f"❌ Could not sign in demo owner: {result.error}")

    restaurant = (await client.my_restaurant()).data
    rid = restaurant["id"]

    items = (await client.list_menu_items(rid)).data
    if not items:
        for order, (category, dishes) in enumerate(MENU.items()):
            created = await client.create_category(name=category, display_order=order)
            for dish in dishes:
                await client.create_menu_item(category_id=created.data["id"], **dish)
        items = (await client.list_menu_items(rid)).data

    tables = (await client.list_tables()).data
    if not tables:
        for number in TABLE_NUMBERS:
            await client.create_table(number)
        tables = (await client.list_tables()).data

    print(f"🏪 {restaurant['name']}: {len(items)} menu items, {len(tables)} tables")
    return {"restaurant_id": rid, "items": items, "tables": tables}


# =============================================================================
# CUSTOMER CHECKOUT
# =============================================================================

async def customer_checkout(
    client: ServeLinkClient,
    order_num: int,
    restaurant_id: str,
    items: list[dict],
    tables: list[dict],
) -> dict[str, Any]:
    """Fill a cart with random dishes and check it out."""
    cart = Cart()
    for _ in range(random.randint(1, 5)):
        cart.add(random.choice(items))
    table = random.choice(tables)

    start_time = time.time()
    result = await cart.checkout(
        client, restaurant_id, table_id=table["id"], notes=random.choice(NOTES)
    )
    elapsed = round(time.time() - start_time, 3)

    if result.ok:
        return {
            "order_num": order_num,
            "success": True,
            "order_number": result.order["order_number"],
            "total": result.order["total_amount"],
            "time": elapsed,
        }
    return {
        "order_num": order_num,
        "success": False,
        "error": (result.error or "")[:100],
        "orphan": result.orphan_order_id,
        "time": elapsed,
    }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 CHECKOUT SIMULATION - HIGH CONCURRENCY TEST")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with ServeLinkClient(API_BASE_URL) as owner:
        health = await owner.health()
        if health.error:
            raise SystemExit(f"❌ Server not reachable: {health.error}")
        demo = await seed(owner)

    start_time = time.time()
    # Customers are anonymous: one client without a token
    async with ServeLinkClient(API_BASE_URL) as customer:
        tasks = [
            customer_checkout(customer, i + 1, demo["restaurant_id"], demo["items"], demo["tables"])
            for i in range(num_orders)
        ]
        results = await asyncio.gather(*tasks)
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    orphans = [r["orphan"] for r in failed if r.get("orphan")]
    numbers = [r["order_number"] for r in successful]
    duplicate_numbers = len(numbers) - len(set(numbers))

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total") or 0 for r in successful)
        print("\n📈 Performance Metrics:")
        print(f"   Average Checkout: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: ₹{total_revenue:.2f}")
        print(f"   🔢 Duplicate order numbers: {duplicate_numbers}")

    if failed:
        print("\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")
        if orphans:
            print(f"   🧾 Orders saved without items: {len(orphans)}")

    print("\n" + "=" * 70)
    print("🔍 VERIFICATION STEPS")
    print("=" * 70)
    print("1. Run: python scripts/verify.py")
    print("2. Open the kitchen panel: every new order should be pending")
    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(num_orders=args.orders))
