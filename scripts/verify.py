"""
Order Audit Script

Checks the orders of a restaurant after a simulation:
    - order total vs. sum of its order items (nothing enforces this)
    - orders saved without items (failed second checkout step)
    - active / past status partition covers every order exactly once

Run from project root with the server up: python scripts/verify.py
"""

import argparse
import asyncio
import os
import sys
from datetime import datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from servelink.client import ServeLinkClient
from servelink.services.order_workflow import partition_active_past

API_BASE_URL = "http://localhost:8001"
OWNER_EMAIL = "demo-owner@servelink.local"
OWNER_PASSWORD = "demo-password"


def build_frames(orders: list[dict]) -> tuple[pd.DataFrame, pd.DataFrame]:
    """One row per order, one row per order line."""
    order_rows = [
        {
            "order_id": o["id"],
            "order_number": o["order_number"],
            "status": o["status"],
            "table_number": o["table_number"],
            "total_amount": o["total_amount"] or 0.0,
            "created_at": o["created_at"],
        }
        for o in orders
    ]
    item_rows = [
        {
            "order_id": o["id"],
            "menu_item": item["menu_item_name"],
            "quantity": item["quantity"],
            "unit_price": item["unit_price"],
        }
        for o in orders
        for item in o["items"]
    ]
    orders_df = pd.DataFrame(
        order_rows,
        columns=["order_id", "order_number", "status", "table_number", "total_amount", "created_at"],
    )
    items_df = pd.DataFrame(item_rows, columns=["order_id", "menu_item", "quantity", "unit_price"])
    return orders_df, items_df


def audit(orders_df: pd.DataFrame, items_df: pd.DataFrame) -> pd.DataFrame:
    """Orders joined with the sum of their lines, plus a mismatch flag."""
    items_df = items_df.assign(line_total=items_df["quantity"] * items_df["unit_price"])
    sums = items_df.groupby("order_id")["line_total"].sum().rename("items_total")
    report = orders_df.join(sums, on="order_id")
    report["items_total"] = report["items_total"].fillna(0.0).round(2)
    report["mismatch"] = (report["total_amount"].round(2) != report["items_total"])
    return report


async def fetch_orders(base_url: str, limit: int) -> list[dict]:
    async with ServeLinkClient(base_url) as client:
        result = await client.login(OWNER_EMAIL, OWNER_PASSWORD)
        if result.error:
            raise SystemExit(f"❌ Could not sign in: {result.error}")
        result = await client.list_orders(limit=limit)
        if result.error:
            raise SystemExit(f"❌ Could not load orders: {result.error}")
        return result.data["orders"]


def verify_orders(base_url: str = API_BASE_URL, limit: int = 1000, export: str | None = None) -> bool:
    print("=" * 60)
    print("🔍 ORDER AUDIT REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"🎯 Server: {base_url}")
    print("=" * 60)

    orders = asyncio.run(fetch_orders(base_url, limit))
    if not orders:
        print("\n❌ No orders found!")
        print("   Run the simulation first: python scripts/simulate.py")
        return False

    orders_df, items_df = build_frames(orders)
    report = audit(orders_df, items_df)

    print("\n📊 STATISTICS:")
    print(f"   Total Orders: {len(report)}")
    print(f"   Order Lines: {len(items_df)}")
    print(f"   By status: {report['status'].value_counts().to_dict()}")

    empty = report[report["order_id"].isin(set(orders_df["order_id"]) - set(items_df["order_id"]))]
    if len(empty):
        print(f"\n⚠️ {len(empty)} order(s) without items")
    else:
        print("\n✅ Every order has items")

    mismatched = report[report["mismatch"]]
    if len(mismatched):
        print(f"⚠️ {len(mismatched)} order(s) whose total differs from their items")
    else:
        print("✅ Order totals match their items")

    active, past = partition_active_past(orders)
    if len(active) + len(past) == len(orders):
        print(f"✅ Status partition: {len(active)} active + {len(past)} past")
    else:
        print(f"⚠️ Status partition broken: {len(active)} + {len(past)} != {len(orders)}")

    print("\n💰 REVENUE:")
    print(f"   Total: ₹{report['total_amount'].sum():.2f}")
    print(f"   Average: ₹{report['total_amount'].mean():.2f}")

    print("\n📋 RECENT ORDERS:")
    print("-" * 60)
    cols = ["order_number", "status", "table_number", "total_amount", "items_total"]
    print(report[cols].head(5).to_string(index=False))

    if export:
        with pd.ExcelWriter(export, engine="openpyxl") as writer:
            report.to_excel(writer, sheet_name="Orders", index=False)
            items_df.to_excel(writer, sheet_name="Items", index=False)
        print(f"\n📄 Report written to {export}")

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE")
    print("=" * 60)
    return mismatched.empty and empty.empty


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Order Audit Script")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--limit", type=int, default=1000, help="Orders to audit")
    parser.add_argument("--export", help="Write the audit to this .xlsx file")
    args = parser.parse_args()

    ok = verify_orders(args.url, args.limit, args.export)
    sys.exit(0 if ok else 1)
