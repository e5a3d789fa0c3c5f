"""
Shared fixtures.

The application reads its settings at import time, so the test database
and environment are configured here before anything from servelink is
imported.
"""

import asyncio
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="servelink-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["ENV_MODE"] = "development"
os.environ["APP_BASE_URL"] = "http://testserver"
os.environ["SECRET_KEY"] = "test-secret-key"

import httpx
import pytest

from servelink.client import ServeLinkClient
from servelink.database import Base, engine
from servelink.main import app
from servelink.services.realtime import reset_change_feed

BASE_URL = "http://testserver"


async def reset_database() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    reset_change_feed()


@pytest.fixture
async def fresh_db():
    await reset_database()
    yield


@pytest.fixture
def sync_fresh_db():
    """Same as fresh_db, for synchronous tests (e.g. TestClient websockets)."""
    asyncio.run(reset_database())
    yield


@pytest.fixture
async def client(fresh_db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as ac:
        yield ac


@pytest.fixture
async def api(fresh_db):
    """ServeLinkClient talking to the app in-process."""
    async with ServeLinkClient(BASE_URL, transport=httpx.ASGITransport(app=app)) as c:
        yield c


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def signup(
    client: httpx.AsyncClient,
    email: str,
    password: str = "secret123",
    full_name: str = "Test User",
    role: str = "owner",
) -> dict:
    response = await client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "full_name": full_name, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def owner(client):
    """Signed-up owner with a restaurant: {"token", "headers", "restaurant"}."""
    data = await signup(client, "owner@example.com", full_name="Asha Rao")
    headers = auth(data["access_token"])
    restaurant = (await client.get("/api/restaurants/me", headers=headers)).json()
    return {"token": data["access_token"], "headers": headers, "restaurant": restaurant}


@pytest.fixture
async def menu(client, owner):
    """Two categories and three items: {"categories": {...}, "items": {...}} by name."""
    headers = owner["headers"]
    starters = (await client.post(
        "/api/categories", json={"name": "Starters", "display_order": 1}, headers=headers
    )).json()
    mains = (await client.post(
        "/api/categories", json={"name": "Mains", "display_order": 0}, headers=headers
    )).json()

    items = {}
    for payload in (
        {"name": "Samosa", "price": 100.0, "category_id": starters["id"]},
        {"name": "Thali", "price": 50.0, "category_id": mains["id"], "preparation_time": 20},
        {"name": "Chef Special", "price": 300.0},
    ):
        response = await client.post("/api/menu-items", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        items[payload["name"]] = response.json()

    return {"categories": {"Starters": starters, "Mains": mains}, "items": items}


async def place_order(
    client: httpx.AsyncClient,
    restaurant_id: str,
    lines: list[tuple[dict, int]],
    table_id: str | None = None,
) -> dict:
    """Customer checkout through the raw API: order header, then its items."""
    total = round(sum(item["price"] * qty for item, qty in lines), 2)
    response = await client.post(
        "/api/orders",
        json={"restaurant_id": restaurant_id, "table_id": table_id, "total_amount": total},
    )
    assert response.status_code == 201, response.text
    order = response.json()
    response = await client.post(
        f"/api/orders/{order['id']}/items",
        json=[
            {"menu_item_id": item["id"], "quantity": qty, "unit_price": item["price"]}
            for item, qty in lines
        ],
    )
    assert response.status_code == 201, response.text
    return order
