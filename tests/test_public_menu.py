async def test_public_menu_shows_active_and_available(client, owner, menu):
    rid = owner["restaurant"]["id"]
    headers = owner["headers"]
    await client.patch(
        f"/api/categories/{menu['categories']['Starters']['id']}",
        json={"is_active": False},
        headers=headers,
    )
    await client.patch(
        f"/api/menu-items/{menu['items']['Thali']['id']}", json={"is_available": False}, headers=headers
    )

    response = await client.get(f"/api/public/menu/{rid}")

    assert response.status_code == 200
    data = response.json()
    assert data["restaurant_name"] == "Asha Rao's Restaurant"
    assert [c["name"] for c in data["categories"]] == ["Mains"]
    assert [i["name"] for i in data["items"]] == ["Chef Special", "Samosa"]
    assert data["table_number"] is None
    assert data["table_id"] is None


async def test_public_menu_resolves_table(client, owner, menu):
    rid = owner["restaurant"]["id"]
    table = (await client.post(
        "/api/tables", json={"table_number": "12"}, headers=owner["headers"]
    )).json()

    data = (await client.get(f"/api/public/menu/{rid}", params={"table": "12"})).json()
    assert data["table_number"] == "12"
    assert data["table_id"] == table["id"]

    data = (await client.get(f"/api/public/menu/{rid}", params={"table": "99"})).json()
    assert data["table_number"] == "99"
    assert data["table_id"] is None


async def test_public_menu_unknown_restaurant(client):
    response = await client.get("/api/public/menu/does-not-exist")
    assert response.status_code == 404


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "operational"
    assert data["database"] == "healthy"
    assert data["change_feed"] == "healthy"
