from conftest import auth, place_order, signup


async def test_assign_and_list_staff(client, owner):
    await signup(client, "cook@example.com", full_name="Cook", role="kitchen")
    await signup(client, "server@example.com", full_name="Server", role="waiter")

    response = await client.post(
        "/api/staff/assign",
        json={"email": "Cook@Example.com", "role": "kitchen"},
        headers=owner["headers"],
    )
    assert response.status_code == 200
    member = response.json()
    assert member["role"] == "kitchen"
    assert member["restaurant_id"] == owner["restaurant"]["id"]
    assert member["panel_link"] == "http://testserver/kitchen"

    await client.post(
        "/api/staff/assign",
        json={"email": "server@example.com", "role": "waiter"},
        headers=owner["headers"],
    )

    staff = (await client.get("/api/staff", headers=owner["headers"])).json()
    assert [(m["full_name"], m["role"], m["panel_link"]) for m in staff] == [
        ("Cook", "kitchen", "http://testserver/kitchen"),
        ("Server", "waiter", "http://testserver/waiter"),
    ]


async def test_assign_unknown_email(client, owner):
    response = await client.post(
        "/api/staff/assign",
        json={"email": "ghost@example.com", "role": "waiter"},
        headers=owner["headers"],
    )
    assert response.status_code == 404


async def test_unassigned_staff_has_no_restaurant(client):
    cook = await signup(client, "cook@example.com", role="kitchen")
    headers = auth(cook["access_token"])

    assert (await client.get("/api/restaurants/me", headers=headers)).status_code == 404
    assert (await client.get("/api/orders", headers=headers)).status_code == 404


async def test_assigned_staff_work_on_owner_orders(client, owner, menu):
    cook = await signup(client, "cook@example.com", role="kitchen")
    headers = auth(cook["access_token"])
    await client.post(
        "/api/staff/assign",
        json={"email": "cook@example.com", "role": "kitchen"},
        headers=owner["headers"],
    )
    order = await place_order(client, owner["restaurant"]["id"], [(menu["items"]["Samosa"], 1)])

    restaurant = (await client.get("/api/restaurants/me", headers=headers)).json()
    assert restaurant["id"] == owner["restaurant"]["id"]

    orders = (await client.get("/api/orders", headers=headers)).json()["orders"]
    assert [o["id"] for o in orders] == [order["id"]]

    response = await client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "preparing"}, headers=headers
    )
    assert response.status_code == 200

    # Staff cannot manage the restaurant
    assert (await client.get("/api/staff", headers=headers)).status_code == 403
    assert (await client.delete(f"/api/orders/{order['id']}", headers=headers)).status_code == 403


async def test_staff_routes_are_owner_only(client, owner):
    waiter = await signup(client, "waiter@example.com", role="waiter")
    response = await client.post(
        "/api/staff/assign",
        json={"email": "waiter@example.com", "role": "kitchen"},
        headers=auth(waiter["access_token"]),
    )
    assert response.status_code == 403


async def test_cannot_take_staff_from_another_restaurant(client, owner):
    await signup(client, "cook@example.com", full_name="Cook", role="kitchen")
    await client.post(
        "/api/staff/assign",
        json={"email": "cook@example.com", "role": "kitchen"},
        headers=owner["headers"],
    )
    rival = auth((await signup(client, "rival@example.com"))["access_token"])
    await client.get("/api/restaurants/me", headers=rival)

    response = await client.post(
        "/api/staff/assign", json={"email": "cook@example.com", "role": "waiter"}, headers=rival
    )
    assert response.status_code == 409

    staff = (await client.get("/api/staff", headers=owner["headers"])).json()
    assert [(m["full_name"], m["role"]) for m in staff] == [("Cook", "kitchen")]

    # Re-assigning within the same restaurant still works
    response = await client.post(
        "/api/staff/assign",
        json={"email": "cook@example.com", "role": "waiter"},
        headers=owner["headers"],
    )
    assert response.status_code == 200
    assert response.json()["role"] == "waiter"


async def test_cannot_assign_an_owner(client, owner):
    rival = auth((await signup(client, "rival@example.com"))["access_token"])
    rival_restaurant = (await client.get("/api/restaurants/me", headers=rival)).json()

    response = await client.post(
        "/api/staff/assign",
        json={"email": "rival@example.com", "role": "kitchen"},
        headers=owner["headers"],
    )
    assert response.status_code == 409

    assert (await client.get("/api/restaurants/me", headers=rival)).json()["id"] == rival_restaurant["id"]
