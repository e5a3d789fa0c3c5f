from conftest import auth, signup
from servelink.services.qr import DATA_URL_PREFIX


async def test_create_table_generates_qr(client, owner):
    response = await client.post("/api/tables", json={"table_number": " 5 "}, headers=owner["headers"])

    assert response.status_code == 201
    table = response.json()
    assert table["table_number"] == "5"
    assert table["capacity"] == 4
    assert table["qr_code"].startswith(DATA_URL_PREFIX)


async def test_tables_by_number(client, owner):
    for number, capacity in (("3", 2), ("1", 6), ("2", None)):
        await client.post(
            "/api/tables",
            json={"table_number": number, "capacity": capacity},
            headers=owner["headers"],
        )

    response = await client.get("/api/tables", headers=owner["headers"])

    assert response.status_code == 200
    assert [(t["table_number"], t["capacity"]) for t in response.json()] == [
        ("1", 6), ("2", 4), ("3", 2)
    ]


async def test_blank_table_number_rejected(client, owner):
    response = await client.post("/api/tables", json={"table_number": "  "}, headers=owner["headers"])
    assert response.status_code == 422


async def test_qr_png_download(client, owner):
    table = (await client.post(
        "/api/tables", json={"table_number": "9"}, headers=owner["headers"]
    )).json()

    response = await client.get(f"/api/tables/{table['id']}/qr.png", headers=owner["headers"])

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert "table-9-qr.png" in response.headers["content-disposition"]
    assert response.content.startswith(b"\x89PNG")


async def test_delete_table(client, owner):
    table = (await client.post(
        "/api/tables", json={"table_number": "4"}, headers=owner["headers"]
    )).json()

    response = await client.delete(f"/api/tables/{table['id']}", headers=owner["headers"])
    assert response.status_code == 200
    assert (await client.get("/api/tables", headers=owner["headers"])).json() == []

    response = await client.delete(f"/api/tables/{table['id']}", headers=owner["headers"])
    assert response.status_code == 404


async def test_tables_are_per_restaurant(client, owner):
    await client.post("/api/tables", json={"table_number": "1"}, headers=owner["headers"])
    other = await signup(client, "rival@example.com")

    response = await client.get("/api/tables", headers=auth(other["access_token"]))

    assert response.json() == []
