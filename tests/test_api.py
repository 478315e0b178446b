import pytest
from fastapi.testclient import TestClient

from ordertracker.apps.api import create_app


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


def _create_customer(client, name="Anna", phone="+375291111111"):
    response = client.post("/api/customers", json={"name": name, "phone_number": phone})
    assert response.status_code == 201, response.text
    return response.json()


def _create_meal(client, name="Soup", price=9.99, cooking_time=15):
    response = client.post(
        "/api/meals", json={"name": name, "price": price, "cooking_time": cooking_time}
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_customer_endpoints(client):
    customer = _create_customer(client)

    assert client.get(f"/api/customers/{customer['id']}").json() == customer
    assert client.get("/api/customers/name/Anna").json()["id"] == customer["id"]
    assert client.get("/api/customers/phone/+375291111111").json()["id"] == customer["id"]
    assert [c["id"] for c in client.get("/api/customers").json()] == [customer["id"]]

    updated = client.put(
        f"/api/customers/{customer['id']}",
        json={"name": "Anna K", "phone_number": "+375291111111"},
    )
    assert updated.status_code == 200
    assert client.get(f"/api/customers/{customer['id']}").json()["name"] == "Anna K"

    assert client.delete(f"/api/customers/{customer['id']}").status_code == 204
    missing = client.get(f"/api/customers/{customer['id']}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == f"Customer not found with id: {customer['id']}"


def test_customer_payload_errors(client):
    with_id = client.post(
        "/api/customers", json={"id": 7, "name": "Anna", "phone_number": "+375291111111"}
    )
    bad_phone = client.post("/api/customers", json={"name": "Anna", "phone_number": "call me"})
    customer = _create_customer(client)
    mismatch = client.put(
        f"/api/customers/{customer['id']}",
        json={"id": customer["id"] + 1, "name": "Anna", "phone_number": "+375291111111"},
    )
    duplicate = client.post(
        "/api/customers", json={"name": "Other", "phone_number": "+375291111111"}
    )

    assert with_id.status_code == 400
    assert bad_phone.status_code == 422
    assert mismatch.status_code == 400
    assert duplicate.status_code == 400


def test_meal_endpoints(client):
    meal = _create_meal(client)

    assert meal["price"] == 9.99
    assert client.get(f"/api/meals/{meal['id']}").json() == meal
    assert client.get("/api/meals/name", params={"name": "Soup"}).json()["id"] == meal["id"]
    assert client.get("/api/meals/name", params={"name": "Pie"}).status_code == 404

    updated = client.put(
        f"/api/meals/{meal['id']}", json={"name": "Soup", "price": 11.5, "cooking_time": 20}
    )
    assert updated.json()["price"] == 11.5

    assert client.delete(f"/api/meals/{meal['id']}").status_code == 204
    assert client.get(f"/api/meals/{meal['id']}").status_code == 404


def test_meal_validation(client):
    bad_name = client.post("/api/meals", json={"name": "Soup!", "price": 1, "cooking_time": 5})
    bad_price = client.post("/api/meals", json={"name": "Soup", "price": 0, "cooking_time": 5})
    bad_time = client.post("/api/meals", json={"name": "Soup", "price": 1, "cooking_time": 2000})

    assert bad_name.status_code == 422
    assert bad_price.status_code == 422
    assert bad_time.status_code == 422


def test_bulk_meals(client):
    empty = client.post("/api/meals/bulk", json=[])
    with_ids = client.post(
        "/api/meals/bulk", json=[{"id": 1, "name": "Tea", "price": 1.5, "cooking_time": 3}]
    )
    created = client.post(
        "/api/meals/bulk",
        json=[
            {"name": "Tea", "price": 1.5, "cooking_time": 3},
            {"name": "Pie", "price": 4.25, "cooking_time": 30},
        ],
    )

    assert empty.status_code == 400
    assert with_ids.status_code == 400
    assert created.status_code == 201
    assert [meal["name"] for meal in created.json()] == ["Tea", "Pie"]


def test_order_flow(client):
    customer = _create_customer(client)
    soup = _create_meal(client)

    created = client.post(f"/api/customers/{customer['id']}/orders")
    assert created.status_code == 201
    order = created.json()
    assert order["status"] == "ACCEPTED"
    assert order["meals"] == []

    with_meal = client.put(f"/api/orders/{order['id']}/meals", params={"meal_id": soup["id"]})
    assert [meal["id"] for meal in with_meal.json()["meals"]] == [soup["id"]]

    ready = client.put(f"/api/orders/{order['id']}/status", params={"status": "READY"})
    assert ready.json()["status"] == "READY"

    filtered = client.get(
        "/api/customers/filter/meal", params={"status": "READY", "meal_name": "Soup"}
    )
    assert [c["id"] for c in filtered.json()] == [customer["id"]]
    assert (
        client.get(
            "/api/customers/filter/meal", params={"status": "COOKING", "meal_name": "Soup"}
        ).status_code
        == 404
    )

    listed = client.get(f"/api/customers/{customer['id']}/orders").json()
    assert [o["id"] for o in listed] == [order["id"]]

    removed = client.delete(f"/api/orders/{order['id']}/meals", params={"meal_id": soup["id"]})
    assert removed.json()["meals"] == []

    assert client.delete(f"/api/orders/{order['id']}").status_code == 204
    assert client.get(f"/api/orders/{order['id']}").status_code == 404


def test_order_errors(client):
    assert client.post("/api/orders", params={"customer_id": 999}).status_code == 404
    customer = _create_customer(client)
    order = client.post("/api/orders", params={"customer_id": customer["id"]}).json()

    bad_status = client.put(f"/api/orders/{order['id']}/status", params={"status": "EATEN"})
    unknown_meal = client.put(f"/api/orders/{order['id']}/meals", params={"meal_id": 999})

    assert bad_status.status_code == 422
    assert unknown_meal.status_code == 404


def test_deleting_meal_refreshes_cached_orders(client):
    customer = _create_customer(client)
    soup = _create_meal(client)
    order = client.post(f"/api/customers/{customer['id']}/orders").json()
    client.put(f"/api/orders/{order['id']}/meals", params={"meal_id": soup["id"]})

    client.delete(f"/api/meals/{soup['id']}")

    assert client.get(f"/api/orders/{order['id']}").json()["meals"] == []


def test_statistics(client):
    # The request being served is already counted.
    first = client.get("/api/statistics/top-visited").json()
    assert first == {"url": "/api/statistics/top-visited", "count": 1}

    client.get("/api/meals")
    client.get("/api/meals")
    client.get("/api/meals")

    single = client.get("/api/statistics/single-stat", params={"url": "/api/meals"})
    assert single.json() == {"url": "/api/meals", "count": 3}
    assert client.get("/api/statistics/top-visited").json() == {"url": "/api/meals", "count": 3}
    assert client.get("/api/statistics").json()["/api/meals"] == 3


def test_cache_statistics(client):
    customer = _create_customer(client)
    client.get(f"/api/customers/{customer['id']}")

    stats = {entry["name"]: entry for entry in client.get("/api/statistics/cache").json()}

    assert set(stats) == {"customer", "meal", "order"}
    assert stats["customer"]["entries"] == 1
    assert stats["customer"]["hits"] == 1
    assert stats["customer"]["usage_bytes"] > 0


def test_log_endpoints(client):
    assert client.get("/api/logs/view", params={"date": "14-03-2025"}).status_code == 400
    assert client.get("/api/logs/view", params={"date": "1999-01-01"}).status_code == 404

    created = client.post("/api/logs", params={"date": "2025-03-14"})
    assert created.status_code == 202
    task_id = created.json()["id"]

    status = client.get(f"/api/logs/{task_id}/status")
    assert status.status_code == 200
    assert status.json()["status"] in {"CREATED", "PROCESSING", "READY"}

    assert client.get("/api/logs/unknown/status").status_code == 404
    assert client.get("/api/logs/unknown/file").status_code == 404
