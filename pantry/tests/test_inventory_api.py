from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pantry.db import Base, get_db
from pantry.main import app
from pantry.models import Category, InventoryBatch, User


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(engine)

    with TestingSessionLocal() as db:
        db.add(User(id=1, name="Test Household", email="household@pantry.local", password_hash="x"))
        db.add(Category(id=1, name="Dairy"))
        db.commit()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()
    Base.metadata.drop_all(engine)


def add_item(test_client, name="Milk", quantity="5", expiry_date=None, unit="l"):
    payload = {"item_name": name, "category_id": 1, "initial_quantity": quantity, "unit": unit}
    if expiry_date:
        payload["expiry_date"] = expiry_date.isoformat()
    response = test_client.post("/api/inventory", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_add_and_list_inventory(client):
    test_client, _ = client

    body = add_item(test_client, expiry_date=date(2026, 10, 25))

    assert body["message"] == "Item added to inventory"
    listing = test_client.get("/api/inventory").json()
    assert len(listing) == 1
    assert listing[0]["id"] == body["inventory_id"]
    assert listing[0]["item_name"] == "Milk"
    assert listing[0]["category_name"] == "Dairy"
    assert float(listing[0]["remaining_quantity"]) == 5.0

    items = test_client.get("/api/items").json()
    assert [item["name"] for item in items] == ["Milk"]
    assert test_client.get("/api/categories").json() == [{"id": 1, "name": "Dairy"}]


def test_add_inventory_rejects_expiry_before_purchase(client):
    test_client, _ = client

    response = test_client.post(
        "/api/inventory",
        json={
            "item_name": "Milk",
            "category_id": 1,
            "initial_quantity": "1",
            "unit": "l",
            "purchase_date": "2026-10-19",
            "expiry_date": "2026-10-18",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_add_inventory_with_unknown_category_is_not_found(client):
    test_client, _ = client

    response = test_client.post(
        "/api/inventory",
        json={"item_name": "Milk", "category_id": 42, "initial_quantity": "1", "unit": "l"},
    )

    assert response.status_code == 404


def test_remove_consumes_fifo_and_reports_allocations(client):
    test_client, _ = client
    first = add_item(test_client, quantity="5", expiry_date=date(2026, 10, 20))
    second = add_item(test_client, quantity="5", expiry_date=date(2026, 10, 22))

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk", "quantity": "7"})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == 'Successfully removed "Milk" from inventory'
    assert [(a["batch_id"], a["depleted"]) for a in body["allocations"]] == [
        (first["inventory_id"], True),
        (second["inventory_id"], False),
    ]
    listing = test_client.get("/api/inventory").json()
    assert [(row["id"], float(row["remaining_quantity"])) for row in listing] == [(second["inventory_id"], 3.0)]

    ledger = test_client.get(f"/api/inventory/{second['inventory_id']}/transactions").json()
    assert [entry["transaction_type"] for entry in ledger] == ["add", "consume"]


def test_remove_without_quantity_clears_item(client):
    test_client, _ = client
    add_item(test_client, quantity="1")
    add_item(test_client, quantity="2")

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk"})

    assert response.status_code == 200
    assert float(response.json()["consumed"]) == 3.0
    assert test_client.get("/api/inventory").json() == []


def test_remove_unknown_item_is_not_found(client):
    test_client, _ = client

    response = test_client.post("/api/inventory/remove", json={"item_name": "Butter", "quantity": "1"})

    assert response.status_code == 404
    assert response.json() == {"detail": 'Item "Butter" not found', "error": "not_found"}


def test_remove_non_positive_quantity_is_rejected(client):
    test_client, _ = client
    add_item(test_client)

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk", "quantity": "0"})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_remove_rounds_extra_decimal_places_to_thousandths(client):
    test_client, _ = client
    add_item(test_client, quantity="5")

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk", "quantity": "1.2345"})

    assert response.status_code == 200
    assert float(response.json()["consumed"]) == 1.235
    assert float(test_client.get("/api/inventory").json()[0]["remaining_quantity"]) == 3.765


def test_malformed_quantities_map_to_validation_errors(client):
    test_client, _ = client
    body = add_item(test_client)

    add_response = test_client.post(
        "/api/inventory",
        json={"item_name": "Milk", "category_id": 1, "initial_quantity": "0", "unit": "l"},
    )
    alert_response = test_client.post("/api/restock_alerts", json={"item_id": body["item_id"], "min_quantity": "-1"})

    assert add_response.status_code == 400
    assert add_response.json()["error"] == "validation_error"
    assert alert_response.status_code == 400
    assert alert_response.json()["error"] == "validation_error"


def test_insufficient_stock_reports_shortfall_and_keeps_stock(client):
    test_client, session_local = client
    add_item(test_client, quantity="4")
    add_item(test_client, quantity="2")

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk", "quantity": "10"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "insufficient_stock"
    assert float(body["shortfall"]) == 4.0
    assert body["unit"] == "l"
    with session_local() as db:
        assert sorted(float(b.remaining_quantity) for b in db.query(InventoryBatch).all()) == [2.0, 4.0]


def test_legacy_policy_keeps_partial_consumption(client, monkeypatch):
    test_client, _ = client
    monkeypatch.setenv("PANTRY_CONSUMPTION_POLICY", "legacy")
    add_item(test_client, quantity="4")
    add_item(test_client, quantity="2")

    response = test_client.post("/api/inventory/remove", json={"item_name": "Milk", "quantity": "10"})

    assert response.status_code == 400
    assert float(response.json()["shortfall"]) == 4.0
    assert test_client.get("/api/inventory").json() == []


def test_restock_alert_upsert_and_listing(client):
    test_client, _ = client
    body = add_item(test_client, quantity="1")

    for threshold in ("3", "2"):
        response = test_client.post("/api/restock_alerts", json={"item_id": body["item_id"], "min_quantity": threshold})
        assert response.status_code == 200
    assert float(response.json()["min_quantity"]) == 2.0

    alerts = test_client.get("/api/restock_alerts").json()
    assert len(alerts) == 1
    assert alerts[0]["item_name"] == "Milk"
    assert alerts[0]["alert_enabled"] is True
    assert float(alerts[0]["total_remaining_quantity"]) == 1.0


def test_restock_alert_for_unknown_item_is_not_found(client):
    test_client, _ = client

    response = test_client.post("/api/restock_alerts", json={"item_id": 99, "min_quantity": "1"})

    assert response.status_code == 404


def test_expiry_alerts_endpoint_uses_three_day_window(client):
    test_client, _ = client
    soon = add_item(test_client, name="Cream", expiry_date=date.today() + timedelta(days=3))
    add_item(test_client, name="Cheese", expiry_date=date.today() + timedelta(days=4))

    alerts = test_client.get("/api/expiry_alerts").json()

    assert [alert["inventory_id"] for alert in alerts] == [soon["inventory_id"]]
    assert alerts[0]["days_until_expiry"] == 3


def test_recipes_available_endpoint_returns_empty_without_recipes(client):
    test_client, _ = client

    response = test_client.get("/api/recipes/available")

    assert response.status_code == 200
    assert response.json() == []


def test_transactions_of_other_users_batches_are_hidden(client):
    test_client, session_local = client
    body = add_item(test_client)
    with session_local() as db:
        batch = db.query(InventoryBatch).filter(InventoryBatch.id == body["inventory_id"]).one()
        batch.item.user_id = 2
        db.commit()

    response = test_client.get(f"/api/inventory/{body['inventory_id']}/transactions")

    assert response.status_code == 404


@pytest.mark.real_auth
def test_inventory_routes_require_authentication(client):
    test_client, _ = client

    assert test_client.get("/api/inventory").status_code == 401
    assert test_client.post("/api/inventory/remove", json={"item_name": "Milk"}).status_code == 401
    assert test_client.get("/api/health").json() == {"status": "ok"}
