import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel


def parse_ts(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_create_then_list_includes_record(client, add_transaction):
    created = add_transaction(amount=42.5, date="2024-06-03", description="Bus pass", category="Transport")

    assert uuid.UUID(created["_id"])
    assert created["amount"] == 42.5
    assert created["date"].startswith("2024-06-03")
    assert created["description"] == "Bus pass"
    assert created["category"] == "Transport"
    assert parse_ts(created["created_at"]).utcoffset().total_seconds() == 0
    assert parse_ts(created["updated_at"]).utcoffset().total_seconds() == 0

    resp = client.get("/transactions")
    assert resp.status_code == 200
    listed = resp.json()
    assert listed == [created]


def test_list_orders_by_date_descending(client, add_transaction):
    add_transaction(date="2024-05-10", description="older")
    add_transaction(date="2024-07-01", description="newest")
    add_transaction(date="2024-06-15", description="middle")

    descriptions = [tx["description"] for tx in client.get("/transactions").json()]
    assert descriptions == ["newest", "middle", "older"]


def test_create_accepts_full_timestamp(client):
    resp = client.post(
        "/transactions",
        json={
            "amount": 10,
            "date": "2024-06-30T22:15:00Z",
            "description": "Cinema",
            "category": "Entertainment",
        },
    )
    assert resp.status_code == 200
    assert parse_ts(resp.json()["date"]) == datetime(2024, 6, 30, 22, 15, tzinfo=timezone.utc)


def test_create_stores_offset_timestamps_as_utc(client):
    resp = client.post(
        "/transactions",
        json={
            "amount": 10,
            "date": "2024-07-01T01:30:00+02:00",
            "description": "Late taxi",
            "category": "Transport",
        },
    )
    assert resp.status_code == 200
    assert parse_ts(resp.json()["date"]) == datetime(2024, 6, 30, 23, 30, tzinfo=timezone.utc)


def test_create_accepts_long_description(client, add_transaction):
    created = add_transaction(description="x" * 1000)
    assert len(created["description"]) == 1000


def test_create_rejects_unknown_category(client):
    resp = client.post(
        "/transactions",
        json={"amount": 10, "date": "2024-06-01", "description": "Rent", "category": "Housing"},
    )
    assert resp.status_code == 400
    assert "category" in resp.json()["error"]


def test_create_rejects_non_positive_amount(client):
    resp = client.post(
        "/transactions",
        json={"amount": 0, "date": "2024-06-01", "description": "Nothing", "category": "Other"},
    )
    assert resp.status_code == 400
    assert "amount" in resp.json()["error"]


def test_create_rejects_blank_description(client):
    resp = client.post(
        "/transactions",
        json={"amount": 5, "date": "2024-06-01", "description": "   ", "category": "Other"},
    )
    assert resp.status_code == 400


def test_update_replaces_supplied_fields(client, add_transaction):
    created = add_transaction(amount=20, description="Lunch")

    resp = client.put(
        "/transactions",
        json={"_id": created["_id"], "amount": 25, "category": "Shopping"},
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["_id"] == created["_id"]
    assert updated["amount"] == 25
    assert updated["category"] == "Shopping"
    assert updated["description"] == "Lunch"
    assert updated["date"] == created["date"]
    assert parse_ts(updated["updated_at"]) >= parse_ts(created["updated_at"])


def test_update_unknown_id_returns_null(client):
    resp = client.put("/transactions", json={"_id": str(uuid.uuid4()), "amount": 5})
    assert resp.status_code == 200
    assert resp.json() is None


def test_delete_is_idempotent(client, add_transaction):
    created = add_transaction()

    for _ in range(2):
        resp = client.request("DELETE", "/transactions", json={"_id": created["_id"]})
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

    assert client.get("/transactions").json() == []


def test_delete_accepts_plain_id_key(client, add_transaction):
    created = add_transaction()
    resp = client.request("DELETE", "/transactions", json={"id": created["_id"]})
    assert resp.json() == {"success": True}
    assert client.get("/transactions").json() == []


def test_database_failure_is_opaque_500(app, client):
    SQLModel.metadata.drop_all(app.state.database.connect())

    resp = client.get("/transactions")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch transactions"}
