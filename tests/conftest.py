import os

# main.py builds a module-level app, which needs a database URL at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from budget_tracker.config import Settings
from budget_tracker.main import create_app


@pytest.fixture
def app():
    # every app gets its own in-memory database
    return create_app(Settings(database_url="sqlite://"))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def add_transaction(client):
    def _add(amount=100, date="2024-06-01", description="Groceries", category="Food"):
        resp = client.post(
            "/transactions",
            json={"amount": amount, "date": date, "description": description, "category": category},
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _add


@pytest.fixture
def set_budget(client):
    def _set(category="Food", month="2024-06", amount=120):
        resp = client.post("/budgets", json={"category": category, "month": month, "amount": amount})
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _set
