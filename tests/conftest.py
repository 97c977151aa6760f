import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import importlib

import pytest
from fastapi.testclient import TestClient

from nexus.infra.seed import load_seed
from nexus.infra.user_repo import InMemoryUserStore

JANE = {
    "firstName": "Jane",
    "lastName": "Doe",
    "email": "jane@x.com",
    "phone": "1234567890",
    "address": "1 Main St",
    "password": "Passw0rd!",
    "confirmPassword": "Passw0rd!",
}


@pytest.fixture()
def seed():
    return load_seed()


@pytest.fixture()
def store():
    return InMemoryUserStore()


@pytest.fixture()
def jane_fields():
    """Registration fields as the services receive them (snake_case)."""
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@x.com",
        "phone": "1234567890",
        "address": "1 Main St",
        "password": "Passw0rd!",
        "confirm_password": "Passw0rd!",
    }


@pytest.fixture()
def app_module(monkeypatch):
    """Freshly imported app, so every test starts with an empty in-memory store."""
    monkeypatch.setenv("NEXUS_ENV", "development")
    monkeypatch.setenv("NEXUS_SECRET_KEY", "test-secret")
    monkeypatch.setenv("NEXUS_ADMIN_PASSWORD", "Admin123!")

    import nexus.app as app_module
    importlib.reload(app_module)
    return app_module


@pytest.fixture()
def client(app_module):
    return TestClient(app_module.app)


@pytest.fixture()
def jane_client(client):
    """Client with Jane registered and logged in."""
    r = client.post("/api/register", json=JANE)
    assert r.status_code == 200, r.text
    r = client.post("/api/login", json={"username": JANE["email"], "password": JANE["password"]})
    assert r.status_code == 200, r.text
    return client


@pytest.fixture()
def admin_client(client):
    r = client.post("/api/login", json={"username": "admin@nexusbank.com", "password": "Admin123!"})
    assert r.status_code == 200, r.text
    return client
