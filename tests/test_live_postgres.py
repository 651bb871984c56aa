"""
End-to-end tests against a real PostgreSQL server.

Set TEST_DATABASE_HOST (and optionally TEST_DATABASE_PORT,
TEST_DATABASE_USER, TEST_DATABASE_PASSWORD) to run them.
"""

from __future__ import annotations

import os
import uuid

import pytest
from fastapi.testclient import TestClient

from main import create_app

pytestmark = pytest.mark.skipif(
    not os.environ.get("TEST_DATABASE_HOST"), reason="TEST_DATABASE_HOST is not set"
)


@pytest.fixture()
def db_config() -> dict:
    return {
        "host": os.environ.get("TEST_DATABASE_HOST", "localhost"),
        "port": int(os.environ.get("TEST_DATABASE_PORT", "5432")),
        "user": os.environ.get("TEST_DATABASE_USER", "postgres"),
        "password": os.environ.get("TEST_DATABASE_PASSWORD", ""),
        "dbname": f"board_test_{uuid.uuid4().hex[:12]}",
    }


@pytest.fixture()
def live_client(db_config: dict, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    # Entering the client keeps one event loop alive for the pool.
    with TestClient(create_app()) as client:
        assert client.post("/api/database/create", json=db_config).status_code == 200
        assert client.post("/api/database/connect", json=db_config).status_code == 200
        yield client


def test_create_database_is_idempotent(db_config: dict) -> None:
    with TestClient(create_app()) as client:
        first = client.post("/api/database/create", json=db_config)
        second = client.post("/api/database/create", json=db_config)
    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["success"] is True


def test_status_after_connect_has_pool_metrics(live_client: TestClient) -> None:
    data = live_client.get("/api/database/status").json()["data"]
    assert data["connected"] is True
    assert data["open_connections"] >= 1
    assert data["in_use"] + data["idle"] == data["open_connections"]


def test_reconnect_keeps_data(live_client: TestClient, db_config: dict) -> None:
    created = live_client.post("/api/users", json={"name": "Keep", "email": "keep@example.com"}).json()
    assert live_client.post("/api/database/connect", json=db_config).status_code == 200

    response = live_client.get(f"/api/users/{created['data']['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["email"] == "keep@example.com"


def test_user_crud_round_trip(live_client: TestClient) -> None:
    created = live_client.post("/api/users", json={"name": "Ann", "email": "ann@example.com", "age": 33})
    assert created.status_code == 200
    user = created.json()["data"]

    fetched = live_client.get(f"/api/users/{user['id']}").json()["data"]
    assert (fetched["name"], fetched["email"], fetched["age"]) == ("Ann", "ann@example.com", 33)

    updated = live_client.put(f"/api/users/{user['id']}", json={"age": 0}).json()["data"]
    assert updated["age"] == 0
    assert updated["name"] == "Ann"
    assert updated["email"] == "ann@example.com"

    duplicate = live_client.post("/api/users", json={"name": "Other", "email": "ann@example.com"})
    assert duplicate.status_code == 500
    assert duplicate.json()["message"].startswith("create user failed")

    assert live_client.delete(f"/api/users/{user['id']}").status_code == 200
    assert live_client.delete(f"/api/users/{user['id']}").status_code == 200
    assert live_client.get(f"/api/users/{user['id']}").status_code == 404


def test_message_board_round_trip(live_client: TestClient) -> None:
    response = live_client.post(
        "/api/addContent",
        json={"user_id": "guest", "content": "hi"},
        headers={"X-Forwarded-For": "192.168.1.7"},
    )
    assert response.status_code == 200
    message = response.json()["data"]
    assert message["user_ip"] == "192.168.1.7"

    listed = live_client.get("/api/getAllContent").json()["data"]
    assert [m["msg_id"] for m in listed] == [message["msg_id"]]

    assert live_client.delete(f"/api/removeContent/{message['msg_id']}").status_code == 200
    assert live_client.get("/api/getAllContent").json()["data"] == []
