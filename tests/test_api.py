"""Tests for HTTP endpoints."""

from fastapi.testclient import TestClient

from intake_tracker.api.app import create_app
from intake_tracker.containers import AppContainer
from tests.fakes import BREAKFAST_KEY, FakeInferenceClient

HEADERS = {"X-Api-Key": "api-secret"}


def _client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def test_health(container: AppContainer) -> None:
    response = _client(container).get("/health")

    assert response.json() == {"status": "ok"}


def test_intake_requires_api_key(container: AppContainer) -> None:
    response = _client(container).post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}
    )

    assert response.status_code == 401


def test_intake_returns_fragment(container: AppContainer) -> None:
    response = _client(container).post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert list(body) == [BREAKFAST_KEY]
    assert body[BREAKFAST_KEY]["summary"]["calories"] == "78"
    assert "mealType" not in body[BREAKFAST_KEY]["foods"][0]


def test_intake_rejects_empty_prompt(container: AppContainer) -> None:
    response = _client(container).post(
        "/intake", json={"userName": "alice", "prompt": ""}, headers=HEADERS
    )

    assert response.status_code == 422


def test_intake_parse_failure_is_bad_gateway(
    container: AppContainer, inference_client: FakeInferenceClient
) -> None:
    inference_client.responses = ['{"2024-05-15": {"foods": "none"}}']

    response = _client(container).post(
        "/intake", json={"userName": "alice", "prompt": "?"}, headers=HEADERS
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to parse AI response"
    assert response.json()["stage"] == "schema-validation"


def test_ledger_summary_and_delete_flow(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )

    ledger = client.get("/intake/alice", headers=HEADERS)
    summary = client.get("/intake/alice/summary?month=2024-05", headers=HEADERS)
    users = client.get("/intake/users", headers=HEADERS)
    deleted = client.delete(f"/intake/alice/{BREAKFAST_KEY}", headers=HEADERS)
    missing = client.get("/intake/alice", headers=HEADERS)

    assert list(ledger.json()) == [BREAKFAST_KEY]
    assert summary.json()["overallSummary"]["total"]["calories"] == "78.00"
    assert summary.json()["dailyIntakes"][0]["date"] == BREAKFAST_KEY
    assert users.json() == {"users": ["alice"]}
    assert deleted.json()["success"] is True
    assert missing.status_code == 404


def test_summary_rejects_bad_month(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )

    response = client.get("/intake/alice/summary?month=2024-13", headers=HEADERS)

    assert response.status_code == 422


def test_delete_unknown_date_is_not_found(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )

    response = client.delete("/intake/alice/2020-01-01", headers=HEADERS)

    assert response.status_code == 404


def test_reset_user(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )

    response = client.delete("/intake/alice", headers=HEADERS)

    assert response.json()["success"] is True
    assert client.get("/intake/alice", headers=HEADERS).status_code == 404


def test_daily_view_for_unknown_user_is_not_found(container: AppContainer) -> None:
    response = _client(container).get("/intake/nobody/daily", headers=HEADERS)

    assert response.status_code == 404


def test_leaderboard_submit_and_list(container: AppContainer) -> None:
    client = _client(container)

    submitted = client.post(
        "/leaderboard", json={"username": "alice", "score": 2100}, headers=HEADERS
    )
    listed = client.get("/leaderboard", headers=HEADERS)
    invalid = client.post(
        "/leaderboard", json={"username": "bob", "score": -5}, headers=HEADERS
    )

    assert submitted.status_code == 200
    assert "lastUpdated" in submitted.json()
    assert listed.json()["users"][0]["username"] == "alice"
    assert invalid.status_code == 422


def test_relay_socket_greets_and_echoes(container: AppContainer) -> None:
    client = _client(container)

    with client.websocket_connect("/relay/ws") as websocket:
        greeting = websocket.receive_json()
        websocket.send_text('{"type": "ping"}')
        echoed = websocket.receive_json()
        websocket.send_text("not json")
        error = websocket.receive_json()

    assert greeting["type"] == "connection"
    assert echoed["type"] == "ping"
    assert echoed["clientId"] == greeting["clientId"]
    assert error["message"] == "Invalid message format"


def test_relay_direct_to_unknown_client(container: AppContainer) -> None:
    response = _client(container).post(
        "/relay/messages",
        json={"type": "direct", "clientId": "missing"},
        headers=HEADERS,
    )

    assert response.status_code == 404


def test_relay_rejects_unknown_type(container: AppContainer) -> None:
    response = _client(container).post(
        "/relay/messages", json={"type": "shout"}, headers=HEADERS
    )

    assert response.status_code == 400


def test_admin_keys_and_reset(container: AppContainer) -> None:
    client = _client(container)
    client.post(
        "/intake", json={"userName": "alice", "prompt": "two eggs"}, headers=HEADERS
    )
    admin = {"X-Admin-Token": "admin-token"}

    unauthorized = client.get("/admin/keys", headers=HEADERS)
    keys = client.get("/admin/keys", headers=admin)
    reset = client.post("/admin/reset", headers=admin)

    assert unauthorized.status_code == 401
    assert keys.json() == {"keys": ["alice"]}
    assert reset.json()["removed"] == 1


def test_reserved_user_names_are_unprocessable(container: AppContainer) -> None:
    client = _client(container)

    posted = client.post(
        "/intake",
        json={"userName": "leaderboard:alice", "prompt": "two eggs"},
        headers=HEADERS,
    )
    fetched = client.get("/intake/ws:client", headers=HEADERS)

    assert posted.status_code == 422
    assert "reserved prefix" in posted.json()["detail"]
    assert fetched.status_code == 422
