from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from account_service import main
from account_service.domain.contracts import RegisterAccountInput


def test_healthz_and_metrics_routes():
    client = TestClient(main.app)
    assert client.get("/healthz").json() == {"status": "ok"}

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "account_events_total" in response.text


def test_users_router_is_mounted():
    paths = {route.path for route in main.app.routes}
    assert {
        "/v1/users/register",
        "/v1/users/login",
        "/v1/users/send-reset-password",
        "/v1/users/reset-password",
        "/v1/users/current",
    } <= paths


def test_registration_increments_event_counter(service):
    def registered() -> float:
        return REGISTRY.get_sample_value("account_events_total", {"event": "registered"}) or 0.0

    before = registered()
    service.register(
        RegisterAccountInput(
            first_name="Alan", last_name="Turing", email="alan@turing.org", password="Enigma1939"
        )
    )
    assert registered() == before + 1
