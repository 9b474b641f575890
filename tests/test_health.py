"""Tests pour l'endpoint de santé, les métriques et l'identifiant de requête."""

from backend.core.http_constants import HTTP_NOT_FOUND, HTTP_OK


def test_health(client) -> None:
    """Teste que l'endpoint de santé retourne un statut OK."""
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["status"] == "ok"
    assert body["storage"] == "sqlite"
    assert body["database"] == "ok"
    assert body["llm_enabled"] is True
    assert body["pending_tasks"] == 0


def test_metrics_exposes_onboarding_counters(client) -> None:
    client.get("/health")
    r = client.get("/metrics")
    assert r.status_code == HTTP_OK
    assert "http_requests_total" in r.text
    assert "onboarding_turns_total" in r.text


def test_request_id_is_echoed(client) -> None:
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"
    assert "X-Process-Time-ms" in r.headers


def test_error_envelope_carries_trace_id(client, auth_headers) -> None:
    r = client.get(
        "/onboarding/profile/missing",
        headers={**auth_headers(), "X-Request-ID": "trace-42"},
    )
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["trace_id"] == "trace-42"


def test_unsafe_request_id_is_replaced(client) -> None:
    r = client.get("/health", headers={"X-Request-ID": "not a safe id " + "x" * 200})
    echoed = r.headers["X-Request-ID"]
    assert " " not in echoed
    assert len(echoed) == 32


def test_health_degraded_when_database_unreachable(client, container, monkeypatch) -> None:
    from sqlalchemy import create_engine

    monkeypatch.setattr(container, "engine", create_engine("sqlite:////nonexistent/dir/x.db"))
    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["database"] == "unreachable"
