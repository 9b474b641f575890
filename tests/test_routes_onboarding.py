"""Tests des routes d'onboarding (démarrage, chat SSE, lecture)."""

from __future__ import annotations

import json

from backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_UNAUTHORIZED,
)
from tests.fakes import chunks

MARKER = "<<STEP_COMPLETE>>"


def _frames(body: str) -> list[str]:
    return [f[len("data: ") :] for f in body.split("\n\n") if f.startswith("data: ")]


def _drain(client, container) -> None:
    client.portal.call(container.background.drain, 5.0)


def test_start_returns_profile_and_welcome(client, llm, auth_headers) -> None:
    llm.script = chunks("Welcome! Do you already have a brand?")

    r = client.post("/onboarding/start", headers=auth_headers())

    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["profile"]["onboardingStep"] == "welcome"
    assert body["profile"]["progress"] == 0
    assert body["profile"]["brandNameConfirmed"] is False
    assert body["message"]["role"] == "assistant"
    assert body["message"]["content"] == "Welcome! Do you already have a brand?"
    assert "error" not in body


def test_start_without_provider_reports_error(client, llm, auth_headers) -> None:
    llm._enabled = False

    r = client.post("/onboarding/start", headers=auth_headers())

    assert r.status_code == HTTP_OK
    assert r.json()["message"] is None
    assert r.json()["error"] == "No AI provider configured"


def test_chat_streams_sse_frames(client, container, llm, make_profile, auth_headers) -> None:
    pid = make_profile(step="brand_assessment")
    llm.script = chunks("Lovely. ", "Let's continue.", MARKER)
    llm.completion = '{"industry": "Bakery"}'

    r = client.post(
        "/onboarding/chat",
        json={"profileId": pid, "message": "We bake bread", "step": "brand_assessment"},
        headers=auth_headers(),
    )

    assert r.status_code == HTTP_OK
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.headers["cache-control"] == "no-cache"
    frames = _frames(r.text)
    assert frames[-1] == "[DONE]"
    payloads = [json.loads(f) for f in frames[:-1]]
    assert [p["content"] for p in payloads if "content" in p] == [
        "Lovely. ",
        "Let's continue.",
        MARKER,
    ]
    assert {"stepAdvance": "brand_identity"} in payloads
    assert {"brandDataExtracted": {"industry": "Bakery"}} in payloads
    assert any("usage" in p for p in payloads)

    _drain(client, container)
    r = client.get(f"/onboarding/profile/{pid}", headers=auth_headers())
    assert r.json()["profile"]["onboardingStep"] == "brand_identity"
    assert r.json()["profile"]["fields"]["industry"] == "Bakery"
    assert r.json()["progressPercent"] == 22


def test_chat_stream_failure_is_an_event(client, llm, make_profile, auth_headers) -> None:
    pid = make_profile(step="brand_assessment")
    llm.script = chunks("Partial", usage=None)
    llm.fail_after = 1

    r = client.post(
        "/onboarding/chat",
        json={"profileId": pid, "message": "Hi", "step": "brand_assessment"},
        headers=auth_headers(),
    )

    assert r.status_code == HTTP_OK
    frames = _frames(r.text)
    assert json.loads(frames[-2]) == {"error": "Stream failed"}
    assert frames[-1] == "[DONE]"


def test_chat_validation_error_before_stream(client, make_profile, auth_headers) -> None:
    pid = make_profile()

    r = client.post(
        "/onboarding/chat",
        json={"profileId": pid, "message": "", "step": "welcome"},
        headers=auth_headers(),
    )

    assert r.status_code == HTTP_BAD_REQUEST
    assert r.json()["code"] == "VALIDATION_ERROR"
    assert r.json()["details"] == {"missing": ["message"]}


def test_chat_unknown_profile(client, auth_headers) -> None:
    r = client.post(
        "/onboarding/chat",
        json={"profileId": "missing", "message": "Hi", "step": "welcome"},
        headers=auth_headers(),
    )
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["code"] == "NOT_FOUND"


def test_chat_without_provider(client, llm, make_profile, auth_headers) -> None:
    pid = make_profile()
    llm._enabled = False

    r = client.post(
        "/onboarding/chat",
        json={"profileId": pid, "message": "Hi", "step": "welcome"},
        headers=auth_headers(),
    )
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE


def test_messages_listing(client, container, llm, make_profile, auth_headers) -> None:
    pid = make_profile(step="brand_assessment")
    llm.script = chunks("Noted.")
    client.post(
        "/onboarding/chat",
        json={
            "profileId": pid,
            "message": "See attached",
            "step": "brand_assessment",
            "attachments": [{"type": "document", "name": "brief.pdf", "url": "https://cdn/b.pdf"}],
        },
        headers=auth_headers(),
    )
    _drain(client, container)

    r = client.get(f"/onboarding/messages/{pid}", headers=auth_headers())
    messages = r.json()["messages"]
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert messages[0]["attachments"][0]["name"] == "brief.pdf"

    r = client.get(f"/onboarding/messages/{pid}?step=welcome", headers=auth_headers())
    assert r.json()["messages"] == []


def test_profile_of_other_user_is_hidden(client, make_profile, auth_headers) -> None:
    pid = make_profile(user_id="owner")
    r = client.get(f"/onboarding/profile/{pid}", headers=auth_headers("intruder"))
    assert r.status_code == HTTP_NOT_FOUND


def test_missing_token(client) -> None:
    r = client.post("/onboarding/start")
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "missing_token"


def test_invalid_token(client) -> None:
    r = client.post("/onboarding/start", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == HTTP_UNAUTHORIZED
    assert r.json()["message"] == "invalid_token"
