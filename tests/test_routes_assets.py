"""Tests des routes de révisions média et du journal d'activité."""

from __future__ import annotations

import pytest

from backend.core.http_constants import HTTP_BAD_REQUEST, HTTP_CREATED, HTTP_NOT_FOUND, HTTP_OK
from backend.infra.repo.brand_assets_repo import BrandAssetsRepo
from backend.infra.repo.db import session_scope


@pytest.fixture
def asset(session_factory, make_profile):
    pid = make_profile()
    with session_scope(session_factory) as session:
        asset_id = BrandAssetsRepo(session).create_media(pid, "image", "Logo")
    return pid, asset_id


def _create(client, headers, asset_id, url, **extra):
    return client.post(
        "/brand/assets/revisions",
        json={"action": "create", "brandMediaId": asset_id, "url": url, **extra},
        headers=headers,
    )


def test_create_and_list_revisions(client, asset, auth_headers) -> None:
    _, asset_id = asset
    headers = auth_headers()

    r = _create(client, headers, asset_id, "https://cdn/v1.png", mimeType="image/png", width=256)
    assert r.status_code == HTTP_CREATED
    revision = r.json()["revision"]
    assert revision["revisionNumber"] == 1
    assert revision["isCurrent"] is True
    assert revision["content"]["mimeType"] == "image/png"

    _create(client, headers, asset_id, "https://cdn/v2.png", changeNote="Sharper")

    r = client.get(f"/brand/assets/revisions?brandMediaId={asset_id}", headers=headers)
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["count"] == 2
    assert [rev["isCurrent"] for rev in body["revisions"]] == [False, True]

    r = client.get(f"/brand/assets/revisions?brandMediaId={asset_id}&current=true", headers=headers)
    assert r.json()["revision"]["content"]["url"] == "https://cdn/v2.png"
    assert r.json()["revision"]["changeNote"] == "Sharper"


def test_revert_revision(client, asset, auth_headers) -> None:
    pid, asset_id = asset
    headers = auth_headers()
    first = _create(client, headers, asset_id, "https://cdn/v1.png").json()["revision"]
    _create(client, headers, asset_id, "https://cdn/v2.png")

    r = client.post(
        "/brand/assets/revisions",
        json={"action": "revert", "revisionId": first["id"]},
        headers=headers,
    )

    assert r.status_code == HTTP_OK
    reverted = r.json()["revision"]
    assert reverted["revisionNumber"] == 3
    assert reverted["content"]["url"] == "https://cdn/v1.png"

    r = client.get(f"/brand/assets/activity/{pid}", headers=headers)
    actions = [a["action"] for a in r.json()["activity"]]
    assert actions == ["revision_reverted", "revision_created", "revision_created"]

    r = client.get(f"/brand/assets/activity/{pid}?limit=1&offset=2", headers=headers)
    assert [a["description"] for a in r.json()["activity"]] == ["Created revision #1"]


def test_missing_identifiers(client, asset, auth_headers) -> None:
    headers = auth_headers()
    r = client.post("/brand/assets/revisions", json={"action": "create"}, headers=headers)
    assert r.status_code == HTTP_BAD_REQUEST
    r = client.post("/brand/assets/revisions", json={"action": "revert"}, headers=headers)
    assert r.status_code == HTTP_BAD_REQUEST


def test_unknown_asset_and_revision(client, auth_headers) -> None:
    headers = auth_headers()
    assert _create(client, headers, "missing", "https://cdn/x.png").status_code == HTTP_NOT_FOUND
    r = client.post(
        "/brand/assets/revisions", json={"action": "revert", "revisionId": 999}, headers=headers
    )
    assert r.status_code == HTTP_NOT_FOUND


def test_asset_of_other_user(client, asset, auth_headers) -> None:
    pid, asset_id = asset
    headers = auth_headers("intruder")
    assert _create(client, headers, asset_id, "https://cdn/x.png").status_code == HTTP_NOT_FOUND
    r = client.get(f"/brand/assets/revisions?brandMediaId={asset_id}", headers=headers)
    assert r.status_code == HTTP_NOT_FOUND
    r = client.get(f"/brand/assets/activity/{pid}", headers=headers)
    assert r.status_code == HTTP_NOT_FOUND
