"""
HTTP surface: routing, authentication and the error envelope.
"""

import pytest
from fastapi.testclient import TestClient

from dormtrack.core.constants import HEADER_REQUEST_ID
from dormtrack.main import create_app

API = "/api/v1"


@pytest.fixture
def client(settings, database, users):
    app = create_app(settings, database)
    with TestClient(app) as test_client:
        yield test_client


def _auth(tokens, key):
    return {"Authorization": f"Bearer {tokens[key]}"}


def _file_report(client, tokens, **overrides):
    body = {
        "kategori": "AIR",
        "judul": "Wastafel mampet",
        "deskripsi": "Air di wastafel tidak turun sama sekali.",
        "prioritas": "TINGGI",
    }
    body.update(overrides)
    response = client.post(f"{API}/reports", json=body, headers=_auth(tokens, "resident"))
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "environment": "test", "secondary_store": False}
    assert response.headers[HEADER_REQUEST_ID]


def test_full_workflow(client, tokens, users):
    report = _file_report(client, tokens)
    assert report["status"] == "BARU"
    assert report["location"] == "A-101"
    report_id = report["id"]

    admin = _auth(tokens, "admin")
    tech = _auth(tokens, "tech")

    assert client.post(f"{API}/reports/{report_id}/receive", headers=admin).json()["status"] == "DIPROSES"

    assigned = client.post(
        f"{API}/reports/{report_id}/assign",
        json={"teknisiId": users["tech"].id},
        headers=admin,
    )
    assert assigned.status_code == 200
    assert assigned.json()["assigned_to_id"] == users["tech"].id

    tasks = client.get(f"{API}/technician/tasks", headers=tech).json()
    assert [t["id"] for t in tasks["items"]] == [report_id]

    assert client.post(f"{API}/reports/{report_id}/start", headers=tech).json()["status"] == "DIKERJAKAN"
    assert client.post(f"{API}/reports/{report_id}/resolve", headers=tech).json()["status"] == "SELESAI"

    events = client.get(f"{API}/reports/{report_id}/events", headers=_auth(tokens, "resident")).json()
    assert [e["type"] for e in events["events"]] == [
        "REPORTED", "RECEIVED", "ASSIGNED", "STARTED", "RESOLVED",
    ]

    history = client.get(f"{API}/technician/history", headers=tech).json()
    assert [h["id"] for h in history["items"]] == [report_id]
    assert history["meta"]["has_more"] is False


def test_cookie_credential(client, tokens, settings):
    client.cookies.set(settings.AUTH_COOKIE_NAME, tokens["resident"])
    response = client.get(f"{API}/reports")
    client.cookies.clear()
    assert response.status_code == 200
    assert response.json()["meta"]["total_items"] == 0


def test_unauthenticated(client):
    response = client.get(f"{API}/reports")
    assert response.status_code == 401
    body = response.json()
    assert body["error"]["code"] == "UNAUTHENTICATED"
    assert "timestamp" in body["error"]
    assert body["request_id"] == response.headers[HEADER_REQUEST_ID]


def test_invalid_transition_is_conflict(client, tokens):
    report = _file_report(client, tokens)
    response = client.post(f"{API}/reports/{report['id']}/resolve", headers=_auth(tokens, "admin"))
    assert response.status_code == 403

    client.post(f"{API}/reports/{report['id']}/receive", headers=_auth(tokens, "admin"))
    again = client.post(f"{API}/reports/{report['id']}/receive", headers=_auth(tokens, "admin"))
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_STATUS"
    assert again.json()["error"]["details"]["current_status"] == "DIPROSES"


def test_unknown_report(client, tokens):
    response = client.get(f"{API}/reports/does-not-exist", headers=_auth(tokens, "admin"))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_request_validation(client, tokens):
    response = client.post(
        f"{API}/reports",
        json={"kategori": "AIR", "judul": "x", "deskripsi": "Deskripsi cukup panjang."},
        headers=_auth(tokens, "resident"),
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert "title" in body["error"]["details"]["field_errors"] or "judul" in body["error"]["details"]["field_errors"]


def test_unknown_read_mode(client, tokens):
    response = client.get(f"{API}/reports?mode=fresh", headers=_auth(tokens, "resident"))
    assert response.status_code == 422


def test_edit_and_delete(client, tokens):
    report = _file_report(client, tokens)
    resident = _auth(tokens, "resident")

    edited = client.patch(f"{API}/reports/{report['id']}", json={"judul": "Wastafel mampet total"}, headers=resident)
    assert edited.status_code == 200
    assert edited.json()["title"] == "Wastafel mampet total"

    refused = client.put(f"{API}/reports/{report['id']}", json={"status": "SELESAI"}, headers=resident)
    assert refused.status_code == 403

    deleted = client.delete(f"{API}/reports/{report['id']}", headers=resident)
    assert deleted.status_code == 200
    assert client.get(f"{API}/reports/{report['id']}", headers=resident).status_code == 404


def test_reject_with_and_without_body(client, tokens):
    admin = _auth(tokens, "admin")
    first = _file_report(client, tokens)
    second = _file_report(client, tokens)

    with_note = client.post(f"{API}/reports/{first['id']}/reject", json={"note": "Duplikat"}, headers=admin)
    assert with_note.json()["status"] == "DITOLAK"

    without = client.post(f"{API}/reports/{second['id']}/reject", headers=admin)
    assert without.status_code == 200
    assert without.json()["status"] == "DITOLAK"


def test_stats_endpoints(client, tokens):
    _file_report(client, tokens)
    admin = _auth(tokens, "admin")

    stats = client.get(f"{API}/stats", headers=admin)
    assert stats.status_code == 200
    assert stats.json()["mode"] == "weak"
    assert "served_by" not in stats.json()
    assert "X-Read-Mode" not in stats.headers
    assert stats.json()["per_status"]["BARU"] == 1

    timing = client.get(f"{API}/stats/timing?limit=3", headers=admin).json()
    assert timing["limit"] == 10
    assert timing["summary"]["total"] == 1

    details = client.get(f"{API}/stats/timing/details", headers=admin)
    assert details.status_code == 200
    assert details.json()["meta"]["total_items"] == 1

    reversed_range = client.get(f"{API}/stats?from=2026-03-09&to=2026-03-01", headers=admin)
    assert reversed_range.status_code == 422

    assert client.get(f"{API}/stats", headers=_auth(tokens, "resident")).status_code == 403


def test_technicians_endpoint(client, tokens):
    response = client.get(f"{API}/technicians", headers=_auth(tokens, "admin"))
    assert response.status_code == 200
    assert [t["full_name"] for t in response.json()] == ["Agus Teknisi", "Joko Teknisi"]
