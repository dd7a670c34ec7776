"""
Tests for the obligation API endpoints backed by the real SQLite store.

Only the rule catalog is overridden; obligations go through the default
DBObligationStore and the temporary database configured in ``conftest.py``.
"""

import pytest
from fastapi.testclient import TestClient

from api.deps import get_catalog
from api.main import app
from echeancier.catalog import RuleCatalog
from echeancier.db import create_all
from echeancier.settings import settings

COMPANY = {"person_category": "legal entity", "name": "Atlas SA"}

CNSS_RULE = {
    "id": "cnss-api",
    "person_category": "legal entity",
    "obligation_type": "Social security",
    "tag": "CNSS",
    "frequency": "quarterly",
    "due_day": 10,
    "due_month": 1,
    "kind": "social",
}


def setup_module(module):  # noqa: D401
    """(pytest) Create tables once for this test file."""
    create_all()


@pytest.fixture
def client():
    catalog = RuleCatalog()
    app.dependency_overrides[get_catalog] = lambda: catalog
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_materialise_and_mutate_persist(client):
    assert client.post("/catalog", json=CNSS_RULE).status_code == 201

    resp = client.post("/companies/api-atlas/obligations/2025", json=COMPANY)
    assert resp.status_code == 201
    body = resp.json()
    assert len(body["obligations"]) == 4
    first = body["obligations"][0]
    assert first["created_at"] is not None
    assert first["currency"] == settings.default_currency

    ob_id = "api-atlas:cnss-api:2025:01"
    resp = client.patch(f"/obligations/{ob_id}/status", json={"status": "completed", "edited_by": "amina"})
    assert resp.status_code == 200
    assert client.post(f"/obligations/{ob_id}/priority/cycle").status_code == 200
    assert client.post(f"/obligations/{ob_id}/completion/toggle").status_code == 200

    stored = client.get(f"/obligations/{ob_id}").json()
    assert stored["workflow_status"] == "pending"
    assert stored["priority"] == "high"
    assert stored["edited_by"] == "amina"
    assert stored["last_edited"] is not None


def test_rematerialise_keeps_persisted_status(client):
    client.post("/catalog", json=CNSS_RULE)
    client.post("/companies/api-beta/obligations/2025", json=COMPANY)
    ob_id = "api-beta:cnss-api:2025:02"
    client.patch(f"/obligations/{ob_id}/status", json={"status": "cancelled"})

    resp = client.post("/companies/api-beta/obligations/2025", json=COMPANY)
    assert resp.status_code == 201
    by_id = {o["id"]: o for o in resp.json()["obligations"]}
    assert by_id[ob_id]["workflow_status"] == "cancelled"
