"""FastAPI endpoint tests against an in-memory snapshot."""

import pytest

pytest.importorskip("fastapi")

from fastapi.testclient import TestClient  # noqa: E402

from diversity.filters import PLACEHOLDER  # noqa: E402
from diversity_api import main  # noqa: E402


@pytest.fixture
def client(monkeypatch, data_ctx):
    monkeypatch.setattr(main, "load_dashboard_data", lambda: data_ctx)
    return TestClient(main.app)


def test_meta_counties(client):
    resp = client.get("/meta/counties")
    assert resp.status_code == 200
    assert resp.json() == {"values": [PLACEHOLDER, "LANCASTER", "YORK"]}


def test_meta_markets(client):
    assert client.get("/meta/markets", params={"county": "LANCASTER"}).json() == {"values": [PLACEHOLDER, "M1", "M2"]}
    assert client.get("/meta/markets").json() == {"values": [PLACEHOLDER]}


def test_view_endpoint(client):
    resp = client.post("/view", json={"county": "LANCASTER", "market": PLACEHOLDER})
    assert resp.status_code == 200
    body = resp.json()
    assert body["selection"] == {"county": "LANCASTER", "market": None}
    assert body["growers"] == ["A", "B"]
    assert len(body["rows"]) == 6
    assert body["charts"]["products"]["encoding"]["y"]["field"] == "grower"


def test_view_stale_market_is_empty(client):
    body = client.post("/view", json={"county": "YORK", "market": "M1"}).json()
    assert body["rows"] == []


def test_debug_endpoint(client):
    body = client.get("/debug").json()
    assert body["row_counts"]["growers"] == 4
    assert body["zero_product_growers"] == ["D"]


def test_export_endpoint(client):
    resp = client.post("/export", json={"county": "YORK"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0] == "grower,category,value,n_product"
    assert len(lines) == 4


def test_errors_are_reported_as_json(monkeypatch):
    def boom():
        raise RuntimeError("snapshot unreadable")

    monkeypatch.setattr(main, "load_dashboard_data", boom)
    resp = TestClient(main.app).get("/debug")
    assert resp.status_code == 500
    assert resp.json() == {"error": "snapshot unreadable", "type": "RuntimeError"}
