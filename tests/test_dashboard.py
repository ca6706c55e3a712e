"""Tests for public pages: health and the dashboard loading fragment."""
from __future__ import annotations

from api.routes.dashboard import LOADING_TEXT, render_loading


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_detailed_health(client):
    resp = client.get("/health/detailed")

    assert resp.status_code == 200
    assert resp.json()["checks"]["database"]["connected"] is True


def test_loading_page(client):
    resp = client.get("/dashboard/loading")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Carregando..." in resp.text
    assert "animate-spin" in resp.text


def test_loading_extra_classes_override():
    html = render_loading("min-h-screen")

    assert "min-h-[200px]" not in html
    assert "min-h-screen" in html
    assert LOADING_TEXT in html
