"""Tests for the recurrence and deadline API endpoints."""

from __future__ import annotations

import sys
from datetime import date, timedelta
from pathlib import Path

import yaml
from fastapi.testclient import TestClient

# pylint: disable=wrong-import-position, import-outside-toplevel

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import deadlines
from config import config
from main import app
from routes import deadlines as deadlines_route


def _setup_deadline_environment(monkeypatch, tmp_path: Path) -> Path:
    deadlines_file = tmp_path / "deadlines.yaml"

    def _read_raw_override(path=None, **_):  # pragma: no cover - signature parity
        return deadlines.read_deadlines_raw(deadlines_file, log=False)

    def _read_override(path=None, today=None):  # pragma: no cover - signature parity
        return deadlines.read_deadlines(deadlines_file, today)

    def _write_override(data, path=None):  # pragma: no cover - signature parity
        deadlines.write_deadlines(data, deadlines_file)

    def _upcoming_override(path=None, days=None, today=None):
        return deadlines.upcoming_deadlines(deadlines_file, days=days, today=today)

    monkeypatch.setattr(deadlines_route, "read_deadlines_raw", _read_raw_override)
    monkeypatch.setattr(deadlines_route, "read_deadlines", _read_override)
    monkeypatch.setattr(deadlines_route, "write_deadlines", _write_override)
    monkeypatch.setattr(deadlines_route, "upcoming_deadlines", _upcoming_override)
    monkeypatch.setattr(deadlines, "COMPLETION_LOG_PATH", tmp_path / "completions.yaml")
    monkeypatch.setattr(config, "API_KEY", "")
    return deadlines_file


def test_list_recurrence_patterns():
    with TestClient(app) as client:
        response = client.get("/recurrence-patterns")
    assert response.status_code == 200
    options = response.json()
    assert len(options) == 10
    assert options[3] == {"value": "quarterly", "label": "Quarterly"}


def test_label_endpoint_echoes_unknown_patterns():
    with TestClient(app) as client:
        known = client.get("/recurrence-patterns/birthday-month/label").json()
        unknown = client.get("/recurrence-patterns/fortnightly/label").json()
    assert known == {"pattern": "birthday-month", "label": "Birthday Month"}
    assert unknown == {"pattern": "fortnightly", "label": "fortnightly"}


def test_preview_next_date():
    with TestClient(app) as client:
        response = client.get(
            "/recurrence-patterns/monthly/next", params={"anchor": "2024-01-31"}
        )
    assert response.status_code == 200
    assert response.json() == {
        "anchor": "2024-01-31",
        "pattern": "monthly",
        "label": "Monthly",
        "next": "2024-02-29",
    }


def test_preview_unknown_pattern_falls_back_to_daily():
    with TestClient(app) as client:
        response = client.get(
            "/recurrence-patterns/hourly/next", params={"anchor": "2024-12-31"}
        )
    assert response.status_code == 200
    assert response.json()["next"] == "2025-01-01"


def test_preview_rejects_bad_anchor():
    with TestClient(app) as client:
        response = client.get(
            "/recurrence-patterns/monthly/next", params={"anchor": "not-a-date"}
        )
    assert response.status_code == 422


def test_create_deadline_normalizes_pattern(monkeypatch, tmp_path: Path):
    deadlines_file = _setup_deadline_environment(monkeypatch, tmp_path)
    deadlines.write_deadlines([{"id": 4, "title": "CPA renewal"}], deadlines_file)

    payload = {
        "title": "EA renewal",
        "due_date": "2025-03-31",
        "is_recurring": True,
        "recurring_pattern": "Semi-Annual",
    }
    with TestClient(app) as client:
        response = client.post("/deadlines", json=payload)

    assert response.status_code == 201
    created = response.json()
    assert created["id"] == 5
    assert created["recurring_pattern"] == "bi-annually"
    assert created["recurrence_label"] == "Bi-annually"

    persisted = yaml.safe_load(deadlines_file.read_text(encoding="utf-8"))
    assert len(persisted) == 2
    assert persisted[-1]["due_date"] == "2025-03-31"
    assert "recurrence_label" not in persisted[-1]


def test_create_recurring_deadline_defaults_pattern(monkeypatch, tmp_path: Path):
    _setup_deadline_environment(monkeypatch, tmp_path)
    with TestClient(app) as client:
        response = client.post(
            "/deadlines", json={"title": "Log hours", "is_recurring": True}
        )
    assert response.status_code == 201
    assert response.json()["recurring_pattern"] == config.DEFAULT_RECURRENCE


def test_create_deadline_rejects_unknown_pattern(monkeypatch, tmp_path: Path):
    deadlines_file = _setup_deadline_environment(monkeypatch, tmp_path)
    payload = {"title": "Mystery", "is_recurring": True, "recurring_pattern": "hourly"}
    with TestClient(app) as client:
        response = client.post("/deadlines", json=payload)
    assert response.status_code == 422
    assert not deadlines_file.exists()


def test_complete_recurring_deadline(monkeypatch, tmp_path: Path):
    deadlines_file = _setup_deadline_environment(monkeypatch, tmp_path)
    deadlines.write_deadlines(
        [
            {
                "id": 1,
                "title": "IAR renewal",
                "due_date": "2024-01-31",
                "is_recurring": True,
                "recurring_pattern": "quarterly",
                "completed": False,
            }
        ],
        deadlines_file,
    )
    with TestClient(app) as client:
        response = client.post("/deadlines/1/complete")

    assert response.status_code == 200
    assert response.json()["due_date"] == "2024-04-30"
    saved = deadlines.read_deadlines_raw(deadlines_file)
    assert saved[0]["due_date"] == "2024-04-30"
    assert saved[0]["completed"] is False
    assert len(deadlines.read_deadline_completions(tmp_path / "completions.yaml")) == 1


def test_complete_unknown_deadline_returns_404(monkeypatch, tmp_path: Path):
    _setup_deadline_environment(monkeypatch, tmp_path)
    with TestClient(app) as client:
        response = client.post("/deadlines/99/complete")
    assert response.status_code == 404


def test_upcoming_deadlines_endpoint(monkeypatch, tmp_path: Path):
    deadlines_file = _setup_deadline_environment(monkeypatch, tmp_path)
    today = date.today()
    deadlines.write_deadlines(
        [
            {
                "id": 1,
                "title": "soon",
                "due_date": (today + timedelta(days=2)).isoformat(),
            },
            {
                "id": 2,
                "title": "later",
                "due_date": (today + timedelta(days=60)).isoformat(),
            },
        ],
        deadlines_file,
    )
    with TestClient(app) as client:
        response = client.get("/deadlines/upcoming", params={"days": 7})
    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["soon"]


def test_write_endpoints_require_configured_key(monkeypatch, tmp_path: Path):
    _setup_deadline_environment(monkeypatch, tmp_path)
    monkeypatch.setattr(config, "API_KEY", "secret")
    with TestClient(app) as client:
        denied = client.post("/deadlines", json={"title": "Locked"})
        allowed = client.post(
            "/deadlines", json={"title": "Open"}, headers={"X-API-Key": "secret"}
        )
    assert denied.status_code == 401
    assert allowed.status_code == 201


def test_rejected_writes_name_the_operation(monkeypatch, tmp_path: Path):
    deadlines_file = _setup_deadline_environment(monkeypatch, tmp_path)
    deadlines.write_deadlines(
        [
            {
                "id": 1,
                "title": "OTRP renewal",
                "due_date": "2025-06-30",
                "is_recurring": True,
                "recurring_pattern": "even-years",
            }
        ],
        deadlines_file,
    )
    monkeypatch.setattr(config, "API_KEY", "secret")
    with TestClient(app) as client:
        create = client.post(
            "/deadlines", json={"title": "Locked"}, headers={"X-API-Key": "wrong"}
        )
        complete = client.post("/deadlines/1/complete")
        listing = client.get("/deadlines")
    assert create.status_code == 401
    assert "create deadlines" in create.json()["detail"]
    assert complete.status_code == 401
    assert "complete deadlines" in complete.json()["detail"]
    assert listing.status_code == 200
    assert deadlines.read_deadlines_raw(deadlines_file)[0]["due_date"] == "2025-06-30"


def test_api_key_query_parameter_is_not_accepted(monkeypatch, tmp_path: Path):
    _setup_deadline_environment(monkeypatch, tmp_path)
    monkeypatch.setattr(config, "API_KEY", "secret")
    with TestClient(app) as client:
        response = client.post(
            "/deadlines", json={"title": "Locked"}, params={"api_key": "secret"}
        )
    assert response.status_code == 401
