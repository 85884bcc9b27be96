import logging
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from kioku.consts import VERSION
from kioku.domain.mastery.models import MasteryRecord
from kioku.infrastructure.adapters.json_store import JsonFileMasteryStore
from kioku.server import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def isolated_home(mock_home):
    return mock_home


def test_health_check(mock_home):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION
    assert data["store_path"].endswith("mastery.json")
    assert str(mock_home.resolve()) in data["store_path"]
    assert data["remote_sync"] is False


def test_health_reports_remote_sync(monkeypatch):
    monkeypatch.setenv("KIOKU_API_BASE_URL", "https://api.example/php")
    assert client.get("/health").json()["remote_sync"] is True


def test_startup_logs_store_and_sync(caplog, monkeypatch, store_file):
    monkeypatch.setenv("KIOKU_STORE_PATH", str(store_file))

    with caplog.at_level(logging.INFO, logger="kioku.server"):
        with TestClient(app):
            pass

    assert f"mastery store {store_file.resolve()}" in caplog.text
    assert "remote sync: disabled" in caplog.text
    assert "kioku server stopped" in caplog.text


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_schedule_is_pure_computation():
    response = client.post(
        "/schedule",
        json={"record": {"item_id": 1, "knowledge_level": 9, "ease_factor": 3.0}, "rating": "easy"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["new_knowledge_level"] == 10
    assert data["new_ease_factor"] == pytest.approx(3.15)
    assert data["next_interval_seconds"] == pytest.approx(24_494_400)
    assert data["new_total_reviews"] == 1


def test_schedule_defaults_for_new_item():
    response = client.post("/schedule", json={"record": {"item_id": "neko"}, "rating": "easy"})

    assert response.status_code == 200
    data = response.json()
    assert data["new_knowledge_level"] == 2
    assert data["next_interval_seconds"] == 300


def test_schedule_rejects_unknown_rating():
    response = client.post("/schedule", json={"record": {"item_id": 1}, "rating": "meh"})
    assert response.status_code == 422


def test_review_persists_record(store_file):
    response = client.post(
        "/items/5/review", json={"rating": "normal", "store_path": str(store_file)}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["synced"] is False
    assert data["record"]["item_id"] == 5
    assert data["record"]["knowledge_level"] == 1
    assert data["result"]["next_interval_seconds"] == 60
    assert JsonFileMasteryStore(store_file).get(5).total_reviews == 1


@patch("kioku.application.srs.service.ReviewService.record_answer")
def test_review_failure_maps_to_500(mock_record, store_file):
    mock_record.side_effect = Exception("Boom")

    response = client.post(
        "/items/5/review", json={"rating": "hard", "store_path": str(store_file)}
    )

    assert response.status_code == 500
    assert "Boom" in response.json()["detail"]


def test_review_keeps_zero_padded_id(store_file):
    for _ in range(2):
        response = client.post(
            "/items/007/review", json={"rating": "normal", "store_path": str(store_file)}
        )
        assert response.status_code == 200

    data = response.json()
    assert data["record"]["item_id"] == "007"
    assert data["record"]["total_reviews"] == 2


def test_item_stats(store_file):
    JsonFileMasteryStore(store_file).put(
        MasteryRecord(item_id=3, knowledge_level=7, total_reviews=20, correct_reviews=18)
    )

    response = client.get("/items/3/stats", params={"store_path": str(store_file)})

    assert response.status_code == 200
    data = response.json()
    assert data["accuracy"] == pytest.approx(90.0)
    assert data["mastery_level"] == "Proficient"


def test_item_stats_corrupt_store(store_file):
    store_file.write_text("nope", encoding="utf-8")

    response = client.get("/items/3/stats", params={"store_path": str(store_file)})

    assert response.status_code == 500
