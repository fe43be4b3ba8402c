"""
Tests for the card and review API endpoints.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.v1.endpoints.review_helpers import get_card_repository
from conftest import T, InMemoryCardRepository, make_card

NOW = "2024-01-01T12:00:00Z"


@pytest.fixture
def repository():
    return InMemoryCardRepository([
        make_card("A", T - timedelta(hours=1), proficiency_level=5),
        make_card("B", T + timedelta(hours=1)),
        make_card("C", T - timedelta(hours=2), proficiency_level=1),
    ])


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_card_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_get_cards_returns_full_snapshot(client):
    response = client.get("/api/v1/cards")

    assert response.status_code == 200
    assert [card["id"] for card in response.json()] == ["A", "B", "C"]


def test_get_card(client):
    response = client.get("/api/v1/cards/B")

    assert response.status_code == 200
    assert response.json()["jyutping"] == "zi6 B"


def test_get_unknown_card(client):
    response = client.get("/api/v1/cards/Z")

    assert response.status_code == 404
    assert response.json()["type"] == "NotFoundError"


def test_due_queue(client):
    response = client.get("/api/v1/reviews/due", params={"now": NOW})

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert [card["id"] for card in data["cards"]] == ["C", "A"]


def test_due_queue_empty(client, repository):
    repository.cards = {}

    response = client.get("/api/v1/reviews/due", params={"now": NOW})

    assert response.status_code == 200
    assert response.json() == {"count": 0, "cards": []}


def test_due_queue_fetch_failure_is_service_unavailable(client, repository):
    repository.fetch_error = "Failed to fetch vocabulary: HTTP error! status: 500"

    response = client.get("/api/v1/reviews/due", params={"now": NOW})

    assert response.status_code == 503
    assert response.json()["type"] == "SnapshotUnavailableError"


def test_review_card(client, repository):
    response = client.post("/api/v1/reviews/A", json={"delta": 1, "now": NOW})

    assert response.status_code == 200
    data = response.json()
    assert data["saved"] is True
    assert data["detail"] is None
    assert data["result"]["card_id"] == "A"
    assert data["result"]["proficiency_level"] == 5
    assert data["result"]["next_review_time"].startswith("2024-01-01T13:30:00")
    assert data["due_count"] == 1
    assert [card["id"] for card in data["due_cards"]] == ["C"]
    assert repository.persisted == [("A", 5, T + timedelta(minutes=90))]


def test_review_card_difficult_at_min_level(client, repository):
    response = client.post("/api/v1/reviews/C", json={"delta": -1, "now": NOW})

    assert response.status_code == 200
    assert response.json()["result"]["proficiency_level"] == 1


def test_review_unknown_card(client):
    response = client.post("/api/v1/reviews/Z", json={"delta": 0, "now": NOW})

    assert response.status_code == 404


def test_review_requires_delta(client):
    response = client.post("/api/v1/reviews/A", json={"now": NOW})

    assert response.status_code == 422


def test_review_not_saved_returns_computed_result(client, repository):
    repository.persist_error = "HTTP error! status: 500"

    response = client.post("/api/v1/reviews/A", json={"delta": 0, "now": NOW})

    assert response.status_code == 200
    data = response.json()
    assert data["saved"] is False
    assert data["detail"] == "HTTP error! status: 500"
    assert data["due_cards"] is None
    assert data["result"]["proficiency_level"] == 5
    assert repository.persisted == []

    # Resubmit the same result once the store recovers
    repository.persist_error = None
    retry = client.post("/api/v1/reviews/A/persist", json=data["result"])

    assert retry.status_code == 200
    assert retry.json()["saved"] is True
    assert retry.json()["result"] == data["result"]
    assert repository.persisted == [("A", 5, T + timedelta(minutes=90))]


def test_persist_rejects_mismatched_card(client):
    result = {
        "card_id": "B",
        "proficiency_level": 3,
        "next_review_time": "2024-01-01T13:30:00Z",
        "reviewed_at": NOW,
    }

    response = client.post("/api/v1/reviews/A/persist", json=result)

    assert response.status_code == 400
    assert response.json()["type"] == "ValidationError"


def test_persist_for_removed_card_returns_result_not_saved(client, repository):
    result = {
        "card_id": "A",
        "proficiency_level": 5,
        "next_review_time": "2024-01-01T13:30:00Z",
        "reviewed_at": NOW,
    }
    del repository.cards["A"]

    response = client.post("/api/v1/reviews/A/persist", json=result)

    assert response.status_code == 200
    data = response.json()
    assert data["saved"] is False
    assert data["detail"] == "Card with id A not found"
    assert data["result"]["proficiency_level"] == 5
