import pytest
from fastapi.testclient import TestClient

from hsk_trainer.application.review_session import ReviewSession
from hsk_trainer.consts import VERSION
from hsk_trainer.server import app, get_session

client = TestClient(app)


@pytest.fixture
def session(items, memory_store):
    session = ReviewSession(items, memory_store)
    app.dependency_overrides[get_session] = lambda: session
    yield session
    app.dependency_overrides.clear()


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION
    assert data["uptime_seconds"] >= 0


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_due_lists_new_items(session):
    response = client.get("/due")

    assert response.status_code == 200
    data = response.json()
    assert [d["id"] for d in data] == [item.id for item in session.items]
    assert data[0]["hanzi"] == "爱好"
    assert data[0]["skills"] == ["recognize", "write"]


def test_review_updates_progress(session, memory_store):
    response = client.post("/review", json={"item_id": "hsk3-001", "grade": "good"})

    assert response.status_code == 200
    data = response.json()
    assert data["lastGrade"] == "good"
    assert data["skills"]["write"]["lastGrade"] == "good"
    assert "hsk3-001" in memory_store.load()

    due_ids = [d["id"] for d in client.get("/due").json()]
    assert "hsk3-001" not in due_ids


def test_review_recognition_only(t0, session):
    response = client.post(
        "/review",
        json={"item_id": "hsk3-002", "grade": "hard", "practiced_writing": False, "now": t0},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["lastReviewed"] == t0
    assert "lastGrade" not in data["skills"]["write"]


def test_review_invalid_grade(session, memory_store):
    response = client.post("/review", json={"item_id": "hsk3-001", "grade": "perfect"})

    assert response.status_code == 422
    assert "perfect" in response.json()["detail"]
    assert memory_store.load() == {}


def test_review_unknown_item(session):
    response = client.post("/review", json={"item_id": "nope", "grade": "good"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Unknown item id: nope"


def test_get_progress(t0, session):
    client.post("/review", json={"item_id": "hsk3-003", "grade": "again", "now": t0})

    response = client.get("/progress/hsk3-003")

    assert response.status_code == 200
    data = response.json()
    assert data["due"] == t0 + 30_000
    assert data["skills"]["recognize"]["lapses"] == 1


def test_get_progress_unknown(session):
    assert client.get("/progress/nope").status_code == 404
