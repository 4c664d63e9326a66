from fastapi.testclient import TestClient

import database
from main import app


def test_root(client):
    assert client.get("/").json() == {"message": "Trivia leaderboard running"}


def test_post_score_returns_ranked_top(client):
    client.post("/score", json={"name": "Ana", "score": 30, "difficulty": "easy", "time": 45})
    response = client.post("/score", json={"name": "Léa", "score": 42, "difficulty": "easy", "time": 50})

    assert response.status_code == 200
    body = response.json()
    assert [(e["name"], e["score"]) for e in body] == [("Léa", 42), ("Ana", 30)]
    assert set(body[0]) == {"name", "score", "memberId", "socials", "time"}


def test_post_score_keeps_best_score(client):
    client.post("/score", json={"name": "Ana", "score": 30, "difficulty": "easy", "time": 45})
    response = client.post(
        "/score", json={"name": "Ana", "score": 20, "difficulty": "easy", "time": 30, "memberId": ""}
    )
    assert response.status_code == 200
    assert response.json()[0]["score"] == 30


def test_invalid_score_is_400_with_localized_message(client, collection):
    response = client.post("/score", json={"name": "Ana", "score": 51})
    assert response.status_code == 400
    assert response.json() == {"detail": "Score invalide"}

    response = client.post("/score?lang=en", json={"name": "Ana", "score": "abc"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid score"}
    assert collection.count_documents({}) == 0


def test_missing_params_is_400(client):
    response = client.post("/score?lang=es", json={"score": 10})
    assert response.status_code == 400
    assert response.json() == {"detail": "Faltan datos: nombre o puntuación"}


def test_invalid_name_is_400(client):
    response = client.post("/score?lang=en", json={"name": "<b>", "score": 10})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid name")


def test_name_conflict_is_409(client, collection):
    client.post("/score", json={"name": "Bob", "score": 10, "memberId": "m1"})
    response = client.post("/score?lang=en", json={"name": "Bob", "score": 12, "memberId": "m2"})

    assert response.status_code == 409
    assert response.json() == {"detail": "Name already taken"}
    assert collection.find_one({"name": "Bob"})["memberId"] == "m1"


def test_other_methods_on_score_are_405(client):
    for method in ("get", "put", "patch", "delete"):
        response = getattr(client, method)("/score?lang=en")
        assert response.status_code == 405
        assert response.json() == {"detail": "Method not allowed"}


def test_read_leaderboard(client):
    client.post("/score", json={"name": "Ana", "score": 5, "difficulty": "hard"})
    client.post("/score", json={"name": "Bob", "score": 7})

    response = client.get("/leaderboard?difficulty=hard")
    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Ana"]
    assert [e["name"] for e in client.get("/leaderboard").json()] == ["Bob"]
    assert client.get("/leaderboard?difficulty=extreme").status_code == 400


def test_store_failure_is_500(unreachable):
    app.dependency_overrides[database.get_scores_collection] = lambda: unreachable
    try:
        response = TestClient(app).post("/score?lang=en", json={"name": "Ana", "score": 1})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"detail": "Server error"}


def test_unconfigured_database_is_500():
    response = TestClient(app).post("/score?lang=en", json={"name": "Ana", "score": 1})
    assert response.status_code == 500
    assert response.json() == {"detail": "Database client not initialized"}


def test_health_without_database():
    body = TestClient(app).get("/health").json()
    assert body["backend"] == "✅ Running"
    assert body["database_url"] == "❌ Not Set"
    assert body["connection_status"] == "Not Connected"


def test_missing_body_is_400(client):
    response = client.post("/score?lang=en")
    assert response.status_code == 400
    assert response.json() == {"detail": "Missing data: name or score"}


def test_unparsable_body_is_400(client, collection):
    response = client.post(
        "/score?lang=en", content=b'{"name": "Ana", ', headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Missing data: name or score"}
    assert collection.count_documents({}) == 0


def test_non_object_body_is_400(client):
    response = client.post("/score", json=[1, 2])
    assert response.status_code == 400
    assert response.json() == {"detail": "Données manquantes : nom ou score"}


def test_huge_time_is_400(client, collection):
    response = client.post("/score?lang=en", json={"name": "Ana", "score": 1, "time": 10 ** 400})
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid time"}
    assert collection.count_documents({}) == 0
