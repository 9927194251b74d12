import pytest
from conftest import FakeClient, detection_json
from fastapi.testclient import TestClient

import api_server.routes.debate as debate_routes
from api_server.main import app
from api_server.middleware.rate_limit import limiter
from judge_core import InMemoryDebateStore, InMemoryMessageStore, InMemoryUserStatsStore

HEADERS = {"X-API-Key": "test-key"}


@pytest.fixture
def fake_llm():
    return FakeClient(detections=[
        detection_json(p1_merits=["相手の誤謬を正確に指摘"], feedback="鋭い"),
        detection_json(p1_merits=["相手の誤謬を正確に指摘"]),
    ])


@pytest.fixture
def client(monkeypatch, fake_llm):
    """ストアを初期化し、LLM を偽物に差し替えた TestClient"""
    monkeypatch.setattr(debate_routes, "debate_store", InMemoryDebateStore())
    monkeypatch.setattr(debate_routes, "message_store", InMemoryMessageStore())
    monkeypatch.setattr(debate_routes, "user_stats_store", InMemoryUserStatsStore())
    monkeypatch.setattr(debate_routes, "GroqClient", lambda api_key=None: fake_llm)
    monkeypatch.setattr(limiter, "enabled", False)
    return TestClient(app)


def create_and_join(client):
    response = client.post(
        "/debates",
        json={"theme": "義務教育にプログラミングは必要か", "player1_id": "alice", "settings": {"max_utterances": 5}},
        headers=HEADERS,
    )
    assert response.status_code == 201
    debate_id = response.json()["debate"]["debate_id"]
    response = client.post(f"/debates/{debate_id}/join", json={"player_id": "bob"}, headers=HEADERS)
    assert response.status_code == 200
    return debate_id


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


def test_missing_api_key_is_rejected(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setattr(limiter, "enabled", False)
    response = TestClient(app).post("/debates", json={"theme": "テーマ", "player1_id": "alice"})
    assert response.status_code == 401


def test_debate_flow(client):
    debate_id = create_and_join(client)

    debate = client.get(f"/debates/{debate_id}").json()
    assert debate["debate"]["status"] == "active"
    assert 0 < debate["remaining_seconds"] <= 600

    response = client.post(
        f"/debates/{debate_id}/utterances",
        json={"player_id": "alice", "content": "その主張は循環しています"},
        headers=HEADERS,
    )
    assert response.status_code == 200
    evaluation = response.json()["evaluation"]
    assert evaluation["player1_score"] == 7
    assert evaluation["player2_score"] == 5
    assert evaluation["advantage"] == 2
    assert evaluation["latest_feedback"] == "鋭い"
    assert evaluation["opponent_turn"] is None

    messages = client.get(f"/debates/{debate_id}/messages").json()["messages"]
    assert messages[0]["ai_evaluation"]["player1_score"] == 7

    response = client.post(f"/debates/{debate_id}/end", json={"reason": "time_limit"}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["winner_id"] == "alice"
    assert response.json()["final_summary"] == {"player1_reason": "", "player2_reason": ""}

    # second end signal returns the same result without counting twice
    again = client.post(f"/debates/{debate_id}/end", json={}, headers=HEADERS)
    assert again.status_code == 200
    assert again.json()["winner_id"] == "alice"

    stats = client.get("/users/alice/stats").json()
    assert stats == {"user_id": "alice", "wins": 1, "losses": 0, "debate_count": 1}
    assert client.get("/users/bob/stats").json()["losses"] == 1

    finished = client.get("/debates", params={"status": "finished"}).json()["debates"]
    assert [d["debate_id"] for d in finished] == [debate_id]


def test_error_mapping(client):
    response = client.post(
        "/debates", json={"theme": "テーマ", "player1_id": "alice"}, headers=HEADERS
    )
    debate_id = response.json()["debate"]["debate_id"]

    waiting = client.post(
        f"/debates/{debate_id}/utterances", json={"player_id": "alice", "content": "必要"}, headers=HEADERS
    )
    assert waiting.status_code == 409

    missing = client.post(
        "/debates/nope/utterances", json={"player_id": "alice", "content": "必要"}, headers=HEADERS
    )
    assert missing.status_code == 404
    assert client.get("/debates/nope").status_code == 404

    client.post(f"/debates/{debate_id}/join", json={"player_id": "bob"}, headers=HEADERS)
    outsider = client.post(
        f"/debates/{debate_id}/utterances", json={"player_id": "mallory", "content": "必要"}, headers=HEADERS
    )
    assert outsider.status_code == 403

    empty = client.post(
        f"/debates/{debate_id}/utterances", json={"player_id": "alice", "content": ""}, headers=HEADERS
    )
    assert empty.status_code == 422


def test_automated_opponent_over_http(client, fake_llm):
    response = client.post(
        "/debates",
        json={"theme": "テーマ", "player1_id": "alice", "settings": {"automated_opponent": True}},
        headers=HEADERS,
    )
    debate = response.json()["debate"]
    assert debate["status"] == "active"

    response = client.post(
        f"/debates/{debate['debate_id']}/utterances",
        json={"player_id": "alice", "content": "必要です"},
        headers=HEADERS,
    )
    reply = response.json()["evaluation"]["opponent_turn"]
    assert reply["utterance"]["speaker"] == "player2"
    assert reply["utterance"]["text"] == "その前提は成り立ちません。"
