"""HTTP tests for the conversation engine API (FastAPI TestClient)."""

import pytest
from fastapi.testclient import TestClient

from discovery_coach.main import app

TURNS = [
    {"role": "assistant", "text": "Hey! What have you been building or tinkering with lately?"},
    {"role": "user", "text": "Lately I've been building little music tools for friends, mostly beat sequencers."},
    {"role": "assistant", "text": "Nice. What do friends come to you for when those music tools break?"},
    {"role": "user", "text": "Friends come to me when music tools break because I'm quick at debugging weird audio bugs."},
]
INSIGHTS = [
    {"kind": "interest", "value": "music production"},
    {"kind": "strength", "value": "debugging"},
    {"kind": "goal", "value": "paid gigs"},
    {"kind": "mystery", "value": "dropped"},
]


@pytest.fixture
def client():
    return TestClient(app)


class TestHealth:
    def test_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}


class TestRubricEndpoint:
    def test_scores_transcript(self, client):
        r = client.post("/conversation/rubric", json={"turns": TURNS, "insights": INSIGHTS})
        assert r.status_code == 200
        body = r.json()
        assert body["rubric"]["card_readiness"]["status"] == "ready"
        assert body["rubric"]["insight_gaps"] == ["constraints"]
        assert body["should_generate_suggestions"] is True

    def test_missing_turns_is_400(self, client):
        r = client.post("/conversation/rubric", json={"turns": []})
        assert r.status_code == 400
        assert r.json()["detail"] == "turns required"

    def test_only_blank_turns_is_400(self, client):
        r = client.post("/conversation/rubric", json={"turns": [{"role": "user", "text": "  "}]})
        assert r.status_code == 400

    def test_prev_rubric_round_trips(self, client):
        first = client.post("/conversation/rubric", json={"turns": TURNS, "insights": INSIGHTS}).json()
        r = client.post(
            "/conversation/rubric",
            json={
                "turns": [{"role": "user", "text": "ok"}],
                "insights": INSIGHTS,
                "prev_rubric": first["rubric"],
            },
        )
        assert r.status_code == 200
        assert r.json()["rubric"]["card_readiness"]["status"] == "ready"


class TestPhaseEndpoint:
    def test_no_rubric_holds(self, client):
        r = client.post("/conversation/phase", json={"current_phase": "pattern-mapping", "turns": TURNS})
        assert r.status_code == 200
        assert r.json()["decision"]["next_phase"] == "pattern-mapping"

    def test_focus_used_when_phase_absent(self, client):
        r = client.post("/conversation/phase", json={"focus": "story"})
        assert r.json()["current_phase"] == "story-mining"

    def test_warmup_advances_on_user_turn(self, client):
        r = client.post("/conversation/phase", json={"turns": TURNS})
        assert r.json()["decision"]["next_phase"] == "story-mining"

    def test_unknown_phase_is_422(self, client):
        r = client.post("/conversation/phase", json={"current_phase": "closing"})
        assert r.status_code == 422


class TestInstructionsEndpoint:
    def test_compiles_without_rubric(self, client):
        r = client.post("/conversation/instructions", json={"phase": "warmup"})
        assert r.status_code == 200
        assert "warmup" in r.json()["instructions"]

    def test_suppressed_cards(self, client):
        rubric = client.post("/conversation/rubric", json={"turns": TURNS, "insights": INSIGHTS}).json()["rubric"]
        r = client.post(
            "/conversation/instructions",
            json={"phase": "option-seeding", "rubric": rubric, "allow_card_prompt": False},
        )
        assert "Suggestion cards are ready" not in r.json()["instructions"]


class TestTurnEndpoint:
    def test_full_turn(self, client):
        r = client.post(
            "/conversation/turn",
            json={"turns": TURNS, "insights": INSIGHTS, "current_phase": "story-mining"},
        )
        assert r.status_code == 200
        body = r.json()
        assert body["phase"] == "pattern-mapping"
        assert body["decision"]["next_phase"] == body["phase"]
        assert body["should_generate_suggestions"] is True
        assert body["guidance"]

    def test_empty_turns_rejected(self, client):
        r = client.post("/conversation/turn", json={"turns": []})
        assert r.status_code == 422


class TestVoiceBootstrapEndpoint:
    def test_bootstrap(self, client):
        r = client.post("/conversation/voice/bootstrap", json={"turns": TURNS[:2]})
        assert r.status_code == 200
        body = r.json()
        assert body["phase"] == "story-mining"
        assert body["should_generate_suggestions"] is False
        assert "Suggestion cards are ready" not in body["guidance"]


class TestInsightExtractEndpoint:
    def test_extracts(self, client):
        r = client.post(
            "/conversation/insights/extract",
            json={"turns": [{"role": "user", "text": "I love making beats. I want to teach kids."}]},
        )
        assert r.status_code == 200
        assert r.json()["insights"] == [
            {"kind": "interest", "value": "making beats"},
            {"kind": "goal", "value": "teach kids"},
        ]
