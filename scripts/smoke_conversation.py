"""
Quick check that the engine works end to end over HTTP: rubric → phase → instructions → turn → voice bootstrap.
Run with: from project root, server must be running (uvicorn discovery_coach.main:app).
  python scripts/smoke_conversation.py
"""
import os
import sys

import requests

BASE = os.environ.get("DISCOVERY_COACH_BASE_URL", "http://127.0.0.1:8000")
TIMEOUT = 15

TURNS = [
    {"role": "assistant", "text": "Hey! What's been keeping you busy outside school or work?"},
    {"role": "user", "text": "Mostly making beats and coding little music tools for my friends."},
    {"role": "assistant", "text": "Nice. What do your friends come to you for when they use those tools?"},
    {"role": "user", "text": "They come to me when something breaks, I'm good at debugging fast."},
]
INSIGHTS = [
    {"kind": "interest", "value": "music production"},
    {"kind": "strength", "value": "debugging fast"},
    {"kind": "hope", "value": "turn the hobby into paid gigs"},
]


def main():
    # 1. Health
    r = requests.get(f"{BASE}/health", timeout=TIMEOUT)
    assert r.status_code == 200, f"Health failed: {r.status_code}"
    print("OK /health")

    # 2. Rubric
    r = requests.post(
        f"{BASE}/conversation/rubric",
        json={"turns": TURNS, "insights": INSIGHTS, "votes": {}, "suggestion_count": 0},
        timeout=TIMEOUT,
    )
    assert r.status_code == 200, f"Rubric failed: {r.status_code} {r.text}"
    rubric = r.json()["rubric"]
    assert rubric["engagement_style"] in ("leaning-in", "neutral", "blocked")
    assert set(rubric["insight_gaps"]) == {
        k for k, v in rubric["insight_coverage"].items() if not v
    }, "insight_gaps must be the complement of insight_coverage"
    print("OK POST /conversation/rubric")
    print(f"  engagement: {rubric['engagement_style']}, depth: {rubric['context_depth']}, cards: {rubric['card_readiness']['status']}")

    # 3. Phase
    r = requests.post(
        f"{BASE}/conversation/phase",
        json={"current_phase": "story-mining", "turns": TURNS, "insights": INSIGHTS, "rubric": rubric},
        timeout=TIMEOUT,
    )
    assert r.status_code == 200, f"Phase failed: {r.status_code} {r.text}"
    decision = r.json()["decision"]
    print("OK POST /conversation/phase")
    print(f"  next_phase: {decision['next_phase']}, teaser: {decision['should_seed_teaser_card']}")

    # 4. Instructions: compiling twice must be byte-identical
    body = {"phase": decision["next_phase"], "rubric": rubric, "allow_card_prompt": False}
    first = requests.post(f"{BASE}/conversation/instructions", json=body, timeout=TIMEOUT).json()
    second = requests.post(f"{BASE}/conversation/instructions", json=body, timeout=TIMEOUT).json()
    assert first == second, "instructions should be deterministic"
    assert "Suggestion cards are ready" not in (first["instructions"] or "")
    print("OK POST /conversation/instructions")

    # 5. Full turn
    r = requests.post(
        f"{BASE}/conversation/turn",
        json={"turns": TURNS, "insights": INSIGHTS, "current_phase": "story-mining"},
        timeout=TIMEOUT,
    )
    assert r.status_code == 200, f"Turn failed: {r.status_code} {r.text}"
    plan = r.json()
    print("OK POST /conversation/turn")
    print(f"  phase: {plan['phase']}, generate suggestions: {plan['should_generate_suggestions']}")
    print(f"  guidance (first 80 chars): {(plan['guidance'] or '')[:80]}...")

    # 6. Voice bootstrap
    r = requests.post(f"{BASE}/conversation/voice/bootstrap", json={"turns": TURNS[:2]}, timeout=TIMEOUT)
    assert r.status_code == 200, f"Voice bootstrap failed: {r.status_code} {r.text}"
    assert r.json()["rubric"]["card_readiness"]["status"] != "ready"
    print("OK POST /conversation/voice/bootstrap")
    print("Rubric, phase, instructions, turn and voice bootstrap are working.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except requests.exceptions.ConnectionError:
        print("Error: Cannot reach server. Start with: uvicorn discovery_coach.main:app --reload")
        sys.exit(1)
    except requests.exceptions.ReadTimeout:
        print("Error: Request timed out. Is the server running in the same environment as this script?")
        sys.exit(1)
    except AssertionError as e:
        print(f"Fail: {e}")
        sys.exit(1)
