"""
Heuristic insight extraction: first-person statements → typed insight candidates.
Store-side dedupe still applies; this only proposes candidates.
"""

import re

from discovery_coach.state.models import ConversationTurn, InsightKind, InsightSnapshot, TurnRole

DEFAULT_WINDOW_SIZE = 16
MAX_CANDIDATES = 12
MAX_VALUE_CHARS = 160
MIN_VALUE_CHARS = 3

SENTENCE_SPLIT = re.compile(r"[.!?]")

# First match per sentence wins, so order matters
INSIGHT_PATTERNS: list[tuple[InsightKind, re.Pattern]] = [
    (InsightKind.GOAL, re.compile(r"\b(?:i\s*(?:want|hope|plan|aim|would like|intend|am looking|'m looking) to)\s+([^.!?]+)", re.I)),
    (InsightKind.GOAL, re.compile(r"\bmy (?:goal|dream|mission) is to\s+([^.!?]+)", re.I)),
    (InsightKind.STRENGTH, re.compile(r"\b(?:i(?:'m| am)?\s*(?:good|great|strong) at|i\s*(?:can|could|manage to))\s+([^.!?]+)", re.I)),
    (InsightKind.STRENGTH, re.compile(r"\b(?:i\s*(?:build|built|create|created|develop|developed|prototype|prototyped))\s+([^.!?]+)", re.I)),
    (InsightKind.INTEREST, re.compile(r"\b(?:i(?:'m| am)?\s*(?:into|interested in|passionate about|love|enjoy|fascinated by))\s+([^.!?]+)", re.I)),
    (InsightKind.CONSTRAINT, re.compile(r"\b(?:i\s*(?:don'?t want|wouldn'?t|won'?t|avoid|can'?t|refuse|prefer not) to)\s+([^.!?]+)", re.I)),
    (InsightKind.CONSTRAINT, re.compile(r"\bno interest in\s+([^.!?]+)", re.I)),
    (InsightKind.CONSTRAINT, re.compile(r"\bnot comfortable with\s+([^.!?]+)", re.I)),
]


def normalize_snippet(snippet: str, kind: InsightKind) -> str:
    """Trim lead-ins, cap length, and phrase constraints/strengths consistently."""
    value = snippet.strip()
    value = re.sub(r"^to\s+", "", value, flags=re.I)
    value = re.sub(r"^about\s+", "", value, flags=re.I)
    value = re.sub(r"\s+", " ", value)
    if len(value) > MAX_VALUE_CHARS:
        value = value[: MAX_VALUE_CHARS - 3] + "..."
    if kind == InsightKind.CONSTRAINT and not re.match(r"^avoid", value, re.I):
        value = f"Avoid {value}"
    if kind == InsightKind.STRENGTH and value[:1].islower():
        value = value[0].upper() + value[1:]
    return value


def extract_conversation_insights(
    turns: list[ConversationTurn],
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[InsightSnapshot]:
    """
    Scan the last `window_size` user turns sentence by sentence.
    Returns at most MAX_CANDIDATES snapshots, unique by (kind, lowercased value).
    """
    user_turns = [t for t in (turns or []) if t.role == TurnRole.USER]
    recent = user_turns[-window_size:] if window_size > 0 else []
    seen: set[tuple[InsightKind, str]] = set()
    out: list[InsightSnapshot] = []

    for turn in recent:
        sentences = [s.strip() for s in SENTENCE_SPLIT.split(turn.text or "") if s.strip()]
        for sentence in sentences:
            for kind, pattern in INSIGHT_PATTERNS:
                m = pattern.search(sentence)
                if not m or not m.group(1):
                    continue
                value = normalize_snippet(m.group(1), kind)
                if len(value) < MIN_VALUE_CHARS:
                    continue
                key = (kind, value.lower())
                if key in seen:
                    continue
                seen.add(key)
                out.append(InsightSnapshot(kind=kind, value=value))
                break

    return out[:MAX_CANDIDATES]
