"""
Engagement analysis over a transcript window.
Counts how the user reacts to the interviewer: answering the question asked,
picking up themes, adding new detail, taking initiative, or shutting down.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable

from discovery_coach.nlp.preprocessing import tokenize
from discovery_coach.state.models import ConversationTurn, TurnRole

DEFAULT_WINDOW_SIZE = 12
MAX_SALIENT_TOPICS = 20
MIN_TOPIC_CHARS = 4
# Share of the pending question's topics a reply must echo to count as aligned
ALIGNMENT_PARTIAL_RATIO = 0.2
ALIGNMENT_FULL_RATIO = 0.5
NEW_TOKENS_FOR_DEPTH = 3

NEGATIVE_PATTERNS = [
    re.compile(r"i\s*(?:don'?t|do not)\s*know", re.I),
    re.compile(r"nothing (?:much|really)", re.I),
    re.compile(r"it(?:'?s)? (?:all )?pointless", re.I),
    re.compile(r"\bno idea\b", re.I),
    re.compile(r"\bnot sure\b", re.I),
]

INITIATIVE_PATTERNS = [
    re.compile(r"\bwhat if\b", re.I),
    re.compile(r"\bmaybe (?:we|i) could\b", re.I),
    re.compile(r"\bhow about\b", re.I),
    re.compile(r"\bi wonder\b", re.I),
    re.compile(r"\blet'?s\b", re.I),
]


@dataclass
class EngagementAnalysis:
    reply_count: int = 0
    aligned_replies: float = 0.0
    depth_signals: int = 0
    theme_adoptions: int = 0
    initiative_signals: int = 0
    negative_signals: int = 0
    engagement_score: float = 0.0
    salient_topics: list[str] = field(default_factory=list)

    @property
    def follow_through(self) -> bool:
        """At least one reply picked up the interviewer's question or theme."""
        return self.aligned_replies > 0 or self.theme_adoptions > 0


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _topics(tokens: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for token in tokens:
        if len(token) >= MIN_TOPIC_CHARS and token not in seen:
            seen.append(token)
    return seen


def analyze_engagement(
    turns: list[ConversationTurn],
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> EngagementAnalysis:
    """
    Walk the last `window_size` turns and score the user's replies.
    Score weights: replies 0.2, alignment 0.25, depth 0.2, theme 0.2,
    initiative 0.15, minus 0.25 per negative signal (max 0.75), clamped to 0..1.
    """
    recent = list(turns or [])[-window_size:] if window_size > 0 else []
    result = EngagementAnalysis()

    pending_question_tokens: list[str] = []
    last_assistant_topics: list[str] = []
    addressed_topics: set[str] = set()
    seen_user_tokens: set[str] = set()
    salient: list[str] = []

    for turn in recent:
        text = turn.text or ""
        if turn.role == TurnRole.ASSISTANT:
            tokens = tokenize(text)
            topics = _topics(tokens)
            if topics:
                last_assistant_topics = topics
            if "?" in text:
                pending_question_tokens = topics or tokens
            else:
                pending_question_tokens = []
            continue

        tokens = tokenize(text)
        if not tokens:
            pending_question_tokens = []
            continue

        result.reply_count += 1
        token_set = set(tokens)
        for token in tokens:
            if token not in salient:
                salient.append(token)

        if pending_question_tokens:
            overlap = [t for t in pending_question_tokens if t in token_set]
            ratio = len(overlap) / len(pending_question_tokens)
            if ratio >= ALIGNMENT_PARTIAL_RATIO:
                result.aligned_replies += 1.0 if ratio >= ALIGNMENT_FULL_RATIO else 0.5

        fresh_topics = [
            t for t in last_assistant_topics if t in token_set and t not in addressed_topics
        ]
        if fresh_topics:
            result.theme_adoptions += 1
            addressed_topics.update(fresh_topics)

        new_tokens = token_set - seen_user_tokens
        if len(new_tokens) >= NEW_TOKENS_FOR_DEPTH:
            result.depth_signals += 1
        seen_user_tokens.update(new_tokens)

        if "?" in text or any(p.search(text) for p in INITIATIVE_PATTERNS):
            result.initiative_signals += 1
        if any(p.search(text) for p in NEGATIVE_PATTERNS):
            result.negative_signals += 1

        pending_question_tokens = []

    replies = result.reply_count
    reply_score = _clamp(replies / 4)
    alignment_score = _clamp(result.aligned_replies / replies if replies else 0.0)
    depth_score = _clamp(result.depth_signals / 3)
    theme_score = _clamp(result.theme_adoptions / 3)
    initiative_score = _clamp(result.initiative_signals / 2)
    negative_penalty = _clamp(result.negative_signals * 0.25, 0.0, 0.75)

    result.engagement_score = round(
        _clamp(
            reply_score * 0.2
            + alignment_score * 0.25
            + depth_score * 0.2
            + theme_score * 0.2
            + initiative_score * 0.15
            - negative_penalty
        ),
        4,
    )
    result.salient_topics = salient[-MAX_SALIENT_TOPICS:]
    return result
