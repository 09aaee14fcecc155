"""
Rubric scorer. Heuristic, no ML. Simple, explainable, adjustable.
Transcript + insights + votes (+ previous rubric) → ConversationRubric.

Recomputed from scratch every call. Hysteresis is an explicit, pure
merge_rubrics(prev, fresh); nothing is remembered between calls.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from discovery_coach.nlp.engagement import analyze_engagement
from discovery_coach.nlp.preprocessing import clean_reply
from discovery_coach.state.models import (
    CardReadiness,
    CardReadinessStatus,
    ConversationFocus,
    ConversationRubric,
    ConversationTurn,
    CoverageKey,
    EnergyLevel,
    EngagementStyle,
    InsightCoverage,
    InsightKind,
    ReadinessBias,
    TurnRole,
)

logger = logging.getLogger("discovery_coach.rubric")

# Recent window: both roles, chronological tail of the transcript
RECENT_WINDOW_TURNS = 8
# A cleaned user reply longer than this counts as substantive
SUBSTANTIVE_MIN_CHARS = 24
# Substantive share of recent user replies
LOW_ENGAGEMENT_RATIO = 0.34
HIGH_ENGAGEMENT_RATIO = 0.67
# Energy: terse vs long replies
TERSE_REPLY_CHARS = 20
LONG_REPLY_CHARS = 120
HIGH_ENERGY_MIN_REPLIES = 2
CONTEXT_DEPTH_CAP = 3
# How many of the latest user turns are checked for idea-seeking language
IDEA_REQUEST_LOOKBACK = 2

# Card readiness: ready needs >= 3 categories and depth >= 2; near is exactly 2
READY_MIN_COVERAGE = 3
READY_MIN_CONTEXT_DEPTH = 2
NEAR_COVERAGE = 2

IDEA_REQUEST_PATTERN = re.compile(
    r"\b(?:ideas?|options?|suggest\w*|recommend\w*|what should i|where (?:do|should) i start"
    r"|any careers?|careers? (?:for|that|could))\b",
    re.I,
)
# Shrugs ("no idea", "don't have any ideas") are not requests
NEGATED_IDEA_PATTERN = re.compile(
    r"\b(?:no|zero|not (?:a|any|the slightest)"
    r"|(?:don'?t|do not|haven'?t|have not|didn'?t) (?:really )?(?:have|got)(?: any)?"
    r"|not (?:really )?sure (?:about|of)(?: any)?"
    r") (?:ideas?|clue|options?|suggestions?)\b",
    re.I,
)
COMMITMENT_PATTERN = re.compile(
    r"\b(?:i'?ll go with|i will go with|i'?m going with|i'?ve decided|i have decided"
    r"|let'?s do (?:it|that|this)|i(?:'?ll| will) pick|i choose|sign me up)\b",
    re.I,
)

COVERAGE_KINDS: dict[CoverageKey, frozenset[InsightKind]] = {
    CoverageKey.INTERESTS: frozenset({InsightKind.INTEREST}),
    CoverageKey.APTITUDES: frozenset({InsightKind.STRENGTH}),
    CoverageKey.GOALS: frozenset({InsightKind.GOAL, InsightKind.HOPE}),
    CoverageKey.CONSTRAINTS: frozenset({InsightKind.CONSTRAINT, InsightKind.BOUNDARY}),
}


def _timestamp(now: datetime | None = None) -> str:
    moment = now or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _recent(turns: Sequence[ConversationTurn]) -> list[ConversationTurn]:
    return list(turns or [])[-RECENT_WINDOW_TURNS:]


def _user_texts(turns: Iterable[ConversationTurn]) -> list[str]:
    return [clean_reply(t.text) for t in turns if t.role == TurnRole.USER]


def is_substantive(text: str) -> bool:
    return len(clean_reply(text)) > SUBSTANTIVE_MIN_CHARS


def _engagement_style(user_texts: list[str], follow_through: bool) -> EngagementStyle:
    if not user_texts:
        return EngagementStyle.BLOCKED
    ratio = sum(1 for t in user_texts if len(t) > SUBSTANTIVE_MIN_CHARS) / len(user_texts)
    if ratio < LOW_ENGAGEMENT_RATIO:
        return EngagementStyle.BLOCKED
    if ratio >= HIGH_ENGAGEMENT_RATIO and follow_through:
        return EngagementStyle.LEANING_IN
    return EngagementStyle.NEUTRAL


def _energy_level(user_texts: list[str]) -> EnergyLevel:
    if not user_texts:
        return EnergyLevel.LOW
    lengths = [len(t) for t in user_texts]
    if all(n < TERSE_REPLY_CHARS for n in lengths):
        return EnergyLevel.LOW
    if len(lengths) >= HIGH_ENERGY_MIN_REPLIES and sum(lengths) / len(lengths) >= LONG_REPLY_CHARS:
        return EnergyLevel.HIGH
    return EnergyLevel.MEDIUM


def _context_depth(user_texts: list[str]) -> int:
    distinct = {t.lower() for t in user_texts if len(t) > SUBSTANTIVE_MIN_CHARS}
    return min(len(distinct), CONTEXT_DEPTH_CAP)


def detect_ideas_request(turns: Sequence[ConversationTurn]) -> bool:
    """True if one of the latest user turns asks for ideas, options or suggestions."""
    user_turns = [t for t in (turns or []) if t.role == TurnRole.USER]
    for turn in user_turns[-IDEA_REQUEST_LOOKBACK:]:
        text = NEGATED_IDEA_PATTERN.sub(" ", turn.text or "")
        if IDEA_REQUEST_PATTERN.search(text):
            return True
    return False


def detect_commitment(turns: Sequence[ConversationTurn]) -> bool:
    """True if the latest user turn settles on something ("I'll go with...")."""
    user_turns = [t for t in (turns or []) if t.role == TurnRole.USER]
    if not user_turns:
        return False
    return bool(COMMITMENT_PATTERN.search(user_turns[-1].text or ""))


def summarize_votes(votes: Mapping[str, Any] | None) -> tuple[int, int]:
    """Returns (positive, negative). 0, None and out-of-range values are not votes."""
    positive = negative = 0
    for value in (votes or {}).values():
        if value == 1:
            positive += 1
        elif value == -1:
            negative += 1
    return positive, negative


def _readiness_bias(
    explicit_ideas_request: bool,
    committed: bool,
    positive_votes: int,
    negative_votes: int,
    suggestion_count: int,
) -> ReadinessBias:
    if explicit_ideas_request:
        return ReadinessBias.SEEKING_OPTIONS
    if positive_votes > 0 or committed:
        return ReadinessBias.DECIDING
    if negative_votes > 0 and suggestion_count > 0:
        return ReadinessBias.SEEKING_OPTIONS
    return ReadinessBias.EXPLORING


def compute_insight_coverage(insights: Iterable[Any] | None) -> InsightCoverage:
    """Coverage per category. Kinds outside the mapping (or unknown) are ignored."""
    kinds: set[InsightKind] = set()
    for insight in insights or []:
        raw = getattr(insight, "kind", None)
        try:
            kinds.add(InsightKind(raw))
        except (TypeError, ValueError):
            logger.debug("Ignoring insight with unknown kind %r", raw)
    return InsightCoverage(
        **{key.value: bool(kinds & accepted) for key, accepted in COVERAGE_KINDS.items()}
    )


def compute_card_readiness(coverage: InsightCoverage, context_depth: int) -> CardReadiness:
    covered = coverage.count()
    if covered >= READY_MIN_COVERAGE and context_depth >= READY_MIN_CONTEXT_DEPTH:
        status = CardReadinessStatus.READY
    elif covered == NEAR_COVERAGE:
        status = CardReadinessStatus.NEAR
    else:
        status = CardReadinessStatus.NOT_READY
    return CardReadiness(status=status, missing_signals=coverage.gaps())


def recommend_focus(
    engagement_style: EngagementStyle,
    context_depth: int,
    coverage: InsightCoverage,
    card_status: CardReadinessStatus,
    readiness_bias: ReadinessBias,
) -> ConversationFocus:
    if engagement_style == EngagementStyle.BLOCKED and context_depth == 0:
        return ConversationFocus.RAPPORT
    if card_status == CardReadinessStatus.READY and readiness_bias == ReadinessBias.DECIDING:
        return ConversationFocus.DECISION
    if card_status == CardReadinessStatus.READY or readiness_bias == ReadinessBias.SEEKING_OPTIONS:
        return ConversationFocus.IDEATION
    if coverage.count() >= NEAR_COVERAGE:
        return ConversationFocus.PATTERN
    return ConversationFocus.STORY


def _build_rubric(
    turns: Sequence[ConversationTurn],
    coverage: InsightCoverage,
    explicit: bool,
    readiness_bias: ReadinessBias,
    now: datetime | None,
) -> ConversationRubric:
    window = _recent(turns)
    user_texts = _user_texts(window)
    engagement = analyze_engagement(window, window_size=RECENT_WINDOW_TURNS)

    engagement_style = _engagement_style(user_texts, engagement.follow_through)
    context_depth = _context_depth(user_texts)
    card_readiness = compute_card_readiness(coverage, context_depth)

    return ConversationRubric(
        engagement_style=engagement_style,
        context_depth=context_depth,
        energy_level=_energy_level(user_texts),
        readiness_bias=readiness_bias,
        explicit_ideas_request=explicit,
        insight_coverage=coverage,
        insight_gaps=coverage.gaps(),
        card_readiness=card_readiness,
        engagement_score=engagement.engagement_score if user_texts else 0.0,
        recommended_focus=recommend_focus(
            engagement_style, context_depth, coverage, card_readiness.status, readiness_bias
        ),
        last_updated_at=_timestamp(now),
    )


def conservative_rubric(now: datetime | None = None) -> ConversationRubric:
    """Blocked, low energy, exploring, nothing covered. The fail-closed default."""
    return ConversationRubric(last_updated_at=_timestamp(now))


def merge_rubrics(
    prev: ConversationRubric | None,
    fresh: ConversationRubric,
) -> ConversationRubric:
    """
    Card-readiness hysteresis. A rubric that was `ready` stays `ready` while every
    category it covered is still covered; a thinner recent window alone does not
    demote it. Losing coverage (insights removed) lets `fresh` through unchanged,
    as does a `prev` whose readiness the fresh coverage and carried depth cannot back.
    """
    if prev is None:
        return fresh
    if prev.card_readiness.status != CardReadinessStatus.READY:
        return fresh
    if fresh.card_readiness.status == CardReadinessStatus.READY:
        return fresh

    lost = [key for key in prev.insight_coverage.covered() if key not in fresh.insight_coverage.covered()]
    if lost:
        logger.debug("Card readiness dropped: coverage lost for %s", [k.value for k in lost])
        return fresh

    # The held rubric must still satisfy the readiness thresholds on its own
    context_depth = max(prev.context_depth, fresh.context_depth)
    if fresh.insight_coverage.count() < READY_MIN_COVERAGE or context_depth < READY_MIN_CONTEXT_DEPTH:
        logger.debug(
            "Not holding ready: %d categories, depth %d",
            fresh.insight_coverage.count(),
            context_depth,
        )
        return fresh

    logger.debug(
        "Holding card readiness at ready (fresh=%s, depth %d→%d)",
        fresh.card_readiness.status.value,
        fresh.context_depth,
        context_depth,
    )
    return fresh.model_copy(
        update={
            "context_depth": context_depth,
            "card_readiness": CardReadiness(
                status=CardReadinessStatus.READY,
                missing_signals=fresh.insight_gaps,
            ),
            "recommended_focus": recommend_focus(
                fresh.engagement_style,
                context_depth,
                fresh.insight_coverage,
                CardReadinessStatus.READY,
                fresh.readiness_bias,
            ),
        }
    )


def score_rubric(
    turns: Sequence[ConversationTurn] | None,
    insights: Sequence[Any] | None,
    votes: Mapping[str, Any] | None,
    suggestion_count: int = 0,
    prev_rubric: ConversationRubric | None = None,
    *,
    now: datetime | None = None,
) -> ConversationRubric:
    """
    Full rubric for one turn: engagement, energy, depth, idea requests,
    readiness bias, insight coverage, card readiness. Merged with
    `prev_rubric` for hysteresis when one is supplied.
    """
    try:
        turns = list(turns or [])
        coverage = compute_insight_coverage(insights)
        positive, negative = summarize_votes(votes)
        explicit = detect_ideas_request(turns)
        bias = _readiness_bias(
            explicit,
            detect_commitment(turns),
            positive,
            negative,
            max(0, suggestion_count or 0),
        )
        fresh = _build_rubric(turns, coverage, explicit, bias, now)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Malformed rubric input; falling back to conservative rubric", exc_info=True)
        return conservative_rubric(now)

    rubric = merge_rubrics(prev_rubric, fresh)
    logger.debug(
        "Rubric: engagement=%s depth=%d energy=%s bias=%s ideas=%s cards=%s",
        rubric.engagement_style.value,
        rubric.context_depth,
        rubric.energy_level.value,
        rubric.readiness_bias.value,
        rubric.explicit_ideas_request,
        rubric.card_readiness.status.value,
    )
    return rubric


def infer_rubric_from_transcript(
    turns: Sequence[ConversationTurn] | None,
    *,
    now: datetime | None = None,
) -> ConversationRubric:
    """
    Transcript-only rubric (voice bootstrap, before insights accumulate).
    Coverage is all false, so card readiness is never `ready`.
    """
    try:
        turns = list(turns or [])
        explicit = detect_ideas_request(turns)
        bias = _readiness_bias(explicit, detect_commitment(turns), 0, 0, 0)
        return _build_rubric(turns, InsightCoverage(), explicit, bias, now)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Malformed transcript; falling back to conservative rubric", exc_info=True)
        return conservative_rubric(now)


def rubric_summary(rubric: ConversationRubric) -> dict[str, Any]:
    """Flat summary for logs/API."""
    return {
        "engagement_style": rubric.engagement_style.value,
        "context_depth": rubric.context_depth,
        "energy_level": rubric.energy_level.value,
        "readiness_bias": rubric.readiness_bias.value,
        "explicit_ideas_request": rubric.explicit_ideas_request,
        "card_readiness": rubric.card_readiness.status.value,
        "insight_gaps": [gap.value for gap in rubric.insight_gaps],
    }
