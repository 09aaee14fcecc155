"""
Phase advisor: funnel state machine.
warmup → story-mining → pattern-mapping → option-seeding → commitment.
One step at a time; the only way back is commitment → pattern-mapping.
Advancing needs positive evidence: no rubric means hold.
"""

import logging
from typing import Any, Sequence

from discovery_coach.state.models import (
    ConversationPhase,
    ConversationRubric,
    ConversationTurn,
    EngagementStyle,
    InsightKind,
    PhaseDecision,
    ReadinessBias,
    TurnRole,
    is_allowed_transition,
)

logger = logging.getLogger("discovery_coach.phases")

MIN_CONTEXT_DEPTH_FOR_PATTERN = 2


def _has_kind(insights: Sequence[Any], kind: InsightKind) -> bool:
    return any(getattr(i, "kind", None) == kind for i in insights)


def _has_user_turn(turns: Sequence[ConversationTurn]) -> bool:
    return any(t.role == TurnRole.USER for t in turns)


def _is_blocked(rubric: ConversationRubric) -> bool:
    return rubric.engagement_style == EngagementStyle.BLOCKED


def _decide(
    current: ConversationPhase,
    turns: Sequence[ConversationTurn],
    insights: Sequence[Any],
    vote_count: int,
    rubric: ConversationRubric | None,
) -> tuple[ConversationPhase, bool, str]:
    """Returns (next_phase, seed_teaser, reason). First matching rule wins."""
    if current == ConversationPhase.WARMUP:
        if _has_user_turn(turns):
            return ConversationPhase.STORY_MINING, False, "User has started responding; move into story mining."
        return current, False, "Awaiting initial user response; stay in warmup."

    if rubric is None:
        return current, False, "No rubric yet; hold phase until there is signal."

    if current == ConversationPhase.STORY_MINING:
        has_interest = _has_kind(insights, InsightKind.INTEREST) or rubric.insight_coverage.interests
        has_strength = _has_kind(insights, InsightKind.STRENGTH) or rubric.insight_coverage.aptitudes
        if has_interest and has_strength and rubric.context_depth >= MIN_CONTEXT_DEPTH_FOR_PATTERN:
            return (
                ConversationPhase.PATTERN_MAPPING,
                False,
                "Insights cover interests and strengths with enough depth; move to pattern mapping.",
            )
        if _is_blocked(rubric):
            return current, True, "Opening has stalled; seed a teaser card instead of more open questions."
        return current, False, "Stay in story mining until interests and strengths are surfaced."

    if current == ConversationPhase.PATTERN_MAPPING:
        if rubric.explicit_ideas_request or rubric.readiness_bias == ReadinessBias.SEEKING_OPTIONS:
            return ConversationPhase.OPTION_SEEDING, False, "They're seeking options; progress to option seeding."
        return current, False, "Continue mapping patterns across what they've shared."

    if current == ConversationPhase.OPTION_SEEDING:
        if vote_count > 0 and rubric.readiness_bias == ReadinessBias.DECIDING:
            return ConversationPhase.COMMITMENT, False, "Votes on cards and readiness to decide; shift to commitment."
        return current, False, "Stay in option seeding to gather reactions and refine."

    if current == ConversationPhase.COMMITMENT:
        if _is_blocked(rubric):
            return (
                ConversationPhase.PATTERN_MAPPING,
                False,
                "Commitment stalled; drop back to pattern mapping to regather context.",
            )
        return current, False, "Remain in commitment to coach next steps."

    return current, False, "No rule matched; hold."


def recommend_conversation_phase(
    current_phase: ConversationPhase | str,
    turns: Sequence[ConversationTurn] | None = None,
    insights: Sequence[Any] | None = None,
    suggestion_count: int = 0,
    vote_count: int = 0,
    rubric: ConversationRubric | None = None,
) -> PhaseDecision:
    """
    Next funnel phase + whether to seed a teaser card. suggestion_count is only logged.
    Accepts phase values as strings; an unrecognised phase restarts at warmup.
    """
    try:
        current_phase = ConversationPhase(current_phase)
    except (TypeError, ValueError):
        logger.warning("Unrecognised phase %r; restarting at warmup", current_phase)
        return PhaseDecision(
            next_phase=ConversationPhase.WARMUP,
            rationale=["Unrecognised phase; restart at warmup."],
        )

    next_phase, seed_teaser, reason = _decide(
        current_phase,
        list(turns or []),
        list(insights or []),
        max(0, vote_count or 0),
        rubric,
    )
    if not is_allowed_transition(current_phase, next_phase):
        logger.warning("Refusing transition %s → %s", current_phase.value, next_phase.value)
        next_phase, seed_teaser, reason = current_phase, False, "Transition not allowed; hold."

    logger.debug(
        "Phase %s → %s (teaser=%s, suggestions=%d, votes=%d): %s",
        current_phase.value,
        next_phase.value,
        seed_teaser,
        suggestion_count,
        vote_count,
        reason,
    )
    return PhaseDecision(
        next_phase=next_phase,
        should_seed_teaser_card=seed_teaser,
        rationale=[reason],
    )
