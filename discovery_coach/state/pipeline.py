"""
Turn pipeline: rubric → phase → guidance, once per inbound user turn.
Pure: the caller threads the previous rubric and phase through every call.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence

from discovery_coach.live.instructions import build_realtime_instructions
from discovery_coach.qualification.rubric import (
    infer_rubric_from_transcript,
    rubric_summary,
    score_rubric,
    summarize_votes,
)
from discovery_coach.state.models import (
    CardPromptTone,
    CardReadinessStatus,
    ConversationFocus,
    ConversationPhase,
    ConversationRubric,
    ConversationTurn,
    TurnPlan,
    phase_for_focus,
)
from discovery_coach.state.phases import recommend_conversation_phase

logger = logging.getLogger("discovery_coach.pipeline")


def resolve_phase(
    current_phase: ConversationPhase | None = None,
    focus: ConversationFocus | None = None,
) -> ConversationPhase:
    """Explicit phase wins, then the phase for the caller's focus, then warmup."""
    if current_phase is not None:
        return ConversationPhase(current_phase)
    if focus is not None:
        return phase_for_focus(ConversationFocus(focus))
    return ConversationPhase.WARMUP


def should_generate_suggestions(rubric: ConversationRubric | None) -> bool:
    """Gate for the suggestion-card generator: only when cards are ready."""
    return rubric is not None and rubric.card_readiness.status == CardReadinessStatus.READY


def plan_turn(
    turns: Sequence[ConversationTurn],
    insights: Sequence[Any],
    votes: Mapping[str, Any] | None,
    suggestion_count: int = 0,
    prev_rubric: ConversationRubric | None = None,
    current_phase: ConversationPhase | None = None,
    focus: ConversationFocus | None = None,
    base_guidance: Iterable[str] | None = None,
    allow_card_prompt: bool = True,
    card_prompt_tone: CardPromptTone = CardPromptTone.NORMAL,
    *,
    now: datetime | None = None,
) -> TurnPlan:
    """
    Dialogue-turn handler sequence. Guidance is compiled for the phase the
    conversation moves into, with the teaser flag from the phase decision.
    """
    phase = resolve_phase(current_phase, focus)
    rubric = score_rubric(turns, insights, votes, suggestion_count, prev_rubric, now=now)
    positive, negative = summarize_votes(votes)
    decision = recommend_conversation_phase(
        phase,
        turns,
        insights,
        suggestion_count=suggestion_count,
        vote_count=positive + negative,
        rubric=rubric,
    )
    guidance = build_realtime_instructions(
        decision.next_phase,
        rubric,
        base_guidance=base_guidance,
        seed_teaser_card=decision.should_seed_teaser_card,
        allow_card_prompt=allow_card_prompt,
        card_prompt_tone=card_prompt_tone,
    )
    logger.info(
        "Turn planned: %s → %s teaser=%s rubric=%s",
        phase.value,
        decision.next_phase.value,
        decision.should_seed_teaser_card,
        rubric_summary(rubric),
    )
    return TurnPlan(phase=decision.next_phase, rubric=rubric, decision=decision, guidance=guidance)


def bootstrap_voice_session(
    turns: Sequence[ConversationTurn] | None,
    current_phase: ConversationPhase | None = None,
    focus: ConversationFocus | None = None,
    base_guidance: Iterable[str] | None = None,
    *,
    now: datetime | None = None,
) -> TurnPlan:
    """
    Voice/realtime bootstrap before the microphone opens: transcript-only
    rubric, no insights or votes, and cards are never prompted.
    """
    turns = list(turns or [])
    phase = resolve_phase(current_phase, focus)
    rubric = infer_rubric_from_transcript(turns, now=now)
    decision = recommend_conversation_phase(phase, turns, [], rubric=rubric)
    guidance = build_realtime_instructions(
        decision.next_phase,
        rubric,
        base_guidance=base_guidance,
        seed_teaser_card=decision.should_seed_teaser_card,
        allow_card_prompt=False,
    )
    logger.info(
        "Voice session bootstrapped: %s → %s (%d turns)",
        phase.value,
        decision.next_phase.value,
        len(turns),
    )
    return TurnPlan(phase=decision.next_phase, rubric=rubric, decision=decision, guidance=guidance)
