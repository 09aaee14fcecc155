"""
Conversation engine API. Sanitize at the boundary, then hand off to the pure engine.
No decision logic lives here; nothing is stored between requests.
"""

import logging

from fastapi import APIRouter, HTTPException

from discovery_coach import config
from discovery_coach.live.instructions import build_realtime_instructions
from discovery_coach.nlp.insights import extract_conversation_insights
from discovery_coach.qualification.rubric import score_rubric
from discovery_coach.schemas import (
    InsightExtractRequest,
    InsightExtractResponse,
    InstructionsRequest,
    InstructionsResponse,
    PhaseRequest,
    PhaseResponse,
    RubricRequest,
    RubricResponse,
    TurnRequest,
    TurnResponse,
    VoiceBootstrapRequest,
)
from discovery_coach.state.phases import recommend_conversation_phase
from discovery_coach.state.pipeline import (
    bootstrap_voice_session,
    plan_turn,
    resolve_phase,
    should_generate_suggestions,
)
from discovery_coach.workers.normalization import sanitize_insights, sanitize_turns, sanitize_votes

logger = logging.getLogger("discovery_coach.api")

router = APIRouter(prefix="/conversation", tags=["conversation"])


@router.post("/rubric", response_model=RubricResponse)
def conversation_rubric(body: RubricRequest) -> RubricResponse:
    """Score the rubric for a transcript. Body: turns, insights, votes, suggestion_count, prev_rubric."""
    turns = sanitize_turns(body.turns, limit=config.MAX_TURNS)
    if not turns:
        raise HTTPException(status_code=400, detail="turns required")
    insights = sanitize_insights(body.insights)
    logger.info(
        "Evaluating rubric: %d turns, %d insights, %d suggestions",
        len(turns),
        len(insights),
        body.suggestion_count,
    )
    rubric = score_rubric(
        turns,
        insights,
        sanitize_votes(body.votes),
        body.suggestion_count,
        body.prev_rubric,
    )
    return RubricResponse(rubric=rubric, should_generate_suggestions=should_generate_suggestions(rubric))


@router.post("/phase", response_model=PhaseResponse)
def conversation_phase(body: PhaseRequest) -> PhaseResponse:
    """Recommend the next funnel phase. No rubric → phase holds (past warmup)."""
    current = resolve_phase(body.current_phase, body.focus)
    decision = recommend_conversation_phase(
        current,
        sanitize_turns(body.turns, limit=config.MAX_TURNS),
        sanitize_insights(body.insights),
        suggestion_count=body.suggestion_count,
        vote_count=body.vote_count,
        rubric=body.rubric,
    )
    return PhaseResponse(current_phase=current, decision=decision)


@router.post("/instructions", response_model=InstructionsResponse)
def conversation_instructions(body: InstructionsRequest) -> InstructionsResponse:
    """Compile guidance for the generation call from phase, rubric and flags."""
    instructions = build_realtime_instructions(
        body.phase,
        body.rubric,
        base_guidance=body.base_guidance,
        seed_teaser_card=body.seed_teaser_card,
        allow_card_prompt=body.allow_card_prompt,
        card_prompt_tone=body.card_prompt_tone,
    )
    return InstructionsResponse(instructions=instructions)


@router.post("/turn", response_model=TurnResponse)
def conversation_turn(body: TurnRequest) -> TurnResponse:
    """
    One inbound user turn: rubric → phase → guidance. The caller embeds `guidance`
    in the generation call's system instructions and keeps `rubric` + `phase` for next time.
    """
    turns = sanitize_turns(body.turns, limit=config.MAX_TURNS)
    if not turns:
        raise HTTPException(status_code=400, detail="turns required")
    plan = plan_turn(
        turns,
        sanitize_insights(body.insights),
        sanitize_votes(body.votes),
        suggestion_count=body.suggestion_count,
        prev_rubric=body.prev_rubric,
        current_phase=body.current_phase,
        focus=body.focus,
        base_guidance=body.base_guidance,
        allow_card_prompt=body.allow_card_prompt,
        card_prompt_tone=body.card_prompt_tone,
    )
    return TurnResponse(
        **plan.model_dump(),
        should_generate_suggestions=should_generate_suggestions(plan.rubric),
    )


@router.post("/voice/bootstrap", response_model=TurnResponse)
def conversation_voice_bootstrap(body: VoiceBootstrapRequest) -> TurnResponse:
    """Pick the opening phase and instructions before a microphone session starts."""
    plan = bootstrap_voice_session(
        sanitize_turns(body.turns, limit=config.MAX_TURNS),
        current_phase=body.current_phase,
        focus=body.focus,
        base_guidance=body.base_guidance,
    )
    return TurnResponse(**plan.model_dump(), should_generate_suggestions=False)


@router.post("/insights/extract", response_model=InsightExtractResponse)
def conversation_insights_extract(body: InsightExtractRequest) -> InsightExtractResponse:
    """Heuristic insight candidates from the user's own statements."""
    turns = sanitize_turns(body.turns, limit=config.MAX_TURNS)
    return InsightExtractResponse(insights=extract_conversation_insights(turns))
