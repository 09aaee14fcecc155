"""Request/response shapes for the conversation engine API."""

from typing import Any

from pydantic import BaseModel, Field

from discovery_coach.state.models import (
    CardPromptTone,
    ConversationFocus,
    ConversationPhase,
    ConversationRubric,
    InsightSnapshot,
    PhaseDecision,
    TurnPlan,
)


class IncomingTurn(BaseModel):
    """Loose on purpose: unknown roles and blank text are dropped by sanitization, not rejected."""

    role: str
    text: str = ""


class IncomingInsight(BaseModel):
    kind: str
    value: str = ""


class RubricRequest(BaseModel):
    turns: list[IncomingTurn] = Field(default_factory=list)
    insights: list[IncomingInsight] = Field(default_factory=list)
    votes: dict[str, Any] = Field(default_factory=dict)
    suggestion_count: int = Field(default=0, ge=0)
    prev_rubric: ConversationRubric | None = None


class RubricResponse(BaseModel):
    rubric: ConversationRubric
    should_generate_suggestions: bool = False


class PhaseRequest(BaseModel):
    current_phase: ConversationPhase | None = None
    focus: ConversationFocus | None = None  # used when current_phase is absent
    turns: list[IncomingTurn] = Field(default_factory=list)
    insights: list[IncomingInsight] = Field(default_factory=list)
    suggestion_count: int = Field(default=0, ge=0)
    vote_count: int = Field(default=0, ge=0)
    rubric: ConversationRubric | None = None


class PhaseResponse(BaseModel):
    current_phase: ConversationPhase
    decision: PhaseDecision


class InstructionsRequest(BaseModel):
    phase: ConversationPhase
    rubric: ConversationRubric | None = None
    base_guidance: list[str] = Field(default_factory=list)
    seed_teaser_card: bool = False
    allow_card_prompt: bool = True
    card_prompt_tone: CardPromptTone = CardPromptTone.NORMAL


class InstructionsResponse(BaseModel):
    instructions: str | None = None


class TurnRequest(BaseModel):
    turns: list[IncomingTurn] = Field(..., min_length=1)
    insights: list[IncomingInsight] = Field(default_factory=list)
    votes: dict[str, Any] = Field(default_factory=dict)
    suggestion_count: int = Field(default=0, ge=0)
    prev_rubric: ConversationRubric | None = None
    current_phase: ConversationPhase | None = None
    focus: ConversationFocus | None = None
    base_guidance: list[str] = Field(default_factory=list)
    allow_card_prompt: bool = True
    card_prompt_tone: CardPromptTone = CardPromptTone.NORMAL


class TurnResponse(TurnPlan):
    should_generate_suggestions: bool = False


class VoiceBootstrapRequest(BaseModel):
    turns: list[IncomingTurn] = Field(default_factory=list)
    current_phase: ConversationPhase | None = None
    focus: ConversationFocus | None = None
    base_guidance: list[str] = Field(default_factory=list)


class InsightExtractRequest(BaseModel):
    turns: list[IncomingTurn] = Field(default_factory=list)


class InsightExtractResponse(BaseModel):
    insights: list[InsightSnapshot] = Field(default_factory=list)
