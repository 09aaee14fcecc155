"""
Signal model: turns, insights, rubric snapshot, funnel phase.
No behaviour beyond small lookups; every snapshot is rebuilt per call.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class InsightKind(str, Enum):
    INTEREST = "interest"
    STRENGTH = "strength"
    CONSTRAINT = "constraint"
    GOAL = "goal"
    FRUSTRATION = "frustration"
    HOPE = "hope"
    BOUNDARY = "boundary"
    HIGHLIGHT = "highlight"


class ConversationPhase(str, Enum):
    """Funnel position. Declaration order is funnel order."""

    WARMUP = "warmup"
    STORY_MINING = "story-mining"
    PATTERN_MAPPING = "pattern-mapping"
    OPTION_SEEDING = "option-seeding"
    COMMITMENT = "commitment"


class ConversationFocus(str, Enum):
    RAPPORT = "rapport"
    STORY = "story"
    PATTERN = "pattern"
    IDEATION = "ideation"
    DECISION = "decision"


class EngagementStyle(str, Enum):
    LEANING_IN = "leaning-in"
    NEUTRAL = "neutral"
    BLOCKED = "blocked"


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ReadinessBias(str, Enum):
    EXPLORING = "exploring"
    SEEKING_OPTIONS = "seeking-options"
    DECIDING = "deciding"


class CoverageKey(str, Enum):
    """Insight coverage categories, in gap-reporting order."""

    INTERESTS = "interests"
    APTITUDES = "aptitudes"
    GOALS = "goals"
    CONSTRAINTS = "constraints"


class CardReadinessStatus(str, Enum):
    NOT_READY = "not-ready"
    NEAR = "near"
    READY = "ready"


class CardPromptTone(str, Enum):
    NORMAL = "normal"
    FALLBACK = "fallback"


PHASE_ORDER: list[ConversationPhase] = list(ConversationPhase)

FOCUS_TO_PHASE: dict[ConversationFocus, ConversationPhase] = {
    ConversationFocus.RAPPORT: ConversationPhase.WARMUP,
    ConversationFocus.STORY: ConversationPhase.STORY_MINING,
    ConversationFocus.PATTERN: ConversationPhase.PATTERN_MAPPING,
    ConversationFocus.IDEATION: ConversationPhase.OPTION_SEEDING,
    ConversationFocus.DECISION: ConversationPhase.COMMITMENT,
}
PHASE_TO_FOCUS: dict[ConversationPhase, ConversationFocus] = {
    phase: focus for focus, phase in FOCUS_TO_PHASE.items()
}


def phase_index(phase: ConversationPhase) -> int:
    return PHASE_ORDER.index(phase)


# Hold, one step forward, or the single regression commitment → pattern-mapping
ALLOWED_TRANSITIONS: frozenset[tuple[ConversationPhase, ConversationPhase]] = frozenset(
    [(phase, phase) for phase in PHASE_ORDER]
    + list(zip(PHASE_ORDER, PHASE_ORDER[1:]))
    + [(ConversationPhase.COMMITMENT, ConversationPhase.PATTERN_MAPPING)]
)


def is_allowed_transition(current: ConversationPhase, nxt: ConversationPhase) -> bool:
    return (current, nxt) in ALLOWED_TRANSITIONS


def phase_for_focus(focus: ConversationFocus) -> ConversationPhase:
    return FOCUS_TO_PHASE[focus]


def focus_for_phase(phase: ConversationPhase) -> ConversationFocus:
    return PHASE_TO_FOCUS[phase]


class ConversationTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: TurnRole
    text: str = ""


class InsightSnapshot(BaseModel):
    """One atomic fact inferred about the user."""

    model_config = ConfigDict(frozen=True)

    kind: InsightKind
    value: str


class InsightCoverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    interests: bool = False
    aptitudes: bool = False
    goals: bool = False
    constraints: bool = False

    def covered(self) -> list[CoverageKey]:
        return [key for key in CoverageKey if getattr(self, key.value)]

    def gaps(self) -> list[CoverageKey]:
        return [key for key in CoverageKey if not getattr(self, key.value)]

    def count(self) -> int:
        return len(self.covered())


class CardReadiness(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: CardReadinessStatus = CardReadinessStatus.NOT_READY
    missing_signals: list[CoverageKey] = Field(default_factory=list)


class ConversationRubric(BaseModel):
    """
    Turn-indexed snapshot of behavioural signals. Frozen: a new rubric is
    built every call (see qualification.rubric.merge_rubrics for hysteresis).
    """

    model_config = ConfigDict(frozen=True)

    engagement_style: EngagementStyle = EngagementStyle.BLOCKED
    context_depth: int = Field(default=0, ge=0)
    energy_level: EnergyLevel = EnergyLevel.LOW
    readiness_bias: ReadinessBias = ReadinessBias.EXPLORING
    explicit_ideas_request: bool = False
    insight_coverage: InsightCoverage = Field(default_factory=InsightCoverage)
    insight_gaps: list[CoverageKey] = Field(default_factory=lambda: list(CoverageKey))
    card_readiness: CardReadiness = Field(
        default_factory=lambda: CardReadiness(missing_signals=list(CoverageKey))
    )
    engagement_score: float = Field(default=0.0, ge=0.0, le=1.0)
    recommended_focus: ConversationFocus = ConversationFocus.RAPPORT
    last_updated_at: str | None = None  # ISO


class PhaseDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    next_phase: ConversationPhase
    should_seed_teaser_card: bool = False
    rationale: list[str] = Field(default_factory=list)


class TurnPlan(BaseModel):
    """Everything a dialogue-turn handler needs from one pass of the engine."""

    model_config = ConfigDict(frozen=True)

    phase: ConversationPhase
    rubric: ConversationRubric
    decision: PhaseDecision
    guidance: str | None = None
