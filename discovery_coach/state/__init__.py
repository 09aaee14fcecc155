from discovery_coach.state.models import (
    CardPromptTone,
    CardReadiness,
    CardReadinessStatus,
    ConversationFocus,
    ConversationPhase,
    ConversationRubric,
    ConversationTurn,
    CoverageKey,
    EnergyLevel,
    EngagementStyle,
    InsightCoverage,
    InsightKind,
    InsightSnapshot,
    PhaseDecision,
    ReadinessBias,
    TurnPlan,
    TurnRole,
    focus_for_phase,
    is_allowed_transition,
    phase_for_focus,
    phase_index,
)
from discovery_coach.state.phases import recommend_conversation_phase

__all__ = [
    "CardPromptTone",
    "CardReadiness",
    "CardReadinessStatus",
    "ConversationFocus",
    "ConversationPhase",
    "ConversationRubric",
    "ConversationTurn",
    "CoverageKey",
    "EnergyLevel",
    "EngagementStyle",
    "InsightCoverage",
    "InsightKind",
    "InsightSnapshot",
    "PhaseDecision",
    "ReadinessBias",
    "TurnPlan",
    "TurnRole",
    "focus_for_phase",
    "is_allowed_transition",
    "phase_for_focus",
    "phase_index",
    "recommend_conversation_phase",
]
