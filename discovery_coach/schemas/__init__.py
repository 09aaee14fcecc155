from .payloads import (
    IncomingInsight,
    IncomingTurn,
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

__all__ = [
    "IncomingInsight",
    "IncomingTurn",
    "InsightExtractRequest",
    "InsightExtractResponse",
    "InstructionsRequest",
    "InstructionsResponse",
    "PhaseRequest",
    "PhaseResponse",
    "RubricRequest",
    "RubricResponse",
    "TurnRequest",
    "TurnResponse",
    "VoiceBootstrapRequest",
]
