from discovery_coach.qualification.rubric import (
    compute_card_readiness,
    compute_insight_coverage,
    conservative_rubric,
    detect_ideas_request,
    infer_rubric_from_transcript,
    merge_rubrics,
    rubric_summary,
    score_rubric,
)

__all__ = [
    "compute_card_readiness",
    "compute_insight_coverage",
    "conservative_rubric",
    "detect_ideas_request",
    "infer_rubric_from_transcript",
    "merge_rubrics",
    "rubric_summary",
    "score_rubric",
]
