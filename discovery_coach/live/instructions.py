"""
Guidance compiler for the language-generation call.
(phase, rubric, flags) → one text block of directives, blank-line separated.

Deterministic and idempotent by content: every directive goes through
append_if_absent, so feeding the output back in as base guidance changes nothing.
"""

import logging
from typing import Iterable

from discovery_coach.state.models import (
    CardPromptTone,
    CardReadinessStatus,
    ConversationPhase,
    ConversationRubric,
    CoverageKey,
    EngagementStyle,
    ReadinessBias,
)

logger = logging.getLogger("discovery_coach.instructions")

STYLE_DIRECTIVES: list[str] = [
    "Keep replies short and conversational: two or three sentences, one question at a time.",
    "Reflect their own words back; never invent details they haven't shared.",
]

PHASE_TIPS: dict[ConversationPhase, str] = {
    ConversationPhase.WARMUP: (
        "Stay in warmup mode: keep the opener short, ask for their preferred name, then use a single open "
        "question like \"What's been keeping you busy when you're not in school or work?\". Deliver the "
        "greeting once and wait for the user to reply before continuing."
    ),
    ConversationPhase.STORY_MINING: (
        "Focus on story mining. Ask short, open follow-ups about what they build, notice, and struggle with. "
        "Avoid pitching ideas yet."
    ),
    ConversationPhase.PATTERN_MAPPING: (
        "Start connecting threads they've shared. Reflect themes in their own language before offering ideas. "
        "Ask longer questions that link their interests and strengths."
    ),
    ConversationPhase.OPTION_SEEDING: (
        "Blend context with exploratory options. Offer ideas casually and invite reactions, always grounding "
        "each option in their words."
    ),
    ConversationPhase.COMMITMENT: (
        "Help them pick experiments or next steps. Nudge them to choose a pathway and define a tiny action "
        "in the next week."
    ),
}

LOW_ENGAGEMENT_DIRECTIVE = "User energy seems low. Keep prompts lightweight and specific to coax a fresh detail."
NAME_STRENGTH_DIRECTIVE = (
    "Name one strength you've inferred from what they've shared, say it explicitly, and ask whether it rings true."
)
EXPERIMENT_DIRECTIVE = "They are open to ideas - frame suggestions as experiments and ask what lands or misses."
FIRM_UP_DIRECTIVE = "They are edging toward a decision. Firm up their next steps using their own language."

HOLD_OFF_DIRECTIVE = "Hold off on ideas for now. Ask follow-ups to fill in what's still missing."
NO_PROMISE_DIRECTIVE = (
    "Ideas may be close, but do not promise them this turn. Keep the tone warm and keep exploring."
)
FALLBACK_DIRECTIVE = (
    "Some cards are going out on thin context: frame these cards as rough starting points, not verdicts, "
    "and name the gaps you're still chasing."
)
CARDS_READY_DIRECTIVE = "Suggestion cards are ready. Preview them briefly in one line and invite a reaction."
NO_TITLES_DIRECTIVE = "Do not enumerate card titles; the cards render on screen."
SCANNABLE_DIRECTIVE = "Keep any preview scannable: two or three short bullets at most."
LANE_MIX_DIRECTIVE = (
    "Surface three pathways via the career cards: one core fit, one adjacent stretch and one unexpected option. "
    "Keep each suggestion grounded in something they said."
)
TEASER_DIRECTIVE = (
    "Offer one quick teaser idea (adjacent or unexpected) and explicitly ask what's off about it to spark engagement."
)

# One follow-up per missing coverage category
GAP_FOLLOW_UPS: dict[CoverageKey, str] = {
    CoverageKey.INTERESTS: "Ask what they get absorbed in: what they lose track of time doing, or would do unpaid.",
    CoverageKey.APTITUDES: "Ask what people come to them for, or what feels easy to them but hard for others.",
    CoverageKey.GOALS: "Ask what they hope will be different for them a year from now.",
    CoverageKey.CONSTRAINTS: (
        "Ask what they want to avoid and which limits (time, money, location) they're working within."
    ),
}
DEPTH_FOLLOW_UP = "Ask for one concrete, recent example so the story has real detail."


def append_if_absent(lines: list[str], directive: str) -> bool:
    """Append unless an existing line already contains it (case-insensitive). Returns True if appended."""
    needle = directive.strip().lower()
    if not needle:
        return False
    if any(needle in line.lower() for line in lines):
        return False
    lines.append(directive.strip())
    return True


def _gap_follow_ups(gaps: Iterable[CoverageKey]) -> list[str]:
    prompts = [GAP_FOLLOW_UPS[gap] for gap in gaps if gap in GAP_FOLLOW_UPS]
    return prompts or [DEPTH_FOLLOW_UP]


def _card_directives(
    rubric: ConversationRubric,
    allow_card_prompt: bool,
    tone: CardPromptTone,
) -> list[str]:
    ready = rubric.card_readiness.status == CardReadinessStatus.READY
    follow_ups = _gap_follow_ups(rubric.insight_gaps)

    if not allow_card_prompt:
        if not ready:
            return [HOLD_OFF_DIRECTIVE, *follow_ups]
        return [NO_PROMISE_DIRECTIVE]
    if tone == CardPromptTone.FALLBACK and not ready:
        return [FALLBACK_DIRECTIVE, NO_TITLES_DIRECTIVE, SCANNABLE_DIRECTIVE, *follow_ups]
    if ready:
        return [CARDS_READY_DIRECTIVE, LANE_MIX_DIRECTIVE, NO_TITLES_DIRECTIVE, SCANNABLE_DIRECTIVE]
    return [HOLD_OFF_DIRECTIVE, *follow_ups]


def _rubric_nudges(rubric: ConversationRubric) -> list[str]:
    nudges: list[str] = []
    if rubric.engagement_style == EngagementStyle.BLOCKED:
        nudges.append(LOW_ENGAGEMENT_DIRECTIVE)
    if not rubric.insight_coverage.aptitudes:
        nudges.append(NAME_STRENGTH_DIRECTIVE)
    if rubric.explicit_ideas_request or rubric.readiness_bias == ReadinessBias.SEEKING_OPTIONS:
        nudges.append(EXPERIMENT_DIRECTIVE)
    if rubric.readiness_bias == ReadinessBias.DECIDING:
        nudges.append(FIRM_UP_DIRECTIVE)
    return nudges


def build_realtime_instructions(
    phase: ConversationPhase | str,
    rubric: ConversationRubric | None = None,
    base_guidance: Iterable[str] | None = None,
    seed_teaser_card: bool = False,
    allow_card_prompt: bool = True,
    card_prompt_tone: CardPromptTone | str = CardPromptTone.NORMAL,
) -> str:
    """
    Compose guidance in a fixed order: base guidance, standing style rules,
    phase tip, rubric nudges, card gating, teaser. The standing style rules are
    always present, so the result is never empty.
    Without a rubric, the rubric-driven steps are skipped.
    """
    try:
        phase = ConversationPhase(phase)
    except ValueError:
        logger.warning("Unknown phase %r; compiling without a phase tip", phase)
        phase = None
    try:
        tone = CardPromptTone(card_prompt_tone)
    except ValueError:
        tone = CardPromptTone.NORMAL

    if isinstance(base_guidance, str):
        base_guidance = [base_guidance]
    lines: list[str] = []
    for line in base_guidance or []:
        if isinstance(line, str) and line.strip():
            lines.append(line.strip())

    for directive in STYLE_DIRECTIVES:
        append_if_absent(lines, directive)

    if phase is not None:
        append_if_absent(lines, PHASE_TIPS[phase])

    if rubric is not None:
        for directive in _rubric_nudges(rubric):
            append_if_absent(lines, directive)
        for directive in _card_directives(rubric, allow_card_prompt, tone):
            append_if_absent(lines, directive)

    if seed_teaser_card:
        append_if_absent(lines, TEASER_DIRECTIVE)

    return "\n\n".join(lines)
