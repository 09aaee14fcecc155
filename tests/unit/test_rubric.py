"""Unit tests for discovery_coach.qualification.rubric: scoring, inference, hysteresis."""

import pytest

from discovery_coach.qualification.rubric import (
    compute_card_readiness,
    compute_insight_coverage,
    conservative_rubric,
    detect_commitment,
    detect_ideas_request,
    infer_rubric_from_transcript,
    is_substantive,
    merge_rubrics,
    rubric_summary,
    score_rubric,
    summarize_votes,
)
from discovery_coach.state.models import (
    CardReadinessStatus,
    ConversationFocus,
    CoverageKey,
    EnergyLevel,
    EngagementStyle,
    InsightCoverage,
    ReadinessBias,
)
from tests.conftest import FIXED_NOW, _assistant, _insight, _make_rubric, _user


# ===================================================================
# Transcript-only inference
# ===================================================================


class TestInferRubricFromTranscript:
    def test_assistant_only_is_blocked_and_low(self):
        rubric = infer_rubric_from_transcript([_assistant("Hi there! What should I call you?")])
        assert rubric.engagement_style == EngagementStyle.BLOCKED
        assert rubric.energy_level == EnergyLevel.LOW
        assert rubric.context_depth == 0
        assert rubric.recommended_focus == ConversationFocus.RAPPORT

    def test_empty_transcript_is_conservative(self):
        rubric = infer_rubric_from_transcript([])
        assert rubric.engagement_style == EngagementStyle.BLOCKED
        assert rubric.readiness_bias == ReadinessBias.EXPLORING
        assert rubric.engagement_score == 0.0

    def test_never_ready_without_insights(self, engaged_transcript):
        rubric = infer_rubric_from_transcript(engaged_transcript)
        assert rubric.card_readiness.status == CardReadinessStatus.NOT_READY
        assert rubric.insight_gaps == list(CoverageKey)

    def test_options_request_sets_seeking_options(self):
        rubric = infer_rubric_from_transcript([_user("Could you share some options or ideas?")])
        assert rubric.explicit_ideas_request is True
        assert rubric.readiness_bias == ReadinessBias.SEEKING_OPTIONS

    def test_timestamp_is_iso_utc(self):
        rubric = infer_rubric_from_transcript([], now=FIXED_NOW)
        assert rubric.last_updated_at == "2026-01-01T09:30:00Z"


# ===================================================================
# Engagement, energy, depth
# ===================================================================


class TestEngagementSignals:
    def test_engaged_transcript_leans_in(self, engaged_transcript):
        rubric = score_rubric(engaged_transcript, [], {})
        assert rubric.engagement_style == EngagementStyle.LEANING_IN
        assert rubric.context_depth == 3
        assert rubric.energy_level == EnergyLevel.MEDIUM
        assert 0.0 < rubric.engagement_score <= 1.0

    def test_terse_replies_are_blocked(self, terse_transcript):
        rubric = score_rubric(terse_transcript, [], {})
        assert rubric.engagement_style == EngagementStyle.BLOCKED
        assert rubric.energy_level == EnergyLevel.LOW
        assert rubric.context_depth == 0

    def test_fillers_do_not_count_as_substance(self):
        assert is_substantive("um, like, yeah, you know, kinda") is False
        assert is_substantive("I spend most weekends repairing old synthesizers") is True

    def test_context_depth_caps_at_three(self):
        turns = [_user(f"Here is a longer story number {i} about the projects I run") for i in range(6)]
        assert score_rubric(turns, [], {}).context_depth == 3

    def test_repeated_reply_counts_once_for_depth(self):
        turns = [_user("I keep fixing my friends' laptops on weekends")] * 3
        assert score_rubric(turns, [], {}).context_depth == 1

    def test_long_replies_raise_energy(self):
        long_text = "I get lost for hours " * 8
        turns = [_user(long_text + "a"), _user(long_text + "b")]
        assert score_rubric(turns, [], {}).energy_level == EnergyLevel.HIGH


# ===================================================================
# Idea requests, votes, readiness bias
# ===================================================================


class TestReadinessBias:
    def test_no_idea_is_not_a_request(self):
        assert detect_ideas_request([_user("Honestly I have no idea")]) is False

    @pytest.mark.parametrize(
        "text",
        [
            "I honestly don't have any ideas right now, sorry.",
            "I haven't got any ideas yet",
            "I'm not really sure about any options",
            "Not a clue, to be honest",
        ],
    )
    def test_shrugs_are_not_requests(self, text):
        rubric = infer_rubric_from_transcript([_user(text)])
        assert rubric.explicit_ideas_request is False
        assert rubric.readiness_bias == ReadinessBias.EXPLORING

    def test_shrug_followed_by_a_request_still_counts(self):
        assert detect_ideas_request([_user("I don't have any ideas, could you suggest some?")]) is True

    def test_only_latest_user_turns_are_checked(self):
        turns = [
            _user("Do you have any ideas for me?"),
            _user("Actually I mostly like drawing"),
            _user("And I help at my aunt's bakery"),
        ]
        assert detect_ideas_request(turns) is False

    def test_commitment_language(self):
        assert detect_commitment([_user("Okay, I'll go with the studio one")]) is True
        assert detect_commitment([_user("Maybe, not sure yet")]) is False

    def test_commitment_sets_deciding(self):
        rubric = score_rubric([_user("Okay, I'll go with the studio one")], [], {})
        assert rubric.readiness_bias == ReadinessBias.DECIDING

    def test_positive_vote_sets_deciding(self):
        rubric = score_rubric([_user("That second card looks pretty good")], [], {"card-1": 1})
        assert rubric.readiness_bias == ReadinessBias.DECIDING

    def test_negative_votes_after_suggestions_seek_options(self):
        rubric = score_rubric([_user("Neither of those feels right")], [], {"card-1": -1}, suggestion_count=2)
        assert rubric.readiness_bias == ReadinessBias.SEEKING_OPTIONS

    def test_negative_votes_without_suggestions_keep_exploring(self):
        rubric = score_rubric([_user("Neither of those feels right")], [], {"card-1": -1})
        assert rubric.readiness_bias == ReadinessBias.EXPLORING

    def test_explicit_request_beats_votes(self):
        rubric = score_rubric([_user("Any other options?")], [], {"card-1": 1})
        assert rubric.readiness_bias == ReadinessBias.SEEKING_OPTIONS

    def test_summarize_votes_ignores_neutral_and_junk(self):
        assert summarize_votes({"a": 1, "b": -1, "c": 0, "d": 1, "e": None}) == (2, 1)
        assert summarize_votes(None) == (0, 0)


# ===================================================================
# Coverage and card readiness
# ===================================================================


class TestCardReadiness:
    def test_coverage_mapping(self):
        coverage = compute_insight_coverage([
            _insight("hope", "run a studio"),
            _insight("boundary", "no night shifts"),
            _insight("highlight", "won a hackathon"),
        ])
        assert coverage.covered() == [CoverageKey.GOALS, CoverageKey.CONSTRAINTS]

    def test_gaps_are_complement_of_coverage(self, engaged_transcript, core_insights):
        rubric = score_rubric(engaged_transcript, core_insights, {})
        covered = set(rubric.insight_coverage.covered())
        assert set(rubric.insight_gaps) == set(CoverageKey) - covered
        assert rubric.card_readiness.missing_signals == rubric.insight_gaps

    def test_ready_needs_coverage_and_depth(self, engaged_transcript, core_insights):
        rubric = score_rubric(engaged_transcript, core_insights, {})
        assert rubric.card_readiness.status == CardReadinessStatus.READY
        assert rubric.recommended_focus == ConversationFocus.IDEATION

    def test_coverage_without_depth_is_not_ready(self, terse_transcript, core_insights):
        rubric = score_rubric(terse_transcript, core_insights, {})
        assert rubric.card_readiness.status == CardReadinessStatus.NOT_READY

    @pytest.mark.parametrize(
        "coverage,depth,expected",
        [
            (InsightCoverage(), 3, CardReadinessStatus.NOT_READY),
            (InsightCoverage(interests=True), 3, CardReadinessStatus.NOT_READY),
            (InsightCoverage(interests=True, goals=True), 0, CardReadinessStatus.NEAR),
            (InsightCoverage(interests=True, goals=True, aptitudes=True), 1, CardReadinessStatus.NOT_READY),
            (InsightCoverage(interests=True, goals=True, aptitudes=True), 2, CardReadinessStatus.READY),
            (InsightCoverage(interests=True, goals=True, aptitudes=True, constraints=True), 3, CardReadinessStatus.READY),
        ],
    )
    def test_thresholds(self, coverage, depth, expected):
        assert compute_card_readiness(coverage, depth).status == expected

    def test_unknown_insight_kinds_are_ignored(self):
        class Loose:
            kind = "mood"

        assert compute_insight_coverage([Loose(), object()]).count() == 0


# ===================================================================
# Hysteresis
# ===================================================================


class TestMergeRubrics:
    def test_ready_survives_thinner_window(self, engaged_transcript, terse_transcript, core_insights):
        prev = score_rubric(engaged_transcript, core_insights, {})
        assert prev.card_readiness.status == CardReadinessStatus.READY

        merged = score_rubric(terse_transcript, core_insights, {}, prev_rubric=prev)
        assert merged.card_readiness.status == CardReadinessStatus.READY
        assert merged.context_depth == prev.context_depth

    def test_losing_coverage_drops_ready(self, engaged_transcript, terse_transcript, core_insights):
        prev = score_rubric(engaged_transcript, core_insights, {})
        merged = score_rubric(terse_transcript, core_insights[:1], {}, prev_rubric=prev)
        assert merged.card_readiness.status == CardReadinessStatus.NOT_READY

    def test_no_previous_rubric_returns_fresh(self, terse_transcript):
        fresh = score_rubric(terse_transcript, [], {}, now=FIXED_NOW)
        assert merge_rubrics(None, fresh) is fresh

    def test_previous_not_ready_does_not_hold(self, terse_transcript, core_insights):
        prev = conservative_rubric()
        fresh = score_rubric(terse_transcript, core_insights, {})
        assert merge_rubrics(prev, fresh) is fresh

    def test_ready_label_without_backing_does_not_promote(self):
        prev = _make_rubric(card_status=CardReadinessStatus.READY)
        merged = score_rubric([_user("hi")], [], {}, prev_rubric=prev)
        assert merged.card_readiness.status == CardReadinessStatus.NOT_READY

    def test_held_ready_needs_depth(self, terse_transcript, core_insights):
        prev = _make_rubric(
            card_status=CardReadinessStatus.READY,
            context_depth=1,
            insight_coverage=InsightCoverage(interests=True, aptitudes=True, goals=True),
        )
        fresh = score_rubric(terse_transcript, core_insights, {})
        assert merge_rubrics(prev, fresh) is fresh
        assert fresh.card_readiness.status == CardReadinessStatus.NOT_READY


class TestRubricSummary:
    def test_flat_values(self):
        summary = rubric_summary(conservative_rubric(FIXED_NOW))
        assert summary["engagement_style"] == "blocked"
        assert summary["card_readiness"] == "not-ready"
        assert summary["insight_gaps"] == ["interests", "aptitudes", "goals", "constraints"]


class TestFailClosed:
    def test_malformed_turns_give_conservative_rubric(self):
        rubric = score_rubric([{"role": "user", "text": "raw dict"}], None, None, now=FIXED_NOW)
        assert rubric == conservative_rubric(FIXED_NOW)

    def test_malformed_votes_give_conservative_rubric(self):
        rubric = score_rubric([_user("I build robots in my garage on weekends")], [], ["not", "a", "mapping"])
        assert rubric.engagement_style == EngagementStyle.BLOCKED
        assert rubric.card_readiness.status == CardReadinessStatus.NOT_READY

    def test_malformed_transcript_inference(self):
        assert infer_rubric_from_transcript([42], now=FIXED_NOW) == conservative_rubric(FIXED_NOW)
