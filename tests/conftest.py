"""Root conftest: transcript/insight/rubric factories and shared fixtures."""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

# Keep test runs from writing logs under the real home directory
os.environ.setdefault(
    "DISCOVERY_COACH_LOG_DIR", str(Path(tempfile.gettempdir()) / "discovery-coach-tests" / "logs")
)

import pytest

from discovery_coach.state.models import (
    CardReadiness,
    CardReadinessStatus,
    ConversationRubric,
    ConversationTurn,
    EngagementStyle,
    InsightCoverage,
    InsightKind,
    InsightSnapshot,
    TurnRole,
)

FIXED_NOW = datetime(2026, 1, 1, 9, 30, tzinfo=timezone.utc)


def _user(text: str) -> ConversationTurn:
    return ConversationTurn(role=TurnRole.USER, text=text)


def _assistant(text: str) -> ConversationTurn:
    return ConversationTurn(role=TurnRole.ASSISTANT, text=text)


def _insight(kind: str, value: str) -> InsightSnapshot:
    return InsightSnapshot(kind=InsightKind(kind), value=value)


def _make_rubric(**overrides) -> ConversationRubric:
    """Build a rubric with gaps and missing signals consistent with the given coverage."""
    coverage = overrides.pop("insight_coverage", InsightCoverage())
    status = overrides.pop("card_status", CardReadinessStatus.NOT_READY)
    fields = dict(
        engagement_style=EngagementStyle.NEUTRAL,
        context_depth=1,
        insight_coverage=coverage,
        insight_gaps=coverage.gaps(),
        card_readiness=CardReadiness(status=status, missing_signals=coverage.gaps()),
    )
    fields.update(overrides)
    return ConversationRubric(**fields)


@pytest.fixture
def engaged_transcript():
    """Four substantive user replies that answer the interviewer's questions."""
    return [
        _assistant("Hey! What have you been building or tinkering with lately?"),
        _user("Lately I've been building little music tools for friends, mostly beat sequencers."),
        _assistant("Nice. What do friends come to you for when those music tools break?"),
        _user("Friends come to me when music tools break because I'm quick at debugging weird audio bugs."),
        _assistant("What part of debugging those audio bugs feels most satisfying?"),
        _user("The satisfying part is hunting down the audio glitch and then explaining the fix to people."),
    ]


@pytest.fixture
def terse_transcript():
    return [
        _assistant("Hey! What's been keeping you busy lately?"),
        _user("idk"),
        _assistant("Anything you've enjoyed recently, even something small?"),
        _user("um, like, nothing"),
    ]


@pytest.fixture
def core_insights():
    """Interests, aptitudes and goals covered; constraints missing."""
    return [
        _insight("interest", "music production"),
        _insight("strength", "debugging audio bugs"),
        _insight("hope", "turn the hobby into paid gigs"),
    ]
