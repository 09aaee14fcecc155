"""Boundary normalization: raw request data → clean turns, insights and votes for the engine."""

import logging
import re
from typing import Any, Iterable, Mapping
from unicodedata import normalize as unicode_normalize

from discovery_coach.state.models import ConversationTurn, InsightKind, InsightSnapshot, TurnRole

logger = logging.getLogger("discovery_coach.normalization")

DEFAULT_TURN_LIMIT = 12
VALID_VOTES = (-1, 0, 1)


def normalize_text(text: str) -> str:
    """
    Normalize for English NLP: NFC, collapse whitespace, strip.
    No fancy personalization; keep predictable.
    """
    if not text:
        return ""
    t = unicode_normalize("NFC", text)
    t = re.sub(r"\s+", " ", t)
    return t.strip()


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def sanitize_turns(turns: Iterable[Any] | None, limit: int = DEFAULT_TURN_LIMIT) -> list[ConversationTurn]:
    """
    Keep the last `limit` turns with a known role and non-blank text, normalized.
    Accepts ConversationTurn objects or {"role", "text"} mappings.
    """
    out: list[ConversationTurn] = []
    for item in turns or []:
        role = _field(item, "role")
        text = _field(item, "text")
        try:
            role = TurnRole(role)
        except (TypeError, ValueError):
            logger.debug("Dropping turn with unknown role %r", role)
            continue
        text = normalize_text(text) if isinstance(text, str) else ""
        if not text:
            continue
        out.append(ConversationTurn(role=role, text=text))
    return out[-limit:] if limit > 0 else []


def sanitize_insights(insights: Iterable[Any] | None) -> list[InsightSnapshot]:
    """Drop unknown kinds and blank values; dedupe by (kind, lowercased value), first wins."""
    seen: set[tuple[InsightKind, str]] = set()
    out: list[InsightSnapshot] = []
    for item in insights or []:
        raw_kind = _field(item, "kind")
        value = _field(item, "value")
        try:
            kind = InsightKind(raw_kind)
        except (TypeError, ValueError):
            logger.debug("Dropping insight with unknown kind %r", raw_kind)
            continue
        value = normalize_text(value) if isinstance(value, str) else ""
        if not value:
            continue
        key = (kind, value.lower())
        if key in seen:
            continue
        seen.add(key)
        out.append(InsightSnapshot(kind=kind, value=value))
    return out


def sanitize_votes(votes: Mapping[str, Any] | None) -> dict[str, int]:
    """Keep -1 / 0 / 1 votes keyed by non-blank suggestion id; everything else is dropped."""
    out: dict[str, int] = {}
    for suggestion_id, value in (votes or {}).items():
        if not isinstance(suggestion_id, str) or not suggestion_id.strip():
            continue
        if isinstance(value, bool) or value not in VALID_VOTES:
            if value is not None:
                logger.debug("Dropping out-of-range vote %r for %s", value, suggestion_id)
            continue
        out[suggestion_id.strip()] = int(value)
    return out
