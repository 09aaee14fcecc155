from .normalization import normalize_text, sanitize_insights, sanitize_turns, sanitize_votes

__all__ = [
    "normalize_text",
    "sanitize_insights",
    "sanitize_turns",
    "sanitize_votes",
]
