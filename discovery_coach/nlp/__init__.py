from .engagement import EngagementAnalysis, analyze_engagement
from .insights import extract_conversation_insights, normalize_snippet
from .preprocessing import clean_reply, remove_fillers, tokenize

__all__ = [
    "EngagementAnalysis",
    "analyze_engagement",
    "extract_conversation_insights",
    "normalize_snippet",
    "clean_reply",
    "remove_fillers",
    "tokenize",
]
