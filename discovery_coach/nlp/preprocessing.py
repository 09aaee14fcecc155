"""
Reply cleaning before any length or token measurement.
Strips spoken fillers so "um, like, yeah" does not read as a substantive answer.
"""

import re

# Common fillers (English, chat + voice transcripts)
FILLER_PATTERN = re.compile(
    r"\b(uh+|um+|hmm+|hm+|ah+|er+|eh+|erm+|like|you\s+know|i\s+mean|kinda|sort\s+of|i\s+guess)\b",
    re.IGNORECASE,
)
# Punctuation left dangling once fillers are gone: ", ," / leading commas
DANGLING_PUNCT_PATTERN = re.compile(r"(^|\s)[,;]+(?=\s|$)")
TOKEN_PATTERN = re.compile(r"[^a-z0-9\s]")

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "of", "in", "to", "for", "on", "with",
        "that", "this", "is", "it", "as", "are", "was", "were", "be", "by",
        "i", "you", "we", "they", "he", "she", "him", "her", "them", "me",
        "my", "your", "our", "their", "at", "from", "but", "about",
    }
)


def remove_fillers(text: str) -> str:
    """Remove filler words (uh, um, like, you know...). Re-runnable."""
    if not text:
        return ""
    return FILLER_PATTERN.sub(" ", text)


def clean_reply(text: str) -> str:
    """Fillers out, dangling commas out, whitespace collapsed. Idempotent."""
    if not text:
        return ""
    t = remove_fillers(text)
    t = DANGLING_PUNCT_PATTERN.sub(" ", t)
    return re.sub(r"\s+", " ", t).strip()


def tokenize(text: str) -> list[str]:
    """Lowercased content tokens: punctuation stripped, stopwords and tokens of <=2 chars dropped."""
    if not text:
        return []
    return [
        token
        for token in TOKEN_PATTERN.sub(" ", text.lower()).split()
        if len(token) > 2 and token not in STOPWORDS
    ]
