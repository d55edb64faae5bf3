from __future__ import annotations

import re
from typing import List
from urllib.parse import quote

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
    "by", "from", "up", "about", "into", "through", "during", "before", "after", "above",
    "below", "between", "under", "over", "again", "further", "then", "once", "here",
    "there", "when", "where", "why", "how", "all", "both", "each", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same", "so", "than",
    "too", "very", "can", "will", "just", "should", "now",
})

MAX_KEYWORDS = 3
MIN_KEYWORD_LEN = 4

COVER_URL_TEMPLATE = "https://source.unsplash.com/1600x900/?{query}"

_PUNCT_RE = re.compile(r"[^\w\s]")


def title_keywords(title: str) -> List[str]:
    words = _PUNCT_RE.sub(" ", (title or "").lower()).split()
    keywords = [w for w in words if len(w) >= MIN_KEYWORD_LEN and w not in STOP_WORDS]
    return keywords[:MAX_KEYWORDS]


def build_cover_query(category: str, title: str) -> str:
    """Category followed by up to three significant title words, e.g. "Tech apple unveils iphone"."""
    name = getattr(category, "value", category)
    return " ".join([str(name), *title_keywords(title)])


def build_cover_url(query: str) -> str:
    return COVER_URL_TEMPLATE.format(query=quote(query, safe=""))


def cover_note(query: str) -> str:
    return f"Unsplash license image (query: {query})"
