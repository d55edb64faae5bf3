from __future__ import annotations

import re

_ENTITIES = {
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&#039;": "'",
    "&apos;": "'",
}
_ENTITY_RE = re.compile("|".join(re.escape(k) for k in _ENTITIES))
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")
_THAI_RE = re.compile(r"[\u0E00-\u0E7F]")

_SLUG_QUOTES_RE = re.compile("['\"“”‘’]")
_SLUG_DROP_RE = re.compile(r"[^a-z0-9_\u0E00-\u0E7F\s-]")
_SLUG_SEP_RE = re.compile(r"[\s_]+")
_SLUG_DASHES_RE = re.compile(r"-+")
SLUG_MAX_LEN = 96


def decode_entities(text: str) -> str:
    """Decode the handful of entities feeds actually emit; everything else is left alone."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def strip_tags(text: str, repl: str = " ") -> str:
    return _TAG_RE.sub(repl, text)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def is_thai(text: str) -> bool:
    return bool(_THAI_RE.search(text or ""))


def slugify(text: str) -> str:
    """
    Lowercase, hyphen-joined slug keeping ASCII word characters and Thai script.

    The result is at most 96 characters and slugify(slugify(x)) == slugify(x).
    """
    s = (text or "").lower().strip()
    s = _SLUG_QUOTES_RE.sub("", s)
    s = _SLUG_DROP_RE.sub("", s)
    s = _SLUG_SEP_RE.sub("-", s)
    s = _SLUG_DASHES_RE.sub("-", s).strip("-")
    return s[:SLUG_MAX_LEN].rstrip("-")
