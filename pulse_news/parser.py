from __future__ import annotations

import calendar
import logging
import re
import time
from datetime import datetime, timezone
from typing import List, Optional, Pattern, Sequence

from feedparser.datetimes import _parse_date

from .models import RawItem
from .text import collapse_whitespace, decode_entities, strip_tags

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_CHARS = 500

_FEED_MARKERS = ("<rss", "<feed", "<?xml")

_BLOCK_RE = re.compile(r"<(item|entry)\b[^>]*>([\s\S]*?)</\1\s*>", re.IGNORECASE)


def _tag_re(tag: str) -> Pattern[str]:
    # Tag content, optionally wrapped in CDATA.
    return re.compile(
        rf"<{tag}\b[^>]*?(?<!/)>(?:\s*<!\[CDATA\[)?([\s\S]*?)(?:\]\]>\s*)?</{tag}\s*>",
        re.IGNORECASE,
    )


_TITLE_RE = _tag_re("title")

# Priority order matters: first pattern with a non-empty match wins.
_LINK_HREF_RE = re.compile(r"""<link\b[^>]*\bhref=["']([^"']+)["'][^>]*>""", re.IGNORECASE)
_LINK_TEXT_RE = _tag_re("link")
_GUID_PERMALINK_RE = re.compile(
    r"""<guid\b[^>]*\bisPermaLink=["']true["'][^>]*>([^<]+)</guid>""", re.IGNORECASE
)

_DATE_RES: Sequence[Pattern[str]] = (
    _tag_re("pubDate"),
    _tag_re("published"),
    _tag_re(r"[\w-]+:date"),
    _tag_re("updated"),
)

_DESCRIPTION_RES: Sequence[Pattern[str]] = (
    _tag_re("description"),
    _tag_re("summary"),
    _tag_re("content:encoded"),
    _tag_re("content"),
)


def looks_like_feed(text: str) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in _FEED_MARKERS)


def _first_match(block: str, patterns: Sequence[Pattern[str]]) -> str:
    for pat in patterns:
        m = pat.search(block)
        if m and m.group(1).strip():
            return m.group(1).strip()
    return ""


def _parse_title(block: str) -> str:
    m = _TITLE_RE.search(block)
    if not m:
        return ""
    return strip_tags(decode_entities(m.group(1).strip()), "").strip()


def _parse_link(block: str) -> str:
    """Atom/href form first, then <link>text</link>, then a permalink GUID."""
    m = _LINK_HREF_RE.search(block)
    if m and m.group(1).strip():
        return decode_entities(m.group(1).strip())
    m = _LINK_TEXT_RE.search(block)
    if m and m.group(1).strip():
        return decode_entities(m.group(1).strip())
    m = _GUID_PERMALINK_RE.search(block)
    if m and m.group(1).strip():
        return decode_entities(m.group(1).strip())
    return ""


def parse_date(value: str) -> Optional[datetime]:
    """
    Parse an RFC 822 / ISO 8601 date string to a timezone-aware UTC datetime.

    Relies on feedparser's registered date handlers; returns None when none of them understand it.
    """
    if not value:
        return None
    try:
        parsed = _parse_date(value)
    except Exception:
        return None
    if not isinstance(parsed, time.struct_time):
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        return None


def _parse_description(block: str) -> str:
    raw = _first_match(block, _DESCRIPTION_RES)
    if not raw:
        return ""
    text = collapse_whitespace(strip_tags(decode_entities(raw)))
    return text[:DESCRIPTION_MAX_CHARS]


def parse_item(block: str, *, now: Optional[datetime] = None) -> Optional[RawItem]:
    """
    Map the inner XML of one <item>/<entry> to a RawItem.

    Returns None when either title or link is empty; short titles are kept.
    """
    title = _parse_title(block)
    link = _parse_link(block)
    if not title or not link:
        return None
    published_at = parse_date(_first_match(block, _DATE_RES))
    if published_at is None:
        published_at = now or datetime.now(timezone.utc)
    return RawItem(
        title=title,
        link=link,
        published_at=published_at,
        description=_parse_description(block),
    )


def parse_feed(text: str, *, source: str = "", now: Optional[datetime] = None) -> List[RawItem]:
    """
    Extract items from raw RSS/Atom text without a strict XML parser.

    Never raises: malformed or non-feed payloads yield [] and a log line.
    """
    if not text or not looks_like_feed(text):
        logger.warning("Response is not a feed: %s", source or "<unknown>")
        return []
    now = now or datetime.now(timezone.utc)
    items: List[RawItem] = []
    try:
        for m in _BLOCK_RE.finditer(text):
            item = parse_item(m.group(2), now=now)
            if item is not None:
                items.append(item)
    except Exception as e:
        logger.warning("Feed parse error: %s (%s)", source or "<unknown>", e)
        return []
    logger.debug("Parsed %d items from %s", len(items), source or "<unknown>")
    return items
