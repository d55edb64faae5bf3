"""Full-text fetch + main-content isolation for article pages.

Policy:
- Only readable prose is kept; markup, scripts and styles are dropped.
- Any failure yields "" so callers fall back to the feed description.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

import requests
from bs4 import BeautifulSoup, Tag

from .config import BROWSER_USER_AGENT
from .text import collapse_whitespace

logger = logging.getLogger(__name__)

ARTICLE_MAX_CHARS = 8000

PAGE_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

_NOISE_TAGS = ["script", "style", "noscript", "template"]

_CONTENT_HINT_RE = re.compile(r"article|content|post|entry", re.IGNORECASE)


@dataclass(frozen=True)
class PageMetadata:
    title: Optional[str]
    description: Optional[str]
    text: str


def _soup(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()
    return soup


def _is_content_div(tag: Tag) -> bool:
    if tag.name != "div":
        return False
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    hints = [tag.get("id") or "", *classes]
    return any(_CONTENT_HINT_RE.search(h) for h in hints)


def _main_container(soup: BeautifulSoup):
    # Priority order: first container found wins.
    for node in (soup.find("article"), soup.find("main"), soup.find(_is_content_div), soup.body):
        if node is not None:
            return node
    return soup


def _main_text(soup: BeautifulSoup) -> str:
    return collapse_whitespace(_main_container(soup).get_text(" ", strip=True))


def extract_main_text(html: str) -> str:
    """Text of the first of <article>, <main>, a content-like <div>, <body>, or the whole document."""
    if not html or not html.strip():
        return ""
    return _main_text(_soup(html))


def _meta(soup: BeautifulSoup, selectors: Sequence[dict]) -> Optional[str]:
    for attrs in selectors:
        tag = soup.find("meta", attrs=attrs)
        content = tag.get("content") if tag is not None else None
        if content and content.strip():
            return collapse_whitespace(content)
    return None


def extract_page_metadata(html: str) -> PageMetadata:
    """Title/description from OpenGraph and <meta> tags plus the main text."""
    if not html or not html.strip():
        return PageMetadata(title=None, description=None, text="")
    soup = _soup(html)
    title = _meta(soup, ({"property": "og:title"}, {"name": "title"}))
    if title is None and soup.title is not None:
        title = collapse_whitespace(soup.title.get_text(" ", strip=True)) or None
    description = _meta(soup, ({"property": "og:description"}, {"name": "description"}))
    return PageMetadata(title=title, description=description, text=_main_text(soup))


def fetch_html(
    url: str,
    *,
    timeout_sec: float = 15.0,
    session: Optional[requests.Session] = None,
) -> Optional[str]:
    """Return the page HTML, or None on any network error or non-2xx status."""
    http = session or requests
    try:
        resp = http.get(url, headers=PAGE_HEADERS, timeout=timeout_sec, allow_redirects=True)
    except requests.RequestException as e:
        logger.debug("Article fetch failed: %s (%s)", url, e)
        return None
    if not resp.ok:
        logger.debug("Article fetch failed: %s (HTTP %s)", url, resp.status_code)
        return None
    return resp.text


def fetch_article_text(
    url: str,
    *,
    timeout_sec: float = 15.0,
    max_chars: int = ARTICLE_MAX_CHARS,
    session: Optional[requests.Session] = None,
) -> str:
    """Best-effort main text of an article page, capped at ``max_chars``; "" on failure."""
    html = fetch_html(url, timeout_sec=timeout_sec, session=session)
    if not html:
        return ""
    return extract_main_text(html)[:max_chars]
