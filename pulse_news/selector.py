from __future__ import annotations

import logging
from typing import Dict, Iterable, List
from urllib.parse import urlparse

from .models import Candidate, RawItem

logger = logging.getLogger(__name__)

DEFAULT_PER_SOURCE_CAP = 2
DEFAULT_OVERFETCH_FACTOR = 2


def to_candidate(item: RawItem) -> Candidate:
    """Attach the link's hostname; raises ValueError if the link is not an absolute http(s) URL."""
    parsed = urlparse(item.link)
    host = (parsed.hostname or "").lower()
    if parsed.scheme not in ("http", "https") or not host:
        raise ValueError(f"Invalid URL: {item.link}")
    return Candidate(
        title=item.title,
        link=item.link,
        published_at=item.published_at,
        hostname=host,
        description=item.description,
    )


def to_candidates(items: Iterable[RawItem]) -> List[Candidate]:
    out: List[Candidate] = []
    for it in items:
        try:
            out.append(to_candidate(it))
        except ValueError:
            logger.debug("Invalid URL: %s", it.link)
    return out


def select_candidates(
    items: Iterable[RawItem],
    count: int,
    *,
    per_source_cap: int = DEFAULT_PER_SOURCE_CAP,
    overfetch_factor: int = DEFAULT_OVERFETCH_FACTOR,
) -> List[Candidate]:
    """
    Pick recent, source-diverse candidates.

    Newest first (stable for equal timestamps), at most ``per_source_cap`` per hostname,
    stopping at ``overfetch_factor * count`` admitted items.
    """
    candidates = to_candidates(items)
    candidates.sort(key=lambda c: c.published_at, reverse=True)

    limit = max(count, overfetch_factor * count)
    per_host: Dict[str, int] = {}
    selected: List[Candidate] = []
    for c in candidates:
        if len(selected) >= limit:
            break
        n = per_host.get(c.hostname, 0)
        if n >= per_source_cap:
            continue
        per_host[c.hostname] = n + 1
        selected.append(c)

    logger.info("Selected %d of %d candidates", len(selected), len(candidates))
    return selected
