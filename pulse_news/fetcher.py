from __future__ import annotations

import concurrent.futures as _fut
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import requests

from .config import BROWSER_USER_AGENT
from .exceptions import RSSFetchError
from .models import FeedSource, RawItem
from .parser import parse_feed

logger = logging.getLogger(__name__)

FEED_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "application/rss+xml, application/xml, text/xml, */*",
}


@dataclass
class FeedBatch:
    """Merged result of fetching every feed of a request."""
    items: List[RawItem] = field(default_factory=list)
    attempted: int = 0
    succeeded: int = 0  # feeds that yielded at least one item


def fetch_feed(
    source: FeedSource,
    *,
    timeout_sec: float = 15.0,
    session: Optional[requests.Session] = None,
) -> List[RawItem]:
    """
    Fetch a single feed and return its parsed items.

    Raises RSSFetchError on network errors or non-2xx responses. A payload that is not a
    feed is not an error: it yields [].
    """
    http = session or requests
    try:
        resp = http.get(source.url, headers=FEED_HEADERS, timeout=timeout_sec)
    except requests.RequestException as e:
        raise RSSFetchError(f"Failed to fetch feed: {source.url} ({e})") from e
    if not resp.ok:
        raise RSSFetchError(f"Feed fetch failed: {source.url} (HTTP {resp.status_code})")
    return parse_feed(resp.text, source=source.url)


def fetch_many(
    sources: Iterable[FeedSource],
    *,
    timeout_sec: float = 15.0,
    max_workers: int = 4,
    session: Optional[requests.Session] = None,
) -> FeedBatch:
    """
    Fetch multiple feeds concurrently and aggregate all items.

    Waits for every feed to finish. Failures on individual feeds are logged and count as
    zero items; they never abort the batch.
    """
    sources = list(sources)
    batch = FeedBatch(attempted=len(sources))
    if not sources:
        return batch

    workers = max(1, min(int(max_workers or 1), len(sources)))
    with _fut.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(fetch_feed, s, timeout_sec=timeout_sec, session=session) for s in sources]
        # Iterate in submission order so merged items keep feed order.
        for src, fu in zip(sources, futures):
            try:
                items = fu.result()
            except RSSFetchError as e:
                logger.warning("%s", e)
                continue
            except Exception as e:
                logger.warning("Unexpected error fetching %s (%s)", src.url, e)
                continue
            if items:
                batch.succeeded += 1
            batch.items.extend(items)

    logger.info("Feed results: %d feeds with items out of %d", batch.succeeded, batch.attempted)
    return batch
