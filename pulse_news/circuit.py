from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SEC = 300.0

_QUOTA_RE = re.compile(r"429|insufficient_quota|rate[ _-]?limit", re.IGNORECASE)


def is_quota_error(exc: BaseException) -> bool:
    """True for provider failures that mean quota exhaustion or rate limiting."""
    for attr in ("status_code", "code", "status"):
        if getattr(exc, attr, None) == 429:
            return True
    return bool(_QUOTA_RE.search(f"{type(exc).__name__}: {exc}"))


class CircuitBreaker:
    """
    Process-wide cooldown after a quota failure of the AI provider.

    Holds a single ``last_failure_at`` timestamp (0.0 == never failed). Writes are a
    single attribute assignment, so concurrent writers simply race and the last write
    wins; readers may see a slightly stale value, which the coarse cooldown tolerates.
    """

    def __init__(
        self,
        cooldown_sec: float = DEFAULT_COOLDOWN_SEC,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cooldown_sec = cooldown_sec
        self._clock = clock
        self._last_failure_at = 0.0

    @property
    def last_failure_at(self) -> float:
        return self._last_failure_at

    def allows(self, now: Optional[float] = None, *, cooldown_sec: Optional[float] = None) -> bool:
        """``cooldown_sec`` overrides the breaker default for this check only."""
        now = self._clock() if now is None else now
        cooldown = self.cooldown_sec if cooldown_sec is None else cooldown_sec
        return now - self._last_failure_at > cooldown

    def record_failure(self, now: Optional[float] = None) -> None:
        self._last_failure_at = self._clock() if now is None else now
        logger.warning("AI circuit opened after a quota failure")


# Shared failure timestamp; each pipeline applies its own cooldown to it.
AI_CIRCUIT = CircuitBreaker()
