"""Runtime settings, read from the environment (and a local ``.env`` when present)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0 Safari/537.36 PulseDailyBot/1.0"
)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    ai_provider: str = "openai"  # "openai" | "gemini"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"
    disable_ai: bool = False
    suppress_ai_warnings: bool = False
    ai_cooldown_sec: float = 300.0
    libre_translate_url: str = "https://libretranslate.com"
    target_locale: str = "th"
    feed_timeout_sec: float = 15.0
    article_timeout_sec: float = 15.0
    translate_timeout_sec: float = 12.0
    ai_timeout_sec: float = 15.0
    per_source_cap: int = 2
    overfetch_factor: int = 2
    max_workers: int = 4
    log_level: str = "INFO"

    @property
    def ai_api_key(self) -> Optional[str]:
        if self.ai_provider.lower() in {"gemini", "google", "googleai"}:
            return self.gemini_api_key
        return self.openai_api_key

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            ai_provider=os.getenv("AI_PROVIDER", "openai"),
            gemini_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-1.5-flash"),
            disable_ai=_flag("DISABLE_AI"),
            suppress_ai_warnings=_flag("SUPPRESS_AI_WARNINGS"),
            ai_cooldown_sec=_float("AI_COOLDOWN_MS", 300_000.0) / 1000.0,
            libre_translate_url=os.getenv("LIBRE_TRANSLATE_URL", "https://libretranslate.com"),
            target_locale=os.getenv("PULSE_TARGET_LOCALE", "th"),
            feed_timeout_sec=_float("PULSE_FEED_TIMEOUT_SEC", 15.0),
            article_timeout_sec=_float("PULSE_ARTICLE_TIMEOUT_SEC", 15.0),
            translate_timeout_sec=_float("PULSE_TRANSLATE_TIMEOUT_SEC", 12.0),
            ai_timeout_sec=_float("PULSE_AI_TIMEOUT_SEC", 15.0),
            per_source_cap=_int("PULSE_PER_SOURCE_CAP", 2),
            overfetch_factor=_int("PULSE_OVERFETCH_FACTOR", 2),
            max_workers=_int("PULSE_MAX_WORKERS", 4),
            log_level=os.getenv("PULSE_LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        root.setLevel(level.upper())
