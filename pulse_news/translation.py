from __future__ import annotations

import concurrent.futures as _fut
import logging
from typing import Any, Dict, Optional, Sequence

from .circuit import AI_CIRCUIT, CircuitBreaker, is_quota_error
from .exceptions import AITransformError
from .models import TranslationResult
from .providers import AITransformer, Translator
from .structurer import excerpt_from, first_sentences, to_paragraphs

logger = logging.getLogger(__name__)

LOCALE_NAMES = {"th": "Thai"}
TITLE_MAX_CHARS = 80


def system_prompt(locale: str) -> str:
    lang = LOCALE_NAMES.get(locale, locale)
    return (
        f"You are a {lang} news editor. Translate, reorganize, and polish international news into clear "
        f"{lang} suitable for reading on the web. Keep proper nouns in original form where appropriate. "
        "Return JSON with title (concise), excerpt (160-220 chars), and content as 3-6 short paragraphs "
        "separated by blank lines. Improve clarity, remove redundancy, and maintain factual accuracy. "
        "Do not invent facts."
    )


def user_prompt(title: str, description: str, body: str, locale: str) -> str:
    lang = LOCALE_NAMES.get(locale, locale)
    return (
        f"Translate and reformat to {lang} with well-spaced paragraphs.\n\n"
        f"Title: {title}\n"
        f"Description: {description}\n\n"
        f"Content:\n{body}"
    )


def text_field(data: Dict[str, Any], key: str) -> Optional[str]:
    val = data.get(key)
    if isinstance(val, list):
        val = "\n\n".join(str(v).strip() for v in val if str(v).strip())
    if isinstance(val, str) and val.strip():
        return val.strip()
    return None


class FallbackChain:
    """Ordered translators tried one after another until one returns text."""

    def __init__(self, translators: Sequence[Translator], target: str) -> None:
        self._translators = list(translators)
        self._target = target

    def __bool__(self) -> bool:
        return bool(self._translators)

    def transform(self, text: Optional[str]) -> Optional[str]:
        if not text or not text.strip():
            return None
        for tr in self._translators:
            try:
                out = tr.translate(text, self._target)
            except Exception as e:  # pragma: no cover - translators are expected not to raise
                logger.debug("Translator %s raised: %s", getattr(tr, "name", tr), e)
                continue
            if out and out.strip():
                return out.strip()
        return None


class TranslationPipeline:
    """
    Best-effort title/excerpt/content translation.

    Order: primary AI transform (skipped while the circuit is open) → per-field fallback
    translators → untranslated pass-through. ``run`` never raises.
    """

    def __init__(
        self,
        *,
        transformer: Optional[AITransformer] = None,
        translators: Sequence[Translator] = (),
        target_locale: str = "th",
        circuit: Optional[CircuitBreaker] = None,
        cooldown_sec: Optional[float] = None,
        suppress_ai_warnings: bool = False,
    ) -> None:
        self.transformer = transformer
        self.target_locale = target_locale
        self.circuit = circuit or AI_CIRCUIT
        self.cooldown_sec = cooldown_sec
        self.fallback = FallbackChain(translators, target_locale)
        self._suppress_warnings = suppress_ai_warnings

    def ai_available(self) -> bool:
        return self.transformer is not None and self.circuit.allows(cooldown_sec=self.cooldown_sec)

    def run(self, title: str, description: str, body: str) -> TranslationResult:
        title = title or ""
        description = description or ""
        body = body or description
        try:
            if self.ai_available():
                result = self._try_primary(title, description, body)
                if result is not None:
                    return result
            result = self._try_fallback(title, body)
            if result is not None:
                return result
        except Exception as e:  # pragma: no cover - last line of defence
            logger.error("Translation pipeline error: %s", e)
        return self._pass_through(title, description, body)

    def _try_primary(self, title: str, description: str, body: str) -> Optional[TranslationResult]:
        try:
            data = self.transformer.submit(
                system_prompt(self.target_locale),
                user_prompt(title, description, body, self.target_locale),
            )
            out_title = text_field(data, "title")
            out_excerpt = text_field(data, "excerpt")
            out_content = text_field(data, "content")
            if not (out_title or out_excerpt or out_content):
                raise AITransformError("AI response has no title/excerpt/content")
        except Exception as e:
            if not self._suppress_warnings:
                logger.warning("AI translation failed, falling back: %s", e)
            if is_quota_error(e):
                self.circuit.record_failure()
            return None
        return TranslationResult(
            title=out_title or title,
            excerpt=out_excerpt or excerpt_from(description or body),
            content=out_content or to_paragraphs(body),
            used_ai=True,
        )

    def _try_fallback(self, title: str, body: str) -> Optional[TranslationResult]:
        if not self.fallback:
            return None
        fields = (title, excerpt_from(body), body)
        # Fields are independent: translate them side by side.
        with _fut.ThreadPoolExecutor(max_workers=len(fields)) as ex:
            t_title, t_excerpt, t_content = ex.map(self.fallback.transform, fields)
        if not (t_title or t_excerpt or t_content):
            return None
        content = t_content or body
        out_title = t_title or title or first_sentences(content, 1)[:TITLE_MAX_CHARS]
        return TranslationResult(
            title=out_title,
            excerpt=t_excerpt or excerpt_from(content),
            content=content,
            used_ai=True,
        )

    def _pass_through(self, title: str, description: str, body: str) -> TranslationResult:
        return TranslationResult(
            title=title,
            excerpt=excerpt_from(description or body),
            content=body,
            used_ai=False,
        )


def seo_system_prompt(locale: str) -> str:
    lang = LOCALE_NAMES.get(locale, locale)
    return (
        f"You are an expert {lang} SEO editor. Reformat the article into an SEO-friendly blog post in {lang}. "
        "Use a clear H1 title, 160-180 char meta description (excerpt), and structured Markdown with H2 "
        "sections, bullet points for key takeaways, and concise paragraphs. Return JSON with title, "
        "excerpt and content. Do not invent facts."
    )


def seo_user_prompt(title: str, excerpt: str, content: str) -> str:
    return f"Title: {title}\nExcerpt: {excerpt}\n\nArticle:\n{content}"
