from __future__ import annotations

import concurrent.futures as _fut
import logging
from typing import Any, List, Optional, Tuple, Union

import requests

from .circuit import AI_CIRCUIT, CircuitBreaker, is_quota_error
from .config import Settings
from .cover import build_cover_query, build_cover_url, cover_note
from .dedup import deduplicate
from .exceptions import (
    ConfigurationError,
    ExtractionError,
    InvalidRequestError,
    NoContentError,
    NoFeedsError,
    ProcessingError,
    PulseNewsError,
)
from .extractor import ARTICLE_MAX_CHARS, extract_page_metadata, fetch_article_text, fetch_html
from .fetcher import fetch_many
from .models import Candidate, Category, NormalizedArticle, Region, TranslationResult
from .providers import build_transformer, build_translators
from .selector import select_candidates
from .sources import RSS_SOURCES, FeedRegistry, feeds_for
from .structurer import (
    ReformatResult,
    basic_seo_reformat,
    build_structured_article,
    excerpt_from,
    format_content_for_readability,
)
from .text import slugify
from .translation import TranslationPipeline, seo_system_prompt, seo_user_prompt, text_field

logger = logging.getLogger(__name__)

MIN_COUNT = 3
MAX_COUNT = 10


def _pick(*values: Optional[str]) -> Optional[str]:
    for v in values:
        if v and v.strip():
            return v.strip()
    return None


class NewsGenerator:
    """
    High-level API: turn the feeds of one region/category into publish-ready articles.

    Pipeline: fetch feeds → dedup → select (recent, source-diverse) → fetch full text
    → translate → structure → attach cover query
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        registry: FeedRegistry = RSS_SOURCES,
        pipeline: Optional[TranslationPipeline] = None,
        circuit: Optional[CircuitBreaker] = None,
        session: Optional[requests.Session] = None,
        require_ai: bool = False,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.registry = registry
        self.session = session
        if require_ai and not self.settings.ai_api_key:
            raise ConfigurationError(
                "AI API key is not configured. Please add OPENAI_API_KEY (or GOOGLE_API_KEY) to your environment variables."
            )
        if pipeline is None:
            pipeline = TranslationPipeline(
                transformer=build_transformer(self.settings),
                translators=build_translators(self.settings, session=session),
                target_locale=self.settings.target_locale,
                circuit=circuit or AI_CIRCUIT,
                cooldown_sec=self.settings.ai_cooldown_sec,
                suppress_ai_warnings=self.settings.suppress_ai_warnings,
            )
        self.pipeline = pipeline

    # -- request validation ---------------------------------------------------

    @staticmethod
    def _parse_request(category: Any, region: Any, count: Any) -> Tuple[Category, Region, int]:
        if not category or not region:
            raise InvalidRequestError("Missing category or region")
        try:
            cat = Category(category)
            reg = Region(region)
        except ValueError:
            raise InvalidRequestError("Unknown category or region", details=f"category={category!r}, region={region!r}") from None
        try:
            n = int(count)
        except (TypeError, ValueError):
            raise InvalidRequestError("Count must be between 3 and 10") from None
        if n < MIN_COUNT or n > MAX_COUNT:
            raise InvalidRequestError("Count must be between 3 and 10")
        return cat, reg, n

    # -- generate ---------------------------------------------------------------

    def generate(self, category: Union[Category, str], region: Union[Region, str], count: int = 5) -> List[NormalizedArticle]:
        cat, reg, n = self._parse_request(category, region, count)
        logger.info("Generate: category=%s region=%s count=%d", cat.value, reg.value, n)

        feeds = feeds_for(reg, cat, self.registry)
        if not feeds:
            raise NoFeedsError("No feeds found for this category/region")

        batch = fetch_many(
            feeds,
            timeout_sec=self.settings.feed_timeout_sec,
            max_workers=max(self.settings.max_workers, len(feeds)),
            session=self.session,
        )
        selected = select_candidates(
            deduplicate(batch.items),
            n,
            per_source_cap=self.settings.per_source_cap,
            overfetch_factor=self.settings.overfetch_factor,
        )
        if not selected:
            logger.error("No candidates found from any feeds")
            raise NoContentError(
                "Unable to fetch articles from RSS feeds. This may be due to feed availability or network issues. "
                "Please try again later or contact support.",
                details=f"Tried {batch.attempted} feeds, got {batch.succeeded} successful responses with 0 usable items total.",
            )

        targets = selected[:n]
        results = self._process_all(targets, cat)
        if results:
            logger.info("Returning %d results", len(results))
            return results

        logger.warning("No processed results, constructing fallback items from feed content")
        fallback = [self.fallback_article(c, cat) for c in targets]
        if not fallback:
            raise ProcessingError("Failed to process any articles. Please try again.")
        return fallback

    @property
    def candidate_timeout_sec(self) -> float:
        """Worst-case wall time of one candidate: page fetch, AI call, then both fallback translators."""
        s = self.settings
        return s.article_timeout_sec + s.ai_timeout_sec + 2 * s.translate_timeout_sec

    def _process_all(self, targets: List[Candidate], category: Category) -> List[NormalizedArticle]:
        """
        Process candidates concurrently, dropping the ones that fail.

        Each candidate is bounded by the timeouts of its own outbound calls (see
        ``candidate_timeout_sec``, 54 s with default settings); the three fallback fields are
        translated in parallel, so only one translator chain counts towards the bound.
        """
        workers = max(1, min(len(targets), self.settings.max_workers))
        logger.debug("Processing %d candidates, up to %.0fs each", len(targets), self.candidate_timeout_sec)
        results: List[NormalizedArticle] = []
        with _fut.ThreadPoolExecutor(max_workers=workers) as ex:
            futures = [ex.submit(self.process_candidate, c, category) for c in targets]
            for i, (c, fu) in enumerate(zip(targets, futures), start=1):
                try:
                    results.append(fu.result())
                except Exception as e:
                    # One bad article never sinks the batch.
                    logger.error("Error processing item %d (%s): %s", i, c.link, e)
        return results

    def process_candidate(self, candidate: Candidate, category: Union[Category, str]) -> NormalizedArticle:
        article_text = fetch_article_text(
            candidate.link,
            timeout_sec=self.settings.article_timeout_sec,
            session=self.session,
        )
        base_text = article_text or candidate.description

        tr = self.pipeline.run(candidate.title, candidate.description, base_text)
        title = tr.title or candidate.title
        excerpt = tr.excerpt or excerpt_from(candidate.description)
        content = build_structured_article(
            title,
            excerpt,
            format_content_for_readability(tr.content or base_text),
            [candidate.link],
        )
        return self._article(title, excerpt, content, candidate.link, category, tr.used_ai)

    def fallback_article(self, candidate: Candidate, category: Union[Category, str]) -> NormalizedArticle:
        """Untranslated article built from feed metadata only."""
        return self._article(
            candidate.title,
            excerpt_from(candidate.description),
            candidate.description,
            candidate.link,
            category,
            False,
        )

    @staticmethod
    def _article(
        title: str,
        excerpt: str,
        content: str,
        link: str,
        category: Union[Category, str],
        translated: bool,
    ) -> NormalizedArticle:
        cat = getattr(category, "value", category)
        query = build_cover_query(cat, title)
        return NormalizedArticle(
            title=title,
            slug=slugify(title),
            excerpt=excerpt,
            category=cat,
            cover_query=query,
            cover_url=build_cover_url(query),
            content=content,
            sources=[link],
            is_translated=translated,
            cover_note=cover_note(query),
        )

    def generate_response(self, category: Any, region: Any, count: Any = 5) -> Tuple[int, Any]:
        """Request-surface wrapper: (status, list of article dicts) or (status, {"error", "details"?})."""
        try:
            articles = self.generate(category, region, count)
        except PulseNewsError as e:
            return e.status, e.to_dict()
        except Exception as e:
            logger.exception("Fatal generator error")
            return 500, {"error": str(e) or "Internal server error"}
        return 200, [a.to_dict() for a in articles]

    # -- translate / reformat ---------------------------------------------------

    def translate(
        self,
        *,
        url: Optional[str] = None,
        title: Optional[str] = None,
        description: Optional[str] = None,
        content: Optional[str] = None,
    ) -> TranslationResult:
        """Translate a single page (by URL) and/or supplied text."""
        if not (url or title or description or content):
            raise InvalidRequestError("Provide either url or some text (title/description/content).")

        if url:
            html = fetch_html(url, timeout_sec=self.settings.article_timeout_sec, session=self.session)
            if html:
                meta = extract_page_metadata(html)
                title = _pick(title, meta.title)
                description = _pick(description, meta.description)
                content = _pick(content, meta.text)

        source_text = "\n\n".join(p for p in (title, description, content) if p)[:ARTICLE_MAX_CHARS]
        if not source_text:
            raise ExtractionError("Could not extract any text to translate.")

        return self.pipeline.run(title or "", description or "", (content or source_text)[:ARTICLE_MAX_CHARS])

    def reformat(self, content: str, *, title: Optional[str] = None, excerpt: Optional[str] = None) -> ReformatResult:
        """SEO-style Markdown rewrite; heuristic layout when the AI is unavailable or fails."""
        if not content or not content.strip():
            raise InvalidRequestError("Missing content to reformat.")

        if self.pipeline.ai_available():
            try:
                data = self.pipeline.transformer.submit(
                    seo_system_prompt(self.settings.target_locale),
                    seo_user_prompt(title or "", excerpt or "", content),
                )
            except Exception as e:
                logger.warning("AI reformat failed, using heuristic layout: %s", e)
                if is_quota_error(e):
                    self.pipeline.circuit.record_failure()
            else:
                out_title = text_field(data, "title")
                out_excerpt = text_field(data, "excerpt")
                out_content = text_field(data, "content")
                if out_title or out_excerpt or out_content:
                    return ReformatResult(
                        title=out_title or title or "",
                        excerpt=out_excerpt or excerpt or content[:180],
                        content=out_content or content,
                        used_ai=True,
                    )

        return basic_seo_reformat(title, excerpt, content)
