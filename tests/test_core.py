import io
import unittest
from collections import Counter
from contextlib import redirect_stdout
from datetime import datetime, timedelta, timezone
from urllib.parse import urlparse

from pulse_news.__main__ import main
from pulse_news.circuit import CircuitBreaker
from pulse_news.config import Settings
from pulse_news.core import NewsGenerator
from pulse_news.exceptions import (
    ConfigurationError,
    ExtractionError,
    InvalidRequestError,
    NoContentError,
    NoFeedsError,
)
from pulse_news.models import Category, FeedSource, Region
from pulse_news.translation import TranslationPipeline
from tests.fakes import FakeResponse, FakeSession, FakeTransformer, FakeTranslator, QuotaError, rfc822, rss

FEED_A = FeedSource("https://feeds.a.test/rss", "A")
FEED_B = FeedSource("https://feeds.b.test/rss", "B")
REGISTRY = {Region.INTL: {Category.TECH: (FEED_A, FEED_B)}}

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _feed(host, n, offset):
    return rss(
        (
            f"{host.upper()} story {i}",
            f"https://{host}.test/{i}",
            rfc822(NOW - timedelta(minutes=offset + i)),
            f"Description {host} {i}. It has two sentences.",
        )
        for i in range(n)
    )


def _session(extra=None):
    routes = {
        FEED_A.url: FakeResponse(_feed("a", 3, 0)),
        FEED_B.url: FakeResponse(_feed("b", 4, 10)),
    }
    routes.update(extra or {})
    return FakeSession(routes)


def _generator(pipeline=None, session=None, **settings):
    return NewsGenerator(
        Settings(**settings),
        registry=REGISTRY,
        pipeline=pipeline or TranslationPipeline(circuit=CircuitBreaker(300)),
        session=session if session is not None else _session(),
    )


class TestRequestValidation(unittest.TestCase):
    def test_bad_requests(self):
        gen = _generator()
        for args in (("", "intl", 5), ("Tech", "mars", 5), ("Tech", "intl", 2), ("Tech", "intl", 11), ("Tech", "intl", "x")):
            with self.assertRaises(InvalidRequestError):
                gen.generate(*args)
        self.assertEqual(gen.generate_response("Tech", "intl", 42)[0], 400)

    def test_unconfigured_pair_is_404(self):
        with self.assertRaises(NoFeedsError):
            _generator().generate("Drama", "intl", 5)

    def test_required_ai_without_key(self):
        with self.assertRaises(ConfigurationError):
            NewsGenerator(Settings(), registry=REGISTRY, require_ai=True)

    def test_generators_do_not_share_cooldown_settings(self):
        breaker = CircuitBreaker(300)
        fast = NewsGenerator(Settings(ai_cooldown_sec=5), registry=REGISTRY, circuit=breaker, session=_session())
        slow = NewsGenerator(Settings(ai_cooldown_sec=900), registry=REGISTRY, circuit=breaker, session=_session())
        self.assertIs(fast.pipeline.circuit, slow.pipeline.circuit)
        self.assertEqual((fast.pipeline.cooldown_sec, slow.pipeline.cooldown_sec), (5, 900))
        self.assertEqual(breaker.cooldown_sec, 300)

    def test_candidate_timeout_bound(self):
        self.assertEqual(_generator().candidate_timeout_sec, 54)
        self.assertEqual(_generator(article_timeout_sec=5, ai_timeout_sec=5, translate_timeout_sec=5).candidate_timeout_sec, 20)


class TestGenerate(unittest.TestCase):
    def test_diverse_selection_and_layout(self):
        articles = _generator().generate(Category.TECH, Region.INTL, 5)
        hosts = Counter(urlparse(a.sources[0]).hostname for a in articles)
        self.assertEqual(hosts, Counter({"a.test": 2, "b.test": 2}))
        first = articles[0]
        self.assertEqual(first.title, "A story 0")
        self.assertEqual(first.slug, "a-story-0")
        self.assertEqual(first.sources, ["https://a.test/0"])
        self.assertFalse(first.is_translated)
        self.assertTrue(first.content.startswith("Title\n\nA story 0\n"))
        self.assertIn("Sources\n\n- https://a.test/0", first.content)
        self.assertEqual(first.cover_query, "Tech story")
        self.assertIn("source.unsplash.com", first.cover_url)
        payload = first.to_dict()
        self.assertEqual(set(payload), {"Title", "Slug", "Excerpt", "Category", "Cover", "Sources", "Content", "isTranslated", "coverNote"})

    def test_full_article_text_is_used(self):
        page = "<html><body><article>Full text one. Full text two. Full text three. Full text four.</article></body></html>"
        session = _session({"https://a.test/0": FakeResponse(page)})
        articles = _generator(session=session).generate("Tech", "intl", 3)
        lines = articles[0].content.split("\n")
        self.assertEqual(lines[lines.index("Introduction") + 2], "Full text one. Full text two. Full text three.")
        self.assertEqual(lines[lines.index("Conclusion") + 2], "Full text four.")

    def test_all_feeds_down_is_terminal(self):
        gen = _generator(session=FakeSession())
        with self.assertRaises(NoContentError):
            gen.generate("Tech", "intl", 5)
        status, body = gen.generate_response("Tech", "intl", 5)
        self.assertEqual(status, 503)
        self.assertIn("Unable to fetch", body["error"])
        self.assertEqual(body["details"], "Tried 2 feeds, got 0 successful responses with 0 usable items total.")

    def test_one_feed_down_is_partial_success(self):
        session = _session({FEED_A.url: FakeResponse("nope", status_code=500)})
        status, body = _generator(session=session).generate_response("Tech", "intl", 5)
        self.assertEqual(status, 200)
        self.assertEqual(len(body), 2)
        self.assertTrue(all(a["Sources"][0].startswith("https://b.test/") for a in body))

    def test_rate_limited_ai_and_failing_translators_pass_through(self):
        breaker = CircuitBreaker(300)
        ai = FakeTransformer(error=QuotaError())
        libre, gtx = FakeTranslator("libre"), FakeTranslator("gtx")
        pipeline = TranslationPipeline(transformer=ai, translators=[libre, gtx], circuit=breaker)
        articles = _generator(pipeline=pipeline, max_workers=1).generate("Tech", "intl", 3)
        self.assertTrue(all(not a.is_translated for a in articles))
        self.assertEqual(articles[0].title, "A story 0")
        self.assertGreater(breaker.last_failure_at, 0)
        # Circuit opened by the first article, so the AI is tried exactly once.
        self.assertEqual(ai.calls, 1)
        self.assertTrue(libre.calls and gtx.calls)

    def test_translated_articles(self):
        ai = FakeTransformer({"title": "ข่าวเทคโนโลยี", "excerpt": "สรุป", "content": "ย่อหน้าแรก ข่าวดี. ย่อหน้าสอง."})
        pipeline = TranslationPipeline(transformer=ai, circuit=CircuitBreaker(300))
        articles = _generator(pipeline=pipeline).generate("Tech", "intl", 3)
        self.assertTrue(all(a.is_translated for a in articles))
        self.assertEqual(articles[0].slug, "ข่าวเทคโนโลยี")
        self.assertEqual(articles[0].excerpt, "สรุป")

    def test_processing_failures_degrade_to_feed_metadata(self):
        class ExplodingPipeline:
            def run(self, *args):
                raise RuntimeError("boom")

        articles = _generator(pipeline=ExplodingPipeline()).generate("Tech", "intl", 3)
        self.assertEqual(len(articles), 3)
        self.assertFalse(articles[0].is_translated)
        self.assertEqual(articles[0].content, "Description a 0. It has two sentences.")


class TestTranslateAndReformat(unittest.TestCase):
    def test_translate_requires_input(self):
        with self.assertRaises(InvalidRequestError):
            _generator().translate()

    def test_translate_from_url_metadata(self):
        url = "https://news.test/page"
        html = (
            '<html><head><meta property="og:title" content="Page title">'
            '<meta property="og:description" content="Page summary"></head>'
            "<body><article>Body sentence.</article></body></html>"
        )
        result = _generator(session=FakeSession({url: FakeResponse(html)})).translate(url=url)
        self.assertEqual(result.title, "Page title")
        self.assertEqual(result.excerpt, "Page summary")
        self.assertEqual(result.content, "Body sentence.")

    def test_translate_unreachable_url_without_text(self):
        with self.assertRaises(ExtractionError):
            _generator(session=FakeSession()).translate(url="https://down.test/x")

    def test_reformat_heuristic_and_ai(self):
        with self.assertRaises(InvalidRequestError):
            _generator().reformat("   ")
        basic = _generator().reformat("Alpha one. Beta two. Gamma three.", title="Greek")
        self.assertFalse(basic.used_ai)
        self.assertTrue(basic.content.startswith("# Greek"))

        ai = FakeTransformer({"title": "SEO", "excerpt": "Meta", "content": "# SEO\n\n## Part"})
        pipeline = TranslationPipeline(transformer=ai, circuit=CircuitBreaker(300))
        out = _generator(pipeline=pipeline).reformat("Alpha one.")
        self.assertTrue(out.used_ai)
        self.assertEqual(out.content, "# SEO\n\n## Part")


class TestMain(unittest.TestCase):
    def test_prints_payload(self):
        class StubGenerator:
            def generate_response(self, category, region, count):
                return 200, [{"Title": category, "Slug": region, "count": count}]

        buf = io.StringIO()
        with redirect_stdout(buf):
            code = main(["Tech", "intl", "--count", "3"], generator=StubGenerator())
        self.assertEqual(code, 0)
        self.assertIn('"Title": "Tech"', buf.getvalue())


if __name__ == "__main__":
    unittest.main()
