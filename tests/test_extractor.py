import unittest

import requests

from pulse_news.extractor import extract_main_text, extract_page_metadata, fetch_article_text
from tests.fakes import FakeResponse, FakeSession


class TestExtractMainText(unittest.TestCase):
    def test_article_element_wins(self):
        html = (
            "<html><body><nav>Menu</nav><main>Main text</main>"
            "<article><h1>Head</h1><p>Article   body</p><script>var x = 1;</script></article></body></html>"
        )
        self.assertEqual(extract_main_text(html), "Head Article body")

    def test_main_then_content_div_then_body(self):
        self.assertEqual(extract_main_text("<body><main><p>In main</p></main></body>"), "In main")
        html = '<body><div class="sidebar">Ads</div><div class="post-content"><p>Post text</p></div></body>'
        self.assertEqual(extract_main_text(html), "Post text")
        self.assertEqual(
            extract_main_text("<html><head><style>p{}</style></head><body><p>Just body</p><noscript>js</noscript></body></html>"),
            "Just body",
        )

    def test_nested_content_div_is_kept_whole(self):
        html = (
            '<body><div class="sidebar">Ads</div><div class="post-content"><div class="byline">By Staff</div>'
            "<p>The real article body.</p></div></body>"
        )
        self.assertEqual(extract_main_text(html), "By Staff The real article body.")
        by_id = '<body><div id="entry-42"><div><p>Nested</p></div><p>tail</p></div></body>'
        self.assertEqual(extract_main_text(by_id), "Nested tail")

    def test_raw_document_fallback(self):
        self.assertEqual(extract_main_text("<p>Fragment only</p>"), "Fragment only")
        self.assertEqual(extract_main_text(""), "")


class TestPageMetadata(unittest.TestCase):
    def test_open_graph_preferred(self):
        html = (
            "<html><head><title>Doc title</title>"
            '<meta property="og:title" content="OG title">'
            '<meta name="description" content="Meta desc">'
            "</head><body><article>Body text</article></body></html>"
        )
        meta = extract_page_metadata(html)
        self.assertEqual(meta.title, "OG title")
        self.assertEqual(meta.description, "Meta desc")
        self.assertEqual(meta.text, "Body text")

    def test_attribute_order_and_entities(self):
        html = (
            '<html><head><meta content="Tom &amp; Jerry" property="og:title">'
            '<meta content="  Short   summary " property="og:description"></head>'
            "<body><main>Body</main></body></html>"
        )
        meta = extract_page_metadata(html)
        self.assertEqual(meta.title, "Tom & Jerry")
        self.assertEqual(meta.description, "Short summary")
        self.assertEqual(meta.text, "Body")

    def test_document_title_fallback(self):
        meta = extract_page_metadata("<html><head><title>Only title</title></head><body>x</body></html>")
        self.assertEqual(meta.title, "Only title")
        self.assertIsNone(meta.description)


class TestFetchArticleText(unittest.TestCase):
    URL = "https://news.example.com/story"

    def test_success_is_capped(self):
        html = "<article>" + ("word " * 3000) + "</article>"
        session = FakeSession({self.URL: FakeResponse(html)})
        text = fetch_article_text(self.URL, session=session)
        self.assertEqual(len(text), 8000)
        self.assertTrue(text.startswith("word word"))

    def test_failures_return_empty_string(self):
        for answer in (FakeResponse("<article>x</article>", status_code=404), requests.Timeout("slow")):
            session = FakeSession({self.URL: answer})
            self.assertEqual(fetch_article_text(self.URL, session=session), "")
        self.assertEqual(fetch_article_text(self.URL, session=FakeSession()), "")


if __name__ == "__main__":
    unittest.main()
