import unittest

import requests

from pulse_news.config import Settings
from pulse_news.exceptions import AITransformError
from pulse_news.providers import (
    GoogleGtxTranslator,
    LibreTranslator,
    build_transformer,
    build_translators,
    parse_json_object,
)
from tests.fakes import FakeResponse, FakeSession

LIBRE = "https://libre.test/translate"


class TestParseJsonObject(unittest.TestCase):
    def test_plain_and_fenced(self):
        self.assertEqual(parse_json_object('{"title": "x"}'), {"title": "x"})
        self.assertEqual(parse_json_object('```json\n{"title": "y"}\n```'), {"title": "y"})

    def test_rejects_bad_payloads(self):
        for raw in (None, "", "not json", "[1, 2]"):
            with self.assertRaises(AITransformError):
                parse_json_object(raw)


class TestLibreTranslator(unittest.TestCase):
    def test_translated_text(self):
        session = FakeSession({LIBRE: FakeResponse(json_data={"translatedText": " สวัสดี "})})
        tr = LibreTranslator("https://libre.test/", session=session)
        self.assertEqual(tr.translate("hello", "th"), "สวัสดี")
        self.assertEqual(session.calls, [LIBRE])

    def test_failures_are_absorbed(self):
        for answer in (
            FakeResponse(status_code=429, json_data={"error": "slow down"}),
            FakeResponse(json_data={"translatedText": ""}),
            FakeResponse("<html>"),
            requests.Timeout("timeout"),
        ):
            tr = LibreTranslator("https://libre.test", session=FakeSession({LIBRE: answer}))
            self.assertIsNone(tr.translate("hello", "th"))


class TestGoogleGtxTranslator(unittest.TestCase):
    def test_chunks_are_joined(self):
        payload = [[["สวัสดี ", "Hello ", None], ["โลก", "world", None]], None, "en"]
        session = FakeSession({GoogleGtxTranslator.URL: FakeResponse(json_data=payload)})
        self.assertEqual(GoogleGtxTranslator(session=session).translate("Hello world", "th"), "สวัสดี โลก")

    def test_unexpected_shape(self):
        session = FakeSession({GoogleGtxTranslator.URL: FakeResponse(json_data={"oops": 1})})
        self.assertIsNone(GoogleGtxTranslator(session=session).translate("Hello", "th"))
        self.assertIsNone(GoogleGtxTranslator(session=FakeSession()).translate("Hello", "th"))


class TestBuilders(unittest.TestCase):
    def test_no_transformer_without_key_or_when_disabled(self):
        self.assertIsNone(build_transformer(Settings()))
        self.assertIsNone(build_transformer(Settings(openai_api_key="sk-test", disable_ai=True)))
        self.assertIsNone(build_transformer(Settings(openai_api_key="sk-test", ai_provider="mystery")))

    def test_translators_in_priority_order(self):
        names = [t.name for t in build_translators(Settings())]
        self.assertEqual(names, ["libretranslate", "google-gtx"])


if __name__ == "__main__":
    unittest.main()
