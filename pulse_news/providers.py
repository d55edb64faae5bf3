from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from .config import Settings
from .exceptions import AITransformError

logger = logging.getLogger(__name__)


class AITransformer(Protocol):
    def submit(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:  # pragma: no cover - interface
        """Return the provider's JSON object answer; raise on any failure."""
        ...


class Translator(Protocol):
    name: str

    def translate(self, text: str, target: str) -> Optional[str]:  # pragma: no cover - interface
        """Return translated text, or None when the provider cannot help. Never raises."""
        ...


def parse_json_object(raw: Optional[str]) -> Dict[str, Any]:
    if not raw or not raw.strip():
        raise AITransformError("Empty AI response")
    text = raw.strip()
    # Some models wrap JSON in a Markdown fence despite being asked not to.
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    try:
        data = json.loads(text)
    except ValueError as e:
        raise AITransformError(f"Malformed AI JSON: {e}") from e
    if not isinstance(data, dict):
        raise AITransformError("AI response is not a JSON object")
    return data


class OpenAITransformer:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_sec: float = 15.0,
        temperature: float = 0.7,
    ) -> None:
        try:
            from openai import OpenAI  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise RuntimeError("openai package is required for OpenAI transforms. Install with `pip install openai`.") from e
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY not set.")
        self._client = OpenAI(api_key=api_key, max_retries=0)
        self._model = model or "gpt-4o-mini"
        self._timeout = timeout_sec
        self._temperature = temperature

    def submit(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        resp = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=self._temperature,
            timeout=self._timeout,
        )
        content = resp.choices[0].message.content if resp and resp.choices else None
        return parse_json_object(content)


class GeminiTransformer:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_sec: float = 15.0,
        temperature: float = 0.7,
    ) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise RuntimeError("google-generativeai package is required for Gemini transforms. Install with `pip install google-generativeai`.") from e
        if not api_key:
            raise RuntimeError("GOOGLE_API_KEY (or GEMINI_API_KEY) not set.")
        genai.configure(api_key=api_key)
        self._genai = genai
        self._model_name = model or "gemini-1.5-flash"
        self._timeout = timeout_sec
        self._temperature = temperature

    def submit(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        model = self._genai.GenerativeModel(self._model_name, system_instruction=system_prompt)
        resp = model.generate_content(
            user_prompt,
            generation_config={
                "response_mime_type": "application/json",
                "temperature": self._temperature,
            },
            request_options={"timeout": self._timeout},
        )
        text = getattr(resp, "text", None)
        return parse_json_object(text)


def build_transformer(settings: Settings) -> Optional[AITransformer]:
    """The configured AI capability, or None when AI is disabled or has no credential."""
    if settings.disable_ai or not settings.ai_api_key:
        return None
    provider = (settings.ai_provider or "").lower()
    if provider == "openai":
        return OpenAITransformer(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_sec=settings.ai_timeout_sec,
        )
    if provider in {"gemini", "google", "googleai"}:
        return GeminiTransformer(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout_sec=settings.ai_timeout_sec,
        )
    # Unknown provider → no AI
    logger.warning("Unknown AI_PROVIDER %r; AI transforms disabled", settings.ai_provider)
    return None


class LibreTranslator:
    name = "libretranslate"

    def __init__(
        self,
        base_url: str = "https://libretranslate.com",
        *,
        timeout_sec: float = 12.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/translate"
        self._timeout = timeout_sec
        self._http = session or requests

    def translate(self, text: str, target: str) -> Optional[str]:
        try:
            resp = self._http.post(
                self._url,
                json={"q": text, "source": "auto", "target": target, "format": "text"},
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
            if not resp.ok:
                return None
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug("LibreTranslate failed: %s", e)
            return None
        out = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(out, str) or not out.strip():
            return None
        return out.strip()


class GoogleGtxTranslator:
    name = "google-gtx"

    URL = "https://translate.googleapis.com/translate_a/single"

    def __init__(self, *, timeout_sec: float = 12.0, session: Optional[requests.Session] = None) -> None:
        self._timeout = timeout_sec
        self._http = session or requests

    def translate(self, text: str, target: str) -> Optional[str]:
        try:
            resp = self._http.get(
                self.URL,
                params={"client": "gtx", "sl": "auto", "tl": target, "dt": "t", "q": text},
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
            if not resp.ok:
                return None
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug("Google gtx translate failed: %s", e)
            return None
        # [[["translated", "source", ...], ...], ...]
        try:
            chunks = [c[0] for c in (data[0] or []) if c and isinstance(c[0], str)]
        except (TypeError, IndexError, KeyError):
            return None
        translated = "".join(chunks).strip()
        return translated or None


def build_translators(settings: Settings, *, session: Optional[requests.Session] = None) -> List[Translator]:
    """Fallback translators in priority order."""
    return [
        LibreTranslator(settings.libre_translate_url, timeout_sec=settings.translate_timeout_sec, session=session),
        GoogleGtxTranslator(timeout_sec=settings.translate_timeout_sec, session=session),
    ]
