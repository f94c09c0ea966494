from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from postgen.core.config import settings
from postgen.core.constants import GENERATE_CONTENT_PATH
from postgen.domain.enums import Tone
from postgen.domain.post import GeneratedPost
from postgen.services.errors import (
    EmptyUpstreamResponse,
    MalformedGenerationResponse,
    QuotaProviderExhausted,
    RateLimited,
    UpstreamError,
)

logger = logging.getLogger("postgen.gemini_service")

TONE_GUIDANCE: Dict[Tone, str] = {
    Tone.professional: "Keep an authoritative, professional voice built on insight, data and expertise.",
    Tone.inspirational: "Be motivating and uplifting; personal stories and encouraging takeaways work well.",
    Tone.humorous: "Be light and witty with clever observations while staying workplace appropriate.",
    Tone.educational: "Teach: break the idea into clear steps and finish with actionable tips.",
}


def build_system_instruction(tone: Tone) -> str:
    guidance = TONE_GUIDANCE.get(tone, TONE_GUIDANCE[Tone.professional])
    return (
        "You write LinkedIn posts. Produce exactly one post about the topic you are given.\n"
        f"TONE: {tone.value.upper()}\n"
        f"{guidance}\n"
        "Requirements:\n"
        "- open with a hook in the first two lines\n"
        "- use short paragraphs separated by line breaks\n"
        "- a few fitting emojis and 3 to 5 relevant hashtags\n"
        "- roughly 1200 to 2500 characters\n"
        "Also write a prompt for an image generator describing a visual for the post.\n"
        "Reply with JSON only, shaped as:\n"
        '{"post": {"content": "<post text>", "imagePrompt": "<image prompt>"}}'
    )


def build_user_instruction(topic: str, tone: Tone) -> str:
    return f'Generate a {tone.value} LinkedIn post about: "{topic}"'


def extract_candidate_text(payload: Any) -> Optional[str]:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


def find_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Return the first JSON object embedded in ``text``.

    Models often wrap the object in prose or markdown fences, so every ``{``
    is tried as a starting point until one decodes to a dict.
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _end = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            obj = None
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    return None


def parse_generated_post(text: str) -> GeneratedPost:
    parsed = find_json_object(text)
    if parsed is None:
        logger.error(f"No JSON object found in AI response. Content: {text[:500]}")
        raise MalformedGenerationResponse()

    post = parsed.get("post") if isinstance(parsed.get("post"), dict) else parsed
    content = post.get("content")
    if not isinstance(content, str) or not content.strip():
        logger.error(f"AI response is missing post content. Keys: {list(post.keys())}")
        raise MalformedGenerationResponse()

    image_prompt = post.get("imagePrompt")
    return GeneratedPost(
        content=content,
        image_prompt=image_prompt if isinstance(image_prompt, str) else "",
    )


class GeminiClient:
    __slots__ = ("client", "api_key", "model", "base_url", "timeout")

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout

    def _url(self) -> str:
        return self.base_url + GENERATE_CONTENT_PATH.format(model=self.model)

    async def generate_post(self, *, topic: str, tone: Tone) -> GeneratedPost:
        if not self.api_key:
            logger.error("GEMINI_API_KEY is not configured")
            raise UpstreamError("GEMINI_API_KEY is not configured")

        body = {
            "system_instruction": {"parts": [{"text": build_system_instruction(tone)}]},
            "contents": [
                {"role": "user", "parts": [{"text": build_user_instruction(topic, tone)}]},
            ],
        }
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}

        client = self.client or httpx.AsyncClient(timeout=self.timeout)
        close_client = self.client is None
        t0 = time.perf_counter()
        try:
            r = await client.post(self._url(), json=body, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.error(f"Gemini connection error: {type(exc).__name__} - {str(exc)}")
            raise UpstreamError(body=str(exc)) from exc
        finally:
            if close_client:
                await client.aclose()

        duration = round((time.perf_counter() - t0) * 1000, 1)
        logger.info(f"Gemini API response. Status: {r.status_code}, Duration: {duration}ms")

        if r.status_code == 429:
            raise RateLimited()
        if r.status_code == 402:
            raise QuotaProviderExhausted()
        if r.status_code >= 400:
            logger.error(f"Gemini API error. Status: {r.status_code}, Body: {r.text}")
            raise UpstreamError(status=r.status_code, body=r.text)

        try:
            payload = r.json()
        except json.JSONDecodeError:
            logger.error(f"Gemini returned invalid JSON. Raw body: {r.text[:700]}")
            raise UpstreamError(status=r.status_code, body=r.text)

        text = extract_candidate_text(payload)
        if text is None:
            logger.error(f"Gemini response has no candidate text. Full JSON: {payload}")
            raise EmptyUpstreamResponse()

        return parse_generated_post(text)
