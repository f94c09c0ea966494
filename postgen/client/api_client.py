from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from postgen.client.session import SessionIdentityProvider
from postgen.client.storage import KeyValueStore
from postgen.client.usage_cache import LocalUsageCache
from postgen.services.errors import (
    InvalidInput,
    QuotaExceeded,
    QuotaProviderExhausted,
    RateLimited,
    UpstreamError,
)
from postgen.domain.post import GeneratedPost

logger = logging.getLogger("postgen.client.api_client")

_STATUS_ERRORS = {
    400: InvalidInput,
    402: QuotaProviderExhausted,
    429: RateLimited,
}


def _json_body(r: httpx.Response) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError as exc:
        logger.error(f"Unreadable response body. Status: {r.status_code}")
        raise UpstreamError(status=r.status_code, body=r.text) from exc
    if not isinstance(data, dict):
        raise UpstreamError(status=r.status_code, body=r.text)
    return data


def _error_message(r: httpx.Response) -> Optional[str]:
    try:
        body = r.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


class PostGeneratorClient:
    def __init__(
        self,
        base_url: str,
        store: KeyValueStore,
        *,
        access_token: Optional[str] = None,
        max_free: int = 3,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.identity = SessionIdentityProvider(store)
        self.usage = LocalUsageCache(store, max_free=max_free, is_authenticated=bool(access_token))
        self.client = client
        self.timeout = timeout

    def sign_in(self, access_token: str) -> None:
        self.access_token = access_token
        self.usage.set_authenticated(True)

    def sign_out(self) -> None:
        self.access_token = None
        self.usage.set_authenticated(False)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def generate(self, topic: str, tone: str = "professional") -> GeneratedPost:
        body = {"topic": topic, "tone": tone, "sessionId": self.identity.get_session_id()}
        url = f"{self.base_url}/generate-linkedin-posts"

        client = self.client or httpx.AsyncClient(timeout=self.timeout)
        close_client = self.client is None
        try:
            r = await client.post(url, json=body, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error(f"Generation request failed: {type(exc).__name__} - {str(exc)}")
            raise UpstreamError(body=str(exc)) from exc
        finally:
            if close_client:
                await client.aclose()

        if r.status_code == 200:
            data = _json_body(r)
            self.usage.update(data.get("usage") or {})
            post: Dict[str, Any] = data.get("post") or {}
            return GeneratedPost(
                content=str(post.get("content", "")),
                image_prompt=str(post.get("imagePrompt", "")),
            )

        if r.status_code == 403:
            data = _json_body(r)
            count = int(data.get("generationCount", self.usage.usage.generation_count))
            self.usage.update({"generationCount": count, "remaining": 0, "isAuthenticated": False})
            raise QuotaExceeded(count, self.usage.max_free)

        message = _error_message(r)
        error_cls = _STATUS_ERRORS.get(r.status_code)
        if error_cls is not None:
            raise error_cls(message)
        logger.error(f"Generation failed. Status: {r.status_code}")
        raise UpstreamError(message, status=r.status_code, body=r.text)
