from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postgen.core.config import settings
from postgen.services.errors import GenerationError, QuotaExceeded
from postgen.services.gemini_service import GeminiClient
from postgen.services.quota_service import QuotaEnforcer, UsageResult
from postgen.services.utils.validation_utils import normalize_tone, validate_session_id, validate_topic

logger = logging.getLogger("postgen.generation_service")


@dataclass(slots=True)
class GenerationResult:
    content: str
    image_prompt: str
    usage: UsageResult


class GenerationService:
    def __init__(
        self,
        session: AsyncSession,
        gemini: Optional[GeminiClient] = None,
        *,
        max_free: Optional[int] = None,
        refund_on_failure: Optional[bool] = None,
    ):
        self.session = session
        self.quota = QuotaEnforcer(session)
        self.gemini = gemini or GeminiClient()
        self.max_free = settings.max_free_generations if max_free is None else max_free
        self.refund_on_failure = (
            settings.refund_on_upstream_failure if refund_on_failure is None else refund_on_failure
        )

    async def generate(
        self,
        *,
        topic: Any,
        tone: Any = None,
        session_id: Any,
        user_id: Optional[str] = None,
    ) -> GenerationResult:
        clean_topic = validate_topic(topic)
        clean_session = validate_session_id(session_id)
        clean_tone = normalize_tone(tone)
        logger.info(f"Initiating generation. Tone: {clean_tone.value}, Authenticated: {bool(user_id)}")

        usage = await self.quota.check_and_increment(clean_session, user_id, self.max_free)
        if not usage.can_generate:
            raise QuotaExceeded(usage.generation_count, self.max_free)

        try:
            post = await self.gemini.generate_post(topic=clean_topic, tone=clean_tone)
        except GenerationError as exc:
            logger.warning(f"Generation failed. Kind: {type(exc).__name__}")
            if self.refund_on_failure:
                try:
                    await self.quota.release(clean_session, user_id, self.max_free)
                except Exception:
                    logger.exception("Failed to release generation slot after upstream failure")
            raise

        logger.info(f"Generation succeeded. Count: {usage.generation_count}")
        return GenerationResult(
            content=post.content,
            image_prompt=post.image_prompt,
            usage=usage,
        )
