from __future__ import annotations

from typing import Optional

from postgen.core.constants import (
    CREDITS_EXHAUSTED_MESSAGE,
    EMPTY_RESPONSE_MESSAGE,
    FREE_LIMIT_MESSAGE,
    GENERIC_ERROR,
    MALFORMED_RESPONSE_MESSAGE,
    RATE_LIMITED_MESSAGE,
    UPSTREAM_FAILED_MESSAGE,
)


class GenerationError(Exception):
    """Base for every failure a generation request can end in.

    ``status_code`` is the HTTP status the API answers with and ``message``
    is safe to show to the end user.
    """

    status_code: int = 500
    retryable: bool = False
    default_message: str = GENERIC_ERROR

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(GenerationError):
    status_code = 400
    default_message = "Invalid input"


class QuotaExceeded(GenerationError):
    status_code = 403

    def __init__(self, generation_count: int, limit: int):
        self.generation_count = generation_count
        self.limit = limit
        super().__init__(FREE_LIMIT_MESSAGE.format(limit=limit))


class RateLimited(GenerationError):
    status_code = 429
    retryable = True
    default_message = RATE_LIMITED_MESSAGE


class QuotaProviderExhausted(GenerationError):
    status_code = 402
    default_message = CREDITS_EXHAUSTED_MESSAGE


class UpstreamError(GenerationError):
    retryable = True
    default_message = UPSTREAM_FAILED_MESSAGE

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(message)


class EmptyUpstreamResponse(GenerationError):
    retryable = True
    default_message = EMPTY_RESPONSE_MESSAGE


class MalformedGenerationResponse(GenerationError):
    retryable = True
    default_message = MALFORMED_RESPONSE_MESSAGE
