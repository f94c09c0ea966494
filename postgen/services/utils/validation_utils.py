from __future__ import annotations

import logging
from typing import Any

from postgen.core.constants import DEFAULT_TONE, SESSION_ID_RE, TOPIC_MAX_LENGTH, TOPIC_MIN_LENGTH
from postgen.domain.enums import Tone
from postgen.services.errors import InvalidInput

logger = logging.getLogger("postgen.validation_utils")


def validate_topic(topic: Any) -> str:
    if not topic or not isinstance(topic, str):
        raise InvalidInput("Topic is required")
    trimmed = topic.strip()
    if len(trimmed) < TOPIC_MIN_LENGTH:
        raise InvalidInput(f"Topic must be at least {TOPIC_MIN_LENGTH} characters")
    if len(trimmed) > TOPIC_MAX_LENGTH:
        raise InvalidInput(f"Topic must be at most {TOPIC_MAX_LENGTH} characters")
    return trimmed


def validate_session_id(session_id: Any) -> str:
    if not session_id or not isinstance(session_id, str):
        raise InvalidInput("Session ID is required")
    if not SESSION_ID_RE.fullmatch(session_id):
        logger.info("Rejected malformed session id")
        raise InvalidInput("Invalid session ID format")
    return session_id


def normalize_tone(tone: Any) -> Tone:
    if isinstance(tone, Tone):
        return tone
    value = tone.strip().lower() if isinstance(tone, str) else ""
    try:
        return Tone(value)
    except ValueError:
        return Tone(DEFAULT_TONE)
