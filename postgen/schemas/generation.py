from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateIn(CamelModel):
    # Left loose so the service can answer 400 with its own messages.
    topic: Any = None
    tone: Optional[Any] = None
    session_id: Any = None


class PostOut(CamelModel):
    content: str
    image_prompt: str = ""


class UsageOut(CamelModel):
    generation_count: int
    remaining: Optional[int] = None
    is_authenticated: bool


class GenerateOut(CamelModel):
    post: PostOut
    usage: UsageOut


class ErrorOut(BaseModel):
    error: str


class LimitReachedOut(CamelModel):
    error: str
    limit_reached: Literal[True] = True
    generation_count: int
    message: str
