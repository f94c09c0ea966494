from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from postgen.api.deps import get_db, get_gemini_client, get_optional_user_id
from postgen.schemas.generation import (
    ErrorOut,
    GenerateIn,
    GenerateOut,
    LimitReachedOut,
    PostOut,
    UsageOut,
)
from postgen.services.gemini_service import GeminiClient
from postgen.services.generation_service import GenerationService

router = APIRouter(tags=["generation"])


@router.options("/generate-linkedin-posts", status_code=status.HTTP_204_NO_CONTENT)
async def generate_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/generate-linkedin-posts",
    response_model=GenerateOut,
    responses={
        400: {"model": ErrorOut},
        402: {"model": ErrorOut},
        403: {"model": LimitReachedOut},
        429: {"model": ErrorOut},
        500: {"model": ErrorOut},
    },
)
async def generate_post(
    payload: GenerateIn,
    session: AsyncSession = Depends(get_db),
    gemini: GeminiClient = Depends(get_gemini_client),
    user_id: str | None = Depends(get_optional_user_id),
):
    svc = GenerationService(session, gemini)
    result = await svc.generate(
        topic=payload.topic,
        tone=payload.tone,
        session_id=payload.session_id,
        user_id=user_id,
    )

    return GenerateOut(
        post=PostOut(content=result.content, image_prompt=result.image_prompt),
        usage=UsageOut(**result.usage.snapshot()),
    )
