from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from postgen.core.database import get_session
from postgen.core.security import user_id_from_token
from postgen.services.gemini_service import GeminiClient


async def get_db(session: AsyncSession = Depends(get_session)) -> AsyncSession:
    return session


def get_gemini_client() -> GeminiClient:
    return GeminiClient()


async def bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


async def get_optional_user_id(token: str | None = Depends(bearer_token)) -> str | None:
    return user_id_from_token(token)
