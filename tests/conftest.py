import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["AUTH_JWT_SECRET"] = "test-jwt-secret"
os.environ["MAX_FREE_GENERATIONS"] = "3"
os.environ["REFUND_ON_UPSTREAM_FAILURE"] = "true"

import json

import httpx
import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from postgen.api.deps import get_db, get_gemini_client
from postgen.core.database import Base
from postgen.domain import usage_model  # noqa: F401
from postgen.main import app
from postgen.services.gemini_service import GeminiClient

SESSION_ID = "session_1717171717171_abc123def45"

VALID_POST = {"post": {"content": "Hello #AI", "imagePrompt": "a city skyline"}}


class FakeGemini:
    """Stands in for the generateContent endpoint behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.status_code = 200
        self.text = "Here is your post:\n" + json.dumps(VALID_POST)
        self.payload = None
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream refused")
        if self.payload is not None:
            return httpx.Response(200, json=self.payload)
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": self.text}]}}]},
        )


def make_token(sub: str = "user-123", secret: str = "test-jwt-secret") -> str:
    return jwt.encode({"sub": sub, "aud": "authenticated"}, secret, algorithm="HS256")


@pytest.fixture
def session_id() -> str:
    return SESSION_ID


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest_asyncio.fixture
async def gemini_client(fake_gemini):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_gemini)) as client:
        yield GeminiClient(client, api_key="test-gemini-key")


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'usage.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def api(session_factory, gemini_client):
    async def _get_db():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_gemini_client] = lambda: gemini_client
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
