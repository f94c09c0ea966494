from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from postgen.core.config import settings
from postgen.core.constants import FREE_LIMIT_REACHED, GENERIC_ERROR
from postgen.core.database import Base, engine
from postgen.api.controllers import generation_controller
from postgen.api.cors import PreflightCORSMiddleware
from postgen.api.deps import get_db
from postgen.domain import usage_model  # noqa: F401
from postgen.services.errors import GenerationError, QuotaExceeded

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logging.getLogger("httpx").propagate = False
logging.getLogger("httpcore").propagate = False

logger = logging.getLogger("postgen.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.db_auto_create:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    yield

    await engine.dispose()


app = FastAPI(
    title="LinkedIn Post Generator API",
    version="1.0",
    debug=False,
    lifespan=lifespan,
)

ALLOWED_ORIGINS = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(QuotaExceeded)
async def quota_ex_handler(_: Request, exc: QuotaExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": FREE_LIMIT_REACHED,
            "limitReached": True,
            "generationCount": exc.generation_count,
            "message": exc.message,
        },
    )


@app.exception_handler(GenerationError)
async def generation_ex_handler(_: Request, exc: GenerationError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_ex_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_ex_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for e in exc.errors():
        if isinstance(e, dict):
            msg = e.get("msg")
            if msg:
                messages.append(str(msg))

    detail = " | ".join(messages) if messages else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": detail})


@app.exception_handler(Exception)
async def unhandled_ex_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error: {type(exc).__name__}")
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


app.include_router(generation_controller.router)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/ready")
async def ready(session: AsyncSession = Depends(get_db)):
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.error(f"Readiness check failed: {type(exc).__name__} - {str(exc)}")
        return JSONResponse(status_code=503, content={"error": "Database unavailable"})
    return {"db": True, "app": "ready"}
