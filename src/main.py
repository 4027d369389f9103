"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.sm_admin.api.router import router as admin_router
from src.sm_common.enums import LedgerBackend
from src.sm_common.errors import AppError
from src.sm_common.response import error_response
from src.sm_gateway.middleware.request_log import RequestLogMiddleware, request_id_of
from src.sm_market.api.router import router as market_router
from src.sm_market.application.service import get_market_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the ledger database (sql backend) and restore or open the round."""
    engine_db = None
    if settings.LEDGER_BACKEND is LedgerBackend.SQL:
        from sqlalchemy import text

        from src.sm_common.database import engine as engine_db

        async with engine_db.connect() as conn:
            await conn.execute(text("SELECT 1"))
    market = get_market_engine()
    await market.restore()
    logger.info("Round open until %d (backend=%s)", market.deadline, settings.LEDGER_BACKEND.value)
    yield
    if engine_db is not None:
        await engine_db.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc, request_id_of(request))
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(market_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
