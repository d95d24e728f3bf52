from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import stockdrop.models  # noqa: F401
from stockdrop.api.v1.router import api_router
from stockdrop.core.config import settings
from stockdrop.core.database import Base, engine
from stockdrop.core.errors import StockDropError, response_status
from stockdrop.core.logging import configure_logging
from stockdrop.core.preferences import preferences
from stockdrop.core.rate_limit import RateLimitMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    await preferences.connect()
    logger.info("StockDrop API started (env=%s, preferences=%s)", settings.env, preferences.backend)
    yield
    await preferences.close()


app = FastAPI(
    title="StockDrop API",
    version="1.0.0",
    description="Daily market movers, screening and drop alerts.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    RateLimitMiddleware,
    limit=settings.rate_limit_per_minute,
    window_seconds=60,
    trusted_proxies=settings.proxy_hosts,
)


@app.exception_handler(StockDropError)
async def stockdrop_error_handler(request: Request, exc: StockDropError):
    status_code = response_status(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.message, "error": exc.kind})


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.api_v1_prefix)
