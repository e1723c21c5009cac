"""
Payment Lifecycle - Main Application Entry Point

Client payment agreements for land lot sales: schedules, ledger
reconciliation, status classification and payment recording.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from payment_lifecycle import __version__
from payment_lifecycle.core.config import settings
from payment_lifecycle.core.logging import setup_logging
from payment_lifecycle.core.metrics import get_metrics, get_metrics_content_type
from payment_lifecycle.infrastructure.database import db_manager
from payment_lifecycle.presentation.api import api_router
from payment_lifecycle.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Set up logging
    - Initialize the database engine (and tables when running in debug)
    - Dispose the engine on shutdown
    """
    setup_logging()
    db_manager.init()
    if settings.debug:
        await db_manager.create_tables()

    logger = structlog.get_logger(__name__)
    logger.info("application_started", version=__version__, app=settings.app_name)

    yield

    await db_manager.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Payment Lifecycle",
    description="Installment payment lifecycle service for client land purchases",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

error_handler_middleware(app)

app.include_router(api_router)


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=get_metrics(),
        media_type=get_metrics_content_type(),
    )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""

    return RedirectResponse(url="/docs")


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "payment_lifecycle.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
