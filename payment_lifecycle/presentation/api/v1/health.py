"""Health check endpoint for service monitoring."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from payment_lifecycle import __version__
from payment_lifecycle.core.config import settings
from payment_lifecycle.infrastructure.database import get_db_session

logger = structlog.get_logger(__name__)

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
    version: str
    database: str = "ok"


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Returns the health status of the service and its agreement store.",
)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> HealthResponse:
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("health_database_unavailable", error=str(e))
        return HealthResponse(
            status="degraded",
            service=settings.app_name,
            version=__version__,
            database="unavailable",
        )

    return HealthResponse(service=settings.app_name, version=__version__)
