"""Health check endpoints."""
import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_optional_publish_service
from db.session import get_async_session
from services.publish_service import PublishService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """
    Service health.

    ``github`` reports whether publishing is set up. It never degrades the
    overall status: editing and deleting prompts work without it.
    """

    status: Literal["healthy", "degraded"]
    database: Literal["healthy", "unhealthy"]
    github: Literal["configured", "not_configured"]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    publisher: PublishService | None = Depends(get_optional_publish_service),
) -> HealthResponse:
    """Check database connectivity and report the publishing setup."""
    database = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "unhealthy"

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
        github="configured" if publisher is not None else "not_configured",
    )
