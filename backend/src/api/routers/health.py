"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str
    storage: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Check database connectivity and that the image storage root is usable."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    storage_status = "healthy" if settings.storage_path.is_dir() else "unavailable"

    return HealthResponse(
        status="healthy" if db_status == storage_status == "healthy" else "degraded",
        database=db_status,
        storage=storage_status,
    )
