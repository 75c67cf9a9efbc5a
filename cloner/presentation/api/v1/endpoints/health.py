"""Health check endpoint — reports version, environment and clone targets."""

from fastapi import APIRouter

from cloner.config import get_settings
from cloner.infrastructure.database.repositories import cloneable_models

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    """Returns the application status with the cloneable tables and destination stores."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "cloneable": sorted(cloneable_models()),
        "destinations": sorted(settings.destination_database_urls),
    }
