"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from cloner.presentation.api.v1.endpoints.health import router as health_router
from cloner.presentation.api.v1.endpoints.clones import router as clones_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(clones_router)
