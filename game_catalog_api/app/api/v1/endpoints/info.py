"""
Service information endpoints for API v1.

A small public route used by load balancers and deployment tooling to
check that the service is up and which version is running.
"""

from typing import Dict

from fastapi import APIRouter

from game_catalog_api.app.core.config import settings

router = APIRouter()


@router.get("/health", response_model=Dict[str, str])
async def health() -> Dict[str, str]:
    """Return a static liveness payload with the service name and version."""
    return {"status": "ok", "service": settings.project_name, "version": settings.api_version}
