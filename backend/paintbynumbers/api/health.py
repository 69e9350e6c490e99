"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from paintbynumbers import __version__
from paintbynumbers.config import Settings
from paintbynumbers.dependencies import get_settings
from paintbynumbers.engine.registry import get_registry
from paintbynumbers.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    registry = get_registry()
    return HealthResponse(
        status="ok",
        version=__version__,
        environment=settings.pbn_env,
        stages_registered=registry.count,
        stages=[s.id for s in registry.all()],
    )
