"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from svgbake.config import Settings
from svgbake.dependencies import get_settings
from svgbake.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(status="ok", version="0.1.0", precision=settings.svgbake_precision)
