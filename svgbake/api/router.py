"""Master API router, mounting every endpoint router."""

from __future__ import annotations

from fastapi import APIRouter

from svgbake.api import flatten, health, paths, transform, viewport

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(transform.router)
api_router.include_router(viewport.router)
api_router.include_router(paths.router)
api_router.include_router(flatten.router)
