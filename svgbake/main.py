"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from svgbake.config import settings
from svgbake.engine.diagnostics import TransformInputError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.svgbake_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="svgbake",
        description="Arbitrary-precision SVG transform flattening with verified results",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TransformInputError)
    async def _input_error(request: Request, exc: TransformInputError) -> JSONResponse:
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    from svgbake.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
