"""Path coordinate transformation endpoint."""

from __future__ import annotations

from decimal import Context

from fastapi import APIRouter, Depends

from svgbake.dependencies import get_numeric_context
from svgbake.engine.diagnostics import Diagnostics
from svgbake.engine.path_transform import transform_path_data
from svgbake.engine.transform_parser import parse_transform
from svgbake.models.requests import PathTransformRequest
from svgbake.models.responses import PathTransformResponse, diagnostic_models

router = APIRouter(prefix="/path", tags=["path"])


@router.post("/transform", response_model=PathTransformResponse)
def transform_path(
    request: PathTransformRequest, context: Context = Depends(get_numeric_context)
) -> PathTransformResponse:
    diagnostics = Diagnostics()
    matrix = parse_transform(request.transform, diagnostics, context=context)
    d = transform_path_data(
        request.d,
        matrix,
        request.precision,
        request.to_absolute,
        diagnostics,
        context=context,
    )
    return PathTransformResponse(
        d=d,
        verified=not diagnostics.has_fatal,
        diagnostics=diagnostic_models(diagnostics),
    )
