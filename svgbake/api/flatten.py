"""Document flattening endpoint."""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Context

from fastapi import APIRouter, Depends

from svgbake.config import Settings
from svgbake.dependencies import get_numeric_context, get_settings
from svgbake.models.requests import FlattenRequest
from svgbake.models.responses import FlattenResponse, diagnostic_models
from svgbake.svg.flatten import flatten_svg

logger = logging.getLogger(__name__)

router = APIRouter(tags=["flatten"])


@router.post("/flatten", response_model=FlattenResponse)
def flatten(
    request: FlattenRequest,
    context: Context = Depends(get_numeric_context),
    settings: Settings = Depends(get_settings),
) -> FlattenResponse:
    options = replace(
        settings.flatten_options(),
        precision=request.precision,
        bezier_arcs=request.bezier_arcs,
        verify=request.verify,
    )
    report = flatten_svg(request.svg, options, context=context)
    if not report.verified:
        logger.warning("Flatten produced %d unverified elements", len(report.verification_failures))
    return FlattenResponse(
        svg=report.svg,
        baked_elements=report.baked_elements,
        converted_shapes=report.converted_shapes,
        kept_transforms=report.kept_transforms,
        verified=report.verified,
        verification_failures=report.verification_failures,
        processing_time_ms=report.processing_time_ms,
        diagnostics=diagnostic_models(report.diagnostics),
    )
