"""Transform attribute endpoints: parse, optimize, decompose."""

from __future__ import annotations

from decimal import Context

from fastapi import APIRouter, Depends

from svgbake.config import Settings
from svgbake.dependencies import get_numeric_context, get_settings
from svgbake.engine.decomposition import decompose_matrix, matrix_to_minimal_transform
from svgbake.engine.diagnostics import Diagnostics, TransformInputError
from svgbake.engine.matrix import Matrix
from svgbake.engine.numeric import degrees, format_number
from svgbake.engine.optimization import optimize_transform_string
from svgbake.engine.transform_parser import parse_transform
from svgbake.models.requests import DecomposeRequest, TransformRequest
from svgbake.models.responses import (
    DecomposeResponse,
    MatrixResponse,
    OptimizeResponse,
    diagnostic_models,
)

router = APIRouter(prefix="/transform", tags=["transform"])


def matrix_response(matrix: Matrix, precision: int, diagnostics: Diagnostics, context: Context) -> MatrixResponse:
    minimal = matrix_to_minimal_transform(matrix, precision, context=context)
    return MatrixResponse(
        matrix=[format_number(v, precision) for v in matrix.to_svg_values()],
        svg_matrix=matrix.to_svg_matrix(precision),
        minimal_transform=minimal.transform,
        diagnostics=diagnostic_models(diagnostics),
    )


@router.post("/parse", response_model=MatrixResponse)
def parse(request: TransformRequest, context: Context = Depends(get_numeric_context)) -> MatrixResponse:
    diagnostics = Diagnostics()
    matrix = parse_transform(request.transform, diagnostics, context=context)
    return matrix_response(matrix, request.precision, diagnostics, context)


@router.post("/optimize", response_model=OptimizeResponse)
def optimize(
    request: TransformRequest,
    context: Context = Depends(get_numeric_context),
    settings: Settings = Depends(get_settings),
) -> OptimizeResponse:
    diagnostics = Diagnostics()
    text, result = optimize_transform_string(request.transform, request.precision, diagnostics, context=context)
    return OptimizeResponse(
        transform=text,
        optimization_count=result.optimization_count,
        verified=result.verified and settings.is_verified(result.max_error),
        max_error=str(result.max_error),
        diagnostics=diagnostic_models(diagnostics),
    )


@router.post("/decompose", response_model=DecomposeResponse)
def decompose(
    request: DecomposeRequest,
    context: Context = Depends(get_numeric_context),
    settings: Settings = Depends(get_settings),
) -> DecomposeResponse:
    diagnostics = Diagnostics()
    if request.matrix is not None:
        matrix = Matrix.from_svg_values(*request.matrix, context=context)
    elif request.transform is not None:
        matrix = parse_transform(request.transform, diagnostics, context=context)
    else:
        raise TransformInputError("either transform or matrix is required")

    result = decompose_matrix(matrix, diagnostics, context=context)
    minimal = matrix_to_minimal_transform(matrix, request.precision, context=context)

    def fmt(value) -> str:
        return format_number(value, request.precision)

    return DecomposeResponse(
        translate_x=fmt(result.translate_x),
        translate_y=fmt(result.translate_y),
        rotation_degrees=fmt(degrees(result.rotation)),
        scale_x=fmt(result.scale_x),
        scale_y=fmt(result.scale_y),
        skew_x_degrees=fmt(degrees(result.skew_x)),
        skew_y_degrees=fmt(degrees(result.skew_y)),
        verified=result.verified and settings.is_verified(result.max_error),
        max_error=str(result.max_error),
        singular=result.singular,
        minimal_transform=minimal.transform,
        diagnostics=diagnostic_models(diagnostics),
    )
