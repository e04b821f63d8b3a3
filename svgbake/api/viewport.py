"""CTM construction endpoint."""

from __future__ import annotations

from decimal import Context

from fastapi import APIRouter, Depends

from svgbake.api.transform import matrix_response
from svgbake.dependencies import get_numeric_context
from svgbake.engine.diagnostics import Diagnostics
from svgbake.engine.viewport import ElementEntry, GroupEntry, HierarchyEntry, SvgEntry, build_full_ctm
from svgbake.models.requests import CTMRequest, HierarchyItem
from svgbake.models.responses import MatrixResponse

router = APIRouter(prefix="/viewport", tags=["viewport"])


def _entry(item: HierarchyItem) -> HierarchyEntry:
    if item.type == "svg":
        return SvgEntry(
            width=item.width,
            height=item.height,
            view_box=item.view_box,
            preserve_aspect_ratio=item.preserve_aspect_ratio,
            transform=item.transform,
        )
    if item.type == "g":
        return GroupEntry(transform=item.transform)
    if item.type == "element":
        return ElementEntry(transform=item.transform)
    return item.transform or ""


@router.post("/ctm", response_model=MatrixResponse)
def ctm(request: CTMRequest, context: Context = Depends(get_numeric_context)) -> MatrixResponse:
    diagnostics = Diagnostics()
    matrix = build_full_ctm([_entry(item) for item in request.hierarchy], diagnostics, context=context)
    return matrix_response(matrix, request.precision, diagnostics, context)
