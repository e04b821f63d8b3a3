"""objectBoundingBox unit mapping (gradients, patterns, clip and mask content)."""

from __future__ import annotations

from svgbake.engine.diagnostics import Diagnostics, ensure
from svgbake.engine.matrix import IDENTITY, Matrix, scaling, translation
from svgbake.engine.numeric import in_numeric_context, to_decimal


@in_numeric_context
def object_bounding_box_transform(x, y, width, height, diagnostics: Diagnostics | None = None) -> Matrix:
    """``translate(x, y) scale(width, height)``: maps the unit square onto the box.

    A box with no area has no valid mapping; the identity is returned with a
    diagnostic. Non-finite input raises ``TransformInputError``.
    """
    diagnostics = ensure(diagnostics)
    x, y, width, height = (to_decimal(v) for v in (x, y, width, height))
    if width <= 0 or height <= 0:
        diagnostics.degenerate(
            "object_bounding_box_transform",
            f"bounding box {width}x{height} has no area, using identity",
        )
        return IDENTITY
    return translation(x, y) @ scaling(width, height)
