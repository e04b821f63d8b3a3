"""Length resolution: SVG length strings to user units (px)."""

from __future__ import annotations

import re
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, TransformInputError, ensure
from svgbake.engine.numeric import ZERO, in_numeric_context, sqrt, to_decimal

DEFAULT_DPI = 96
# Font-relative units assume the browser default font size
FONT_SIZE_PX = 16

_LENGTH_RE = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-zA-Z%]*)$")


def _units_per_px(dpi: Decimal) -> dict[str, Decimal]:
    return {
        "": Decimal(1),
        "px": Decimal(1),
        "em": Decimal(FONT_SIZE_PX),
        "rem": Decimal(FONT_SIZE_PX),
        "ex": Decimal(FONT_SIZE_PX) / 2,
        "pt": dpi / 72,
        "pc": dpi / 6,
        "in": dpi,
        "cm": dpi / Decimal("2.54"),
        "mm": dpi / Decimal("25.4"),
        "q": dpi / Decimal("101.6"),
    }


@in_numeric_context
def resolve_length(value, reference=ZERO, dpi=DEFAULT_DPI, diagnostics: Diagnostics | None = None) -> Decimal:
    """Resolve a length to user units.

    Percentages resolve against ``reference``. Malformed lengths resolve to 0
    and unknown units are read as px, both with a diagnostic.
    """
    diagnostics = ensure(diagnostics)
    if value is None:
        raise TransformInputError("length value is required")

    try:
        dpi = to_decimal(dpi)
    except TransformInputError:
        dpi = Decimal(DEFAULT_DPI)
    if dpi <= 0:
        diagnostics.degenerate("resolve_length", f"invalid dpi {dpi}, using {DEFAULT_DPI}")
        dpi = Decimal(DEFAULT_DPI)

    if not isinstance(value, str):
        return to_decimal(value)

    match = _LENGTH_RE.match(value.strip())
    if match is None:
        diagnostics.degenerate("resolve_length", f"invalid length {value!r}, using 0")
        return ZERO
    number = Decimal(match.group(1))
    unit = match.group(2).lower()
    if unit == "%":
        return number / 100 * to_decimal(reference)
    factors = _units_per_px(dpi)
    if unit not in factors:
        diagnostics.degenerate("resolve_length", f"unknown unit {unit!r} in {value!r}, treating as px")
        return number
    return number * factors[unit]


@in_numeric_context
def resolve_percentages(x_or_width, y_or_height, viewport_width, viewport_height, dpi=DEFAULT_DPI):
    """Resolve a horizontal and a vertical length against the viewport."""
    return (
        resolve_length(x_or_width, viewport_width, dpi),
        resolve_length(y_or_height, viewport_height, dpi),
    )


@in_numeric_context
def normalized_diagonal(width, height) -> Decimal:
    """Reference length for non-directional percentages (``r``, stroke-width)."""
    width = to_decimal(width)
    height = to_decimal(height)
    return sqrt(width * width + height * height) / sqrt(Decimal(2))
