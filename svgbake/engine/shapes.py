"""Basic shapes to path commands.

Circles, ellipses and rounded rect corners are emitted as exact arcs. With
``bezier_arcs=True`` circles and ellipses use the usual four-cubic
approximation instead (kappa = 4/3 (sqrt(2) - 1)), for consumers that do not
handle arcs.
"""

from __future__ import annotations

import re
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, TransformInputError, ensure
from svgbake.engine.numeric import ZERO, in_numeric_context, to_decimal
from svgbake.engine.path_data import PathCommand

KAPPA = Decimal("0.5522847498307936")

_POINT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _m(x, y) -> PathCommand:
    return PathCommand("M", False, (x, y))


def _l(x, y) -> PathCommand:
    return PathCommand("L", False, (x, y))


def _a(rx, ry, sweep, x, y) -> PathCommand:
    return PathCommand("A", False, (rx, ry, ZERO, ZERO, Decimal(sweep), x, y))


def _z() -> PathCommand:
    return PathCommand("Z", False)


@in_numeric_context
def ellipse_to_path(cx, cy, rx, ry, bezier_arcs: bool = False) -> list[PathCommand]:
    cx, cy, rx, ry = (to_decimal(v) for v in (cx, cy, rx, ry))
    if rx <= 0 or ry <= 0:
        raise TransformInputError(f"ellipse radii must be positive, got ({rx}, {ry})")

    # start at 3 o'clock and go through 12, 9 and 6 o'clock
    right = (cx + rx, cy)
    top = (cx, cy - ry)
    left = (cx - rx, cy)
    bottom = (cx, cy + ry)

    if not bezier_arcs:
        return [
            _m(*right),
            _a(rx, ry, 0, *top),
            _a(rx, ry, 0, *left),
            _a(rx, ry, 0, *bottom),
            _a(rx, ry, 0, *right),
            _z(),
        ]

    kx = rx * KAPPA
    ky = ry * KAPPA
    return [
        _m(*right),
        PathCommand("C", False, (right[0], right[1] - ky, top[0] + kx, top[1], *top)),
        PathCommand("C", False, (top[0] - kx, top[1], left[0], left[1] - ky, *left)),
        PathCommand("C", False, (left[0], left[1] + ky, bottom[0] - kx, bottom[1], *bottom)),
        PathCommand("C", False, (bottom[0] + kx, bottom[1], right[0], right[1] + ky, *right)),
        _z(),
    ]


def circle_to_path(cx, cy, r, bezier_arcs: bool = False) -> list[PathCommand]:
    return ellipse_to_path(cx, cy, r, r, bezier_arcs=bezier_arcs)


@in_numeric_context
def rect_to_path(x, y, width, height, rx=ZERO, ry=None) -> list[PathCommand]:
    """Rect outline, clockwise from the top-left corner.

    ``ry`` defaults to ``rx`` (and the other way round), and both are clamped
    to half the rect's size.
    """
    x, y, width, height = (to_decimal(v) for v in (x, y, width, height))
    if width <= 0 or height <= 0:
        raise TransformInputError(f"rect size must be positive, got {width}x{height}")
    rx = to_decimal(rx) if rx is not None else None
    ry = to_decimal(ry) if ry is not None else None
    if rx is None:
        rx = ry if ry is not None else ZERO
    if ry is None:
        ry = rx
    if rx < 0 or ry < 0:
        raise TransformInputError(f"rect corner radii must not be negative, got ({rx}, {ry})")
    rx = min(rx, width / 2)
    ry = min(ry, height / 2)

    right = x + width
    bottom = y + height
    if rx == 0 or ry == 0:
        return [_m(x, y), _l(right, y), _l(right, bottom), _l(x, bottom), _z()]

    return [
        _m(x + rx, y),
        _l(right - rx, y),
        _a(rx, ry, 1, right, y + ry),
        _l(right, bottom - ry),
        _a(rx, ry, 1, right - rx, bottom),
        _l(x + rx, bottom),
        _a(rx, ry, 1, x, bottom - ry),
        _l(x, y + ry),
        _a(rx, ry, 1, x + rx, y),
        _z(),
    ]


@in_numeric_context
def line_to_path(x1, y1, x2, y2) -> list[PathCommand]:
    x1, y1, x2, y2 = (to_decimal(v) for v in (x1, y1, x2, y2))
    return [_m(x1, y1), _l(x2, y2)]


@in_numeric_context
def parse_points(points: str, diagnostics: Diagnostics | None = None) -> list[tuple[Decimal, Decimal]]:
    """Coordinate pairs of a ``points`` attribute; an odd trailing value is dropped."""
    diagnostics = ensure(diagnostics)
    values = [Decimal(tok) for tok in _POINT_RE.findall(points or "")]
    if len(values) % 2:
        diagnostics.degenerate("parse_points", f"odd number of coordinates ({len(values)}), dropping the last one")
        values = values[:-1]
    return [(values[i], values[i + 1]) for i in range(0, len(values), 2)]


@in_numeric_context
def polyline_to_path(points: str, diagnostics: Diagnostics | None = None) -> list[PathCommand]:
    pairs = parse_points(points, diagnostics)
    if not pairs:
        return []
    return [_m(*pairs[0])] + [_l(*p) for p in pairs[1:]]


@in_numeric_context
def polygon_to_path(points: str, diagnostics: Diagnostics | None = None) -> list[PathCommand]:
    commands = polyline_to_path(points, diagnostics)
    return commands + [_z()] if commands else []
