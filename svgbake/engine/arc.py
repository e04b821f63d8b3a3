"""Elliptical arc transformation.

An affine image of an ellipse is an ellipse, so an ``A`` command survives any
non-degenerate CTM. The transformed arc is found from the ellipse's shape
matrix: the axis vectors ``u = M (rx cos t, rx sin t)`` and
``v = M (-ry sin t, ry cos t)`` give ``S = [u v][u v]^T``, whose eigenvalues
are the squared new radii and whose eigenvectors are the new axes.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, ensure
from svgbake.engine.matrix import Matrix
from svgbake.engine.numeric import (
    EPSILON,
    VERIFICATION_TOLERANCE,
    ZERO,
    atan,
    cos,
    degrees,
    in_numeric_context,
    is_zero,
    pi,
    radians,
    sin,
    to_decimal,
)


@dataclass(frozen=True)
class EllipticalArc:
    rx: Decimal
    ry: Decimal
    x_axis_rotation: Decimal  # degrees
    large_arc: int
    sweep: int
    x: Decimal  # endpoint
    y: Decimal


@dataclass(frozen=True)
class ArcTransform:
    arc: EllipticalArc
    verified: bool
    max_error: Decimal


def _coerce_flag(name: str, value, diagnostics: Diagnostics) -> int:
    if value in (0, 1):
        return int(value)
    coerced = 1 if value else 0
    diagnostics.degenerate("transform_arc", f"{name} must be 0 or 1, got {value!r}; using {coerced}")
    return coerced


def _shape_matrix(rx: Decimal, ry: Decimal, angle: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """``(S00, S01, S11)`` of ``R diag(rx^2, ry^2) R^T``."""
    c = cos(angle)
    s = sin(angle)
    rx2 = rx * rx
    ry2 = ry * ry
    return (
        rx2 * c * c + ry2 * s * s,
        (rx2 - ry2) * s * c,
        rx2 * s * s + ry2 * c * c,
    )


@in_numeric_context
def transform_arc(arc: EllipticalArc, matrix: Matrix, diagnostics: Diagnostics | None = None) -> ArcTransform:
    """Apply ``matrix`` to an arc, returning the arc and its self-check."""
    diagnostics = ensure(diagnostics)
    large_arc = _coerce_flag("large_arc", arc.large_arc, diagnostics)
    sweep = _coerce_flag("sweep", arc.sweep, diagnostics)
    rx = to_decimal(arc.rx)
    ry = to_decimal(arc.ry)
    end = matrix.apply(arc.x, arc.y)

    if rx <= 0 or ry <= 0:
        diagnostics.degenerate("transform_arc", f"arc radii ({rx}, {ry}) are not positive, using a zero-radius arc")
        if matrix.determinant() < 0:
            sweep = 1 - sweep
        result = EllipticalArc(ZERO, ZERO, ZERO, large_arc, sweep, end.x, end.y)
        return ArcTransform(arc=result, verified=True, max_error=ZERO)

    a, b, c, d, _, _ = matrix.to_svg_values()
    phi = radians(to_decimal(arc.x_axis_rotation))
    cos_phi = cos(phi)
    sin_phi = sin(phi)

    m0 = a * rx * cos_phi + c * rx * sin_phi
    m1 = b * rx * cos_phi + d * rx * sin_phi
    m2 = -a * ry * sin_phi + c * ry * cos_phi
    m3 = -b * ry * sin_phi + d * ry * cos_phi

    big_a = m0 * m0 + m2 * m2
    big_c = m1 * m1 + m3 * m3
    big_b = 2 * (m0 * m1 + m2 * m3)
    diff = big_a - big_c

    if is_zero(big_b):
        angle = ZERO
        lambda_1, lambda_2 = big_a, big_c
    elif is_zero(diff):
        angle = pi() / 4
        lambda_1 = big_a + big_b / 2
        lambda_2 = big_a - big_b / 2
    else:
        k = (1 + (big_b * big_b) / (diff * diff)).sqrt()
        lambda_1 = (big_a + big_c + k * diff) / 2
        lambda_2 = (big_a + big_c - k * diff) / 2
        angle = atan(big_b / diff) / 2

    # eigenvalues of a Gram matrix are never negative; clamp rounding noise
    lambda_1 = max(lambda_1, ZERO)
    lambda_2 = max(lambda_2, ZERO)
    new_rx = lambda_1.sqrt()
    new_ry = lambda_2.sqrt()
    if new_ry > new_rx:
        new_rx, new_ry = new_ry, new_rx
        angle += pi() / 2

    if matrix.determinant() < 0:
        sweep = 1 - sweep
    if new_ry < EPSILON:
        diagnostics.degenerate("transform_arc", "matrix collapses the arc's ellipse to a line")

    rotation = degrees(angle)
    while rotation < 0:
        rotation += 180
    while rotation >= 180:
        rotation -= 180

    s00, s01, s11 = _shape_matrix(new_rx, new_ry, angle)
    max_error = max(abs(s00 - big_a), abs(s01 - big_b / 2), abs(s11 - big_c))
    result = EllipticalArc(new_rx, new_ry, rotation, large_arc, sweep, end.x, end.y)
    return ArcTransform(arc=result, verified=max_error < VERIFICATION_TOLERANCE, max_error=max_error)
