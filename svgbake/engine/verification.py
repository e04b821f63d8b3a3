"""Independent checks of engine results.

The algebraic checks run in Decimal at the active precision with a tolerance
ten digits looser than that precision. The geometric checks
(:func:`cross_check_arc`, :func:`verify_path_transformation`) work in floats
with numpy, svgpathtools and shapely, so they share no code path with the
Decimal engine they are checking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, getcontext

import numpy as np
from shapely.geometry import LineString, Point
from svgpathtools import parse_path

from svgbake.engine.arc import EllipticalArc
from svgbake.engine.matrix import IDENTITY, Matrix
from svgbake.engine.numeric import ZERO, in_numeric_context, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    valid: bool
    error: Decimal
    tolerance: Decimal
    message: str
    details: dict[str, str] = field(default_factory=dict)


@in_numeric_context
def compute_tolerance() -> Decimal:
    """Ten orders of magnitude looser than the active precision."""
    exponent = max(1, getcontext().prec - 10)
    return Decimal(1).scaleb(-exponent)


@in_numeric_context
def verify_transform_round_trip(matrix: Matrix, x, y) -> VerificationResult:
    """Map a point forward and back and compare with where it started."""
    tolerance = compute_tolerance()
    inverse = matrix.inverse()
    if inverse is None:
        return VerificationResult(False, ZERO, tolerance, "matrix is singular, round trip impossible")
    x = to_decimal(x)
    y = to_decimal(y)
    forward = matrix.apply(x, y)
    back = inverse.apply(forward.x, forward.y)
    error = max(abs(back.x - x), abs(back.y - y))
    valid = error < tolerance
    return VerificationResult(
        valid,
        error,
        tolerance,
        "round trip recovered the point" if valid else f"round trip error {error:.3e} exceeds tolerance",
    )


@in_numeric_context
def verify_matrix_inversion(matrix: Matrix) -> VerificationResult:
    """``M @ inverse(M)`` must be the identity."""
    tolerance = compute_tolerance()
    inverse = matrix.inverse()
    if inverse is None:
        return VerificationResult(False, ZERO, tolerance, "matrix is singular")
    error = (matrix @ inverse).max_difference(IDENTITY)
    valid = error < tolerance
    return VerificationResult(
        valid,
        error,
        tolerance,
        "M @ inverse(M) is the identity" if valid else f"inversion error {error:.3e} exceeds tolerance",
    )


@in_numeric_context
def verify_multiplication_associativity(a: Matrix, b: Matrix, c: Matrix) -> VerificationResult:
    """``(A B) C`` must equal ``A (B C)``."""
    tolerance = compute_tolerance()
    error = ((a @ b) @ c).max_difference(a @ (b @ c))
    valid = error < tolerance
    return VerificationResult(
        valid,
        error,
        tolerance,
        "multiplication is associative" if valid else f"associativity error {error:.3e} exceeds tolerance",
    )


def _triangle_area(p, q, r) -> Decimal:
    return abs((q[0] - p[0]) * (r[1] - p[1]) - (r[0] - p[0]) * (q[1] - p[1])) / 2


@in_numeric_context
def verify_transform_geometry(matrix: Matrix, points: list[tuple]) -> VerificationResult:
    """Triangle area must scale by ``|det|`` and collinearity must survive."""
    tolerance = compute_tolerance()
    if len(points) < 3:
        return VerificationResult(False, ZERO, tolerance, "need at least 3 points")
    original = [(to_decimal(x), to_decimal(y)) for x, y in points[:3]]
    mapped = [tuple(matrix.apply(x, y)) for x, y in original]
    original_area = _triangle_area(*original)
    mapped_area = _triangle_area(*mapped)
    expected = abs(matrix.determinant()) * original_area
    error = abs(mapped_area - expected)
    if original_area > 0:
        error = error / original_area
    collinear_before = original_area < tolerance
    collinear_after = mapped_area < tolerance
    valid = error < tolerance and (collinear_before == collinear_after or matrix.inverse() is None)
    return VerificationResult(
        valid,
        error,
        tolerance,
        "area and collinearity preserved" if valid else "area scaling or collinearity not preserved",
        details={"original_area": str(original_area), "mapped_area": str(mapped_area)},
    )


def cross_check_arc(original: EllipticalArc, matrix: Matrix, transformed: EllipticalArc) -> float:
    """Largest relative radius difference against a float eigen-decomposition.

    Uses ``numpy.linalg.eigh`` on the transformed ellipse's shape matrix; only
    meaningful for arcs with positive radii.
    """
    a, b, c, d = (float(v) for v in (matrix.a, matrix.b, matrix.c, matrix.d))
    phi = np.radians(float(original.x_axis_rotation))
    axes = np.array(
        [
            [float(original.rx) * np.cos(phi), -float(original.ry) * np.sin(phi)],
            [float(original.rx) * np.sin(phi), float(original.ry) * np.cos(phi)],
        ]
    )
    mapped = np.array([[a, c], [b, d]]) @ axes
    eigenvalues = np.linalg.eigh(mapped @ mapped.T)[0]
    radii = np.sqrt(np.clip(eigenvalues, 0.0, None))[::-1]
    expected = np.array([float(transformed.rx), float(transformed.ry)])
    scale = max(float(radii[0]), 1e-12)
    return float(np.max(np.abs(radii - expected)) / scale)


def _sample_segments(path, samples: int) -> list[complex]:
    points: list[complex] = []
    for segment in path:
        for t in np.linspace(0, 1, samples):
            points.append(segment.point(t))
    return points


def verify_path_transformation(
    original_d: str,
    transformed_d: str,
    matrix: Matrix,
    tolerance: float = 1e-3,
    samples: int = 64,
) -> VerificationResult:
    """Compare a baked path with the original path mapped by ``matrix``.

    Samples the original path, maps each sample with ``matrix`` and measures
    its distance to a dense polyline of the transformed path.
    """
    original = parse_path(original_d)
    transformed = parse_path(transformed_d)
    if len(original) == 0:
        valid = len(transformed) == 0
        return VerificationResult(
            valid, ZERO, to_decimal(tolerance), "empty path" if valid else "segments appeared from nothing"
        )
    if len(transformed) == 0:
        return VerificationResult(False, ZERO, to_decimal(tolerance), "transformed path is empty")

    a, b, c, d, e, f = matrix.to_floats()
    outline = LineString([(p.real, p.imag) for p in _sample_segments(transformed, samples * 8)])

    worst = 0.0
    for p in _sample_segments(original, samples):
        x = a * p.real + c * p.imag + e
        y = b * p.real + d * p.imag + f
        worst = max(worst, outline.distance(Point(x, y)))

    valid = worst <= tolerance
    if not valid:
        logger.warning("Path verification failed: max deviation %.6g > %.6g", worst, tolerance)
    return VerificationResult(
        valid,
        to_decimal(worst),
        to_decimal(tolerance),
        "transformed path matches" if valid else f"max deviation {worst:.6g} exceeds tolerance",
    )
