"""Matrix decomposition and composition.

Decomposition order is fixed as ``M = T R SkewX S``: translate, then rotate,
then skew along x, then scale. Every non-singular affine matrix has exactly
one such factorization (it is a QR factorization of the 2x2 block), so
skew along y is never needed and always comes back as zero. Each
decomposition is recomposed and compared against its input; the outcome is
reported as ``verified`` / ``max_error`` rather than assumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, ensure
from svgbake.engine.matrix import IDENTITY, Matrix, multiply, rotation, scaling, skew_x, skew_y, translation
from svgbake.engine.numeric import (
    EPSILON,
    ONE,
    VERIFICATION_TOLERANCE,
    ZERO,
    atan,
    atan2,
    cos,
    degrees,
    format_number,
    in_numeric_context,
    is_zero,
    sin,
    sqrt,
)


@dataclass(frozen=True)
class TransformComponents:
    translate_x: Decimal = ZERO
    translate_y: Decimal = ZERO
    rotation: Decimal = ZERO  # radians
    scale_x: Decimal = ONE
    scale_y: Decimal = ONE
    skew_x: Decimal = ZERO  # radians
    skew_y: Decimal = ZERO  # radians, always zero when produced by decompose_matrix


@dataclass(frozen=True)
class Decomposition(TransformComponents):
    verified: bool = False
    max_error: Decimal = ZERO
    singular: bool = False


@dataclass(frozen=True)
class MinimalTransform:
    transform: str  # empty for the identity
    is_identity: bool
    verified: bool


@in_numeric_context
def compose_transform(components: TransformComponents) -> Matrix:
    """``T R SkewY SkewX S`` from components."""
    return multiply(
        translation(components.translate_x, components.translate_y),
        rotation(components.rotation),
        skew_y(components.skew_y),
        skew_x(components.skew_x),
        scaling(components.scale_x, components.scale_y),
    )


@in_numeric_context
def compose_transform_no_skew(components: TransformComponents) -> Matrix:
    """``T R S``; skew components are ignored."""
    return multiply(
        translation(components.translate_x, components.translate_y),
        rotation(components.rotation),
        scaling(components.scale_x, components.scale_y),
    )


@in_numeric_context
def decompose_matrix(matrix: Matrix, diagnostics: Diagnostics | None = None) -> Decomposition:
    """Factor ``matrix`` as ``T R SkewX S``.

    The sign of ``scale_x`` follows the determinant so a reflection is carried
    by the scale rather than by a skew. A first column shorter than EPSILON
    cannot be factored: the result is flagged ``singular`` with zero
    rotation, scale and skew, and the translation preserved.
    """
    diagnostics = ensure(diagnostics)
    a, b, c, d, e, f = matrix.to_svg_values()
    det = a * d - b * c
    norm_x = sqrt(a * a + b * b)

    if norm_x < EPSILON:
        components = TransformComponents(
            translate_x=e, translate_y=f, rotation=ZERO, scale_x=ZERO, scale_y=ZERO, skew_x=ZERO
        )
        max_error = matrix.max_difference(compose_transform(components))
        diagnostics.degenerate("decompose_matrix", "first column is zero, matrix is singular")
        return Decomposition(
            translate_x=e,
            translate_y=f,
            rotation=ZERO,
            scale_x=ZERO,
            scale_y=ZERO,
            skew_x=ZERO,
            skew_y=ZERO,
            verified=max_error < VERIFICATION_TOLERANCE,
            max_error=max_error,
            singular=True,
        )

    if det < 0:
        scale_x = -norm_x
        angle = atan2(-b, -a)
    else:
        scale_x = norm_x
        angle = atan2(b, a)
    scale_y = det / scale_x

    # Second column rotated back by -angle is (tan(skew) * scale_y, scale_y)
    rotated_c = c * cos(angle) + d * sin(angle)
    if abs(scale_y) > EPSILON:
        skew = atan(rotated_c / scale_y)
    else:
        skew = ZERO
        diagnostics.degenerate("decompose_matrix", "matrix has rank 1, skew cannot be recovered")

    components = TransformComponents(
        translate_x=e,
        translate_y=f,
        rotation=angle,
        scale_x=scale_x,
        scale_y=scale_y,
        skew_x=skew,
    )
    max_error = matrix.max_difference(compose_transform(components))
    return Decomposition(
        translate_x=e,
        translate_y=f,
        rotation=angle,
        scale_x=scale_x,
        scale_y=scale_y,
        skew_x=skew,
        skew_y=ZERO,
        verified=max_error < VERIFICATION_TOLERANCE,
        max_error=max_error,
        singular=False,
    )


@in_numeric_context
def decompose_matrix_no_skew(matrix: Matrix) -> Decomposition:
    """Factor as ``T R S``; verifies only when the matrix has no skew."""
    a, b, c, d, e, f = matrix.to_svg_values()
    det = a * d - b * c
    angle = atan2(b, a)
    scale_x = sqrt(a * a + b * b)
    scale_y = sqrt(c * c + d * d)
    if det < 0:
        scale_y = -scale_y
    components = TransformComponents(
        translate_x=e, translate_y=f, rotation=angle, scale_x=scale_x, scale_y=scale_y
    )
    max_error = matrix.max_difference(compose_transform_no_skew(components))
    return Decomposition(
        translate_x=e,
        translate_y=f,
        rotation=angle,
        scale_x=scale_x,
        scale_y=scale_y,
        verified=max_error < VERIFICATION_TOLERANCE,
        max_error=max_error,
        singular=scale_x < EPSILON,
    )


@in_numeric_context
def verify_decomposition(original: Matrix, components: TransformComponents) -> tuple[bool, Decimal]:
    """Recompose ``components`` and compare with ``original``."""
    max_error = original.max_difference(compose_transform(components))
    return max_error < VERIFICATION_TOLERANCE, max_error


@in_numeric_context
def is_identity(matrix: Matrix) -> bool:
    return matrix.equals(IDENTITY, EPSILON)


@in_numeric_context
def is_pure_translation(matrix: Matrix) -> bool:
    return (
        is_zero(matrix.a - 1) and is_zero(matrix.b) and is_zero(matrix.c) and is_zero(matrix.d - 1)
    )


@in_numeric_context
def pure_rotation_angle(matrix: Matrix) -> Decimal | None:
    """Angle of a rotation about the origin, or None if ``matrix`` is not one."""
    a, b, c, d, e, f = matrix.to_svg_values()
    if not (is_zero(e) and is_zero(f)):
        return None
    orthogonal = is_zero(a * c + b * d)
    unit = is_zero(a * a + b * b - 1) and is_zero(c * c + d * d - 1)
    proper = is_zero(a * d - b * c - 1)
    if orthogonal and unit and proper:
        return atan2(b, a)
    return None


@in_numeric_context
def is_pure_rotation(matrix: Matrix) -> bool:
    return pure_rotation_angle(matrix) is not None


@in_numeric_context
def is_pure_scale(matrix: Matrix) -> bool:
    return is_zero(matrix.b) and is_zero(matrix.c) and is_zero(matrix.e) and is_zero(matrix.f)


@in_numeric_context
def decomposition_to_svg_string(components: TransformComponents, precision: int = 6) -> str:
    """Transform attribute text for ``components``, identity parts omitted."""
    if precision < 0:
        raise ValueError("precision must be a non-negative integer")

    def fmt(value: Decimal) -> str:
        return format_number(value, precision)

    parts = []
    if not (is_zero(components.translate_x) and is_zero(components.translate_y)):
        if is_zero(components.translate_y):
            parts.append(f"translate({fmt(components.translate_x)})")
        else:
            parts.append(f"translate({fmt(components.translate_x)} {fmt(components.translate_y)})")
    if not is_zero(components.rotation):
        parts.append(f"rotate({fmt(degrees(components.rotation))})")
    if not is_zero(components.skew_y):
        parts.append(f"skewY({fmt(degrees(components.skew_y))})")
    if not is_zero(components.skew_x):
        parts.append(f"skewX({fmt(degrees(components.skew_x))})")
    if not (is_zero(components.scale_x - 1) and is_zero(components.scale_y - 1)):
        if is_zero(components.scale_x - components.scale_y):
            parts.append(f"scale({fmt(components.scale_x)})")
        else:
            parts.append(f"scale({fmt(components.scale_x)} {fmt(components.scale_y)})")
    return " ".join(parts)


@in_numeric_context
def matrix_to_minimal_transform(matrix: Matrix, precision: int = 6) -> MinimalTransform:
    """Shortest transform attribute for ``matrix``.

    Falls back to ``matrix(...)`` when the decomposition does not verify.
    """
    if is_identity(matrix):
        return MinimalTransform(transform="", is_identity=True, verified=True)
    decomposition = decompose_matrix(matrix)
    if not decomposition.verified:
        return MinimalTransform(transform=matrix.to_svg_matrix(precision), is_identity=False, verified=True)
    return MinimalTransform(
        transform=decomposition_to_svg_string(decomposition, precision),
        is_identity=False,
        verified=True,
    )
