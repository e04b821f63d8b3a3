"""Transform list optimization.

Shortens a list of named transforms without changing the matrix it
represents. Every rewrite builds the replacement primitive's matrix and the
replaced sub-product independently and compares them; a rewrite that does not
agree within VERIFICATION_TOLERANCE is skipped and the original operations are
kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Generic, TypeVar

from svgbake.engine.diagnostics import Diagnostics, ensure
from svgbake.engine.matrix import Matrix, rotation, rotation_about, translation
from svgbake.engine.numeric import (
    EPSILON,
    VERIFICATION_TOLERANCE,
    atan2,
    in_numeric_context,
    is_zero,
    normalize_angle,
    pi,
    to_decimal,
)
from svgbake.engine.transform_parser import parse_transform_list
from svgbake.engine.transforms import (
    MatrixTransform,
    NamedTransform,
    Rotate,
    Scale,
    Translate,
    serialize_transform_list,
    transform_list_matrix,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Rewrite(Generic[T]):
    """A rewritten value with its proof of equivalence."""

    value: T
    verified: bool
    max_error: Decimal


@dataclass(frozen=True)
class IdentityRemoval:
    transforms: list[NamedTransform]
    removed_count: int


@dataclass
class OptimizationResult:
    transforms: list[NamedTransform]
    optimization_count: int  # len(original) - len(transforms)
    verified: bool
    max_error: Decimal
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def _prove(value: T, expected: Matrix, actual: Matrix) -> Rewrite[T]:
    max_error = expected.max_difference(actual)
    return Rewrite(value=value, verified=max_error < VERIFICATION_TOLERANCE, max_error=max_error)


# --- pairwise merges ------------------------------------------------------


@in_numeric_context
def merge_translations(first: Translate, second: Translate) -> Rewrite[Translate]:
    merged = Translate(first.tx + second.tx, first.ty + second.ty)
    return _prove(merged, first.matrix() @ second.matrix(), merged.matrix())


@in_numeric_context
def merge_rotations(first: Rotate, second: Rotate) -> Rewrite[Rotate]:
    """Sum two rotations about the origin, normalized into (-pi, pi]."""
    merged = Rotate(normalize_angle(first.angle + second.angle))
    return _prove(merged, first.matrix() @ second.matrix(), merged.matrix())


@in_numeric_context
def merge_scales(first: Scale, second: Scale) -> Rewrite[Scale]:
    merged = Scale(first.sx * second.sx, first.sy * second.sy)
    return _prove(merged, first.matrix() @ second.matrix(), merged.matrix())


@in_numeric_context
def short_rotate(tx, ty, angle, cx, cy) -> Rewrite[Rotate]:
    """Prove ``translate(tx, ty) rotate(angle) translate(-tx, -ty)`` equals
    ``rotate(angle, cx, cy)``."""
    tx, ty, angle, cx, cy = (to_decimal(v) for v in (tx, ty, angle, cx, cy))
    sequence = translation(tx, ty) @ rotation(angle) @ translation(-tx, -ty)
    shorthand = Rotate(angle, cx, cy)
    return _prove(shorthand, sequence, rotation_about(angle, cx, cy))


# --- matrix downgrades ----------------------------------------------------


@in_numeric_context
def matrix_to_translate(matrix: Matrix) -> Rewrite[Translate] | None:
    """``translate(e, f)`` when the linear part is the identity."""
    if not (
        is_zero(matrix.a - 1) and is_zero(matrix.b) and is_zero(matrix.c) and is_zero(matrix.d - 1)
    ):
        return None
    candidate = Translate(matrix.e, matrix.f)
    return _prove(candidate, matrix, candidate.matrix())


@in_numeric_context
def matrix_to_rotate(matrix: Matrix) -> Rewrite[Rotate] | None:
    """``rotate(angle)`` or ``rotate(angle, cx, cy)`` when the linear part is a
    proper rotation.

    A rotation about a point ``p`` maps ``p`` to itself, so the center solves
    ``(I - R) p = t``; that system is singular only for a zero angle, which
    :func:`matrix_to_translate` already covers.
    """
    a, b, c, d, e, f = matrix.to_svg_values()
    orthogonal = is_zero(a * c + b * d)
    unit = is_zero(a * a + b * b - 1) and is_zero(c * c + d * d - 1)
    proper = is_zero(a * d - b * c - 1)
    if not (orthogonal and unit and proper):
        return None
    angle = atan2(b, a)
    if is_zero(e) and is_zero(f):
        candidate = Rotate(angle)
        return _prove(candidate, matrix, candidate.matrix())
    # det(I - R) = (1 - a)^2 + b^2
    det = (1 - a) * (1 - a) + b * b
    if det < EPSILON:
        return None
    cx = ((1 - a) * e - b * f) / det
    cy = (b * e + (1 - a) * f) / det
    candidate = Rotate(angle, cx, cy)
    return _prove(candidate, matrix, candidate.matrix())


@in_numeric_context
def matrix_to_scale(matrix: Matrix) -> Rewrite[Scale] | None:
    """``scale(a, d)`` when ``matrix`` is diagonal with no translation."""
    if not (is_zero(matrix.b) and is_zero(matrix.c) and is_zero(matrix.e) and is_zero(matrix.f)):
        return None
    candidate = Scale(matrix.a, matrix.d)
    return _prove(candidate, matrix, candidate.matrix())


# --- identity removal -----------------------------------------------------


def _is_identity_transform(item: NamedTransform) -> bool:
    if isinstance(item, Translate):
        return is_zero(item.tx) and is_zero(item.ty)
    if isinstance(item, Rotate):
        # any center is fixed by a zero rotation
        remainder = abs(item.angle % (2 * pi()))
        return remainder < EPSILON or abs(remainder - 2 * pi()) < EPSILON
    if isinstance(item, Scale):
        return is_zero(item.sx - 1) and is_zero(item.sy - 1)
    return item.value.is_identity(EPSILON)


@in_numeric_context
def remove_identity_transforms(transforms: list[NamedTransform]) -> IdentityRemoval:
    kept = [item for item in transforms if not _is_identity_transform(item)]
    return IdentityRemoval(transforms=kept, removed_count=len(transforms) - len(kept))


# --- list optimization ----------------------------------------------------


def _merge_pair(current: NamedTransform, following: NamedTransform) -> NamedTransform | None:
    result = None
    if isinstance(current, Translate) and isinstance(following, Translate):
        result = merge_translations(current, following)
    elif isinstance(current, Rotate) and isinstance(following, Rotate):
        if not current.has_center and not following.has_center:
            result = merge_rotations(current, following)
    elif isinstance(current, Scale) and isinstance(following, Scale):
        result = merge_scales(current, following)
    if result is not None and result.verified:
        return result.value
    return None


def _merge_adjacent(items: list[NamedTransform]) -> list[NamedTransform]:
    items = list(items)
    i = 0
    while i < len(items) - 1:
        merged = _merge_pair(items[i], items[i + 1])
        if merged is not None:
            items[i : i + 2] = [merged]
        else:
            i += 1
    return items


def _collapse_rotate_about(items: list[NamedTransform]) -> list[NamedTransform]:
    items = list(items)
    i = 0
    while i < len(items) - 2:
        first, middle, last = items[i], items[i + 1], items[i + 2]
        if (
            isinstance(first, Translate)
            and isinstance(middle, Rotate)
            and isinstance(last, Translate)
            and not middle.has_center
            and is_zero(first.tx + last.tx)
            and is_zero(first.ty + last.ty)
        ):
            result = short_rotate(first.tx, first.ty, middle.angle, first.tx, first.ty)
            if result.verified:
                items[i : i + 3] = [result.value]
                continue
        i += 1
    return items


def _downgrade_matrices(items: list[NamedTransform]) -> list[NamedTransform]:
    downgraded = []
    for item in items:
        if isinstance(item, MatrixTransform):
            for convert in (matrix_to_translate, matrix_to_rotate, matrix_to_scale):
                result = convert(item.value)
                if result is not None and result.verified:
                    item = result.value
                    break
        downgraded.append(item)
    return downgraded


@in_numeric_context
def optimize_transform_list(
    transforms: list[NamedTransform], diagnostics: Diagnostics | None = None
) -> OptimizationResult:
    """Remove identities, merge neighbours, collapse rotate-about-point and
    downgrade raw matrices, repeating until nothing changes.

    Repeating to a fixed point makes the optimizer idempotent: a downgrade can
    expose a new merge, which a single pass would leave for the next call.
    """
    diagnostics = ensure(diagnostics)
    original_matrix = transform_list_matrix(transforms)

    items = remove_identity_transforms(transforms).transforms
    while True:
        before = items
        items = _merge_adjacent(items)
        items = _collapse_rotate_about(items)
        items = _downgrade_matrices(items)
        items = remove_identity_transforms(items).transforms
        if items == before:
            break

    max_error = original_matrix.max_difference(transform_list_matrix(items))
    verified = max_error < VERIFICATION_TOLERANCE
    if not verified:
        diagnostics.fatal(
            "optimize_transform_list",
            f"optimized list differs from original by {max_error:.3e}, keeping original",
        )
        items = list(transforms)
    logger.debug("Optimized %d transforms to %d", len(transforms), len(items))
    return OptimizationResult(
        transforms=items,
        optimization_count=len(transforms) - len(items),
        verified=verified,
        max_error=max_error,
        diagnostics=diagnostics,
    )


@in_numeric_context
def optimize_transform_string(
    text: str, precision: int = 6, diagnostics: Diagnostics | None = None
) -> tuple[str, OptimizationResult]:
    """Optimize a transform attribute and serialize the result."""
    diagnostics = ensure(diagnostics)
    result = optimize_transform_list(parse_transform_list(text, diagnostics), diagnostics)
    return serialize_transform_list(result.transforms, precision), result


