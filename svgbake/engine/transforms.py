"""Named transform primitives (the items of a ``transform`` attribute list)."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.matrix import IDENTITY, Matrix, rotation, rotation_about, scaling, translation
from svgbake.engine.numeric import ZERO, degrees, format_number, in_numeric_context, is_zero


@dataclass(frozen=True)
class Translate:
    tx: Decimal
    ty: Decimal = ZERO

    def matrix(self) -> Matrix:
        return translation(self.tx, self.ty)


@dataclass(frozen=True)
class Rotate:
    angle: Decimal  # radians
    cx: Decimal | None = None
    cy: Decimal | None = None

    @property
    def has_center(self) -> bool:
        """True when the rotation center is set and not the origin."""
        if self.cx is None and self.cy is None:
            return False
        return not (is_zero(self.cx or ZERO) and is_zero(self.cy or ZERO))

    def matrix(self) -> Matrix:
        if not self.has_center:
            return rotation(self.angle)
        return rotation_about(self.angle, self.cx or ZERO, self.cy or ZERO)


@dataclass(frozen=True)
class Scale:
    sx: Decimal
    sy: Decimal

    def matrix(self) -> Matrix:
        return scaling(self.sx, self.sy)


@dataclass(frozen=True)
class MatrixTransform:
    value: Matrix

    def matrix(self) -> Matrix:
        return self.value


NamedTransform = Translate | Rotate | Scale | MatrixTransform


@in_numeric_context
def transform_list_matrix(transforms: list[NamedTransform]) -> Matrix:
    """Product of a transform list, first item outermost."""
    result = IDENTITY
    for item in transforms:
        result = result @ item.matrix()
    return result


def serialize_transform(item: NamedTransform, precision: int = 6) -> str:
    def fmt(value: Decimal) -> str:
        return format_number(value, precision)

    if isinstance(item, Translate):
        if is_zero(item.ty):
            return f"translate({fmt(item.tx)})"
        return f"translate({fmt(item.tx)} {fmt(item.ty)})"
    if isinstance(item, Rotate):
        angle = fmt(degrees(item.angle))
        if item.has_center:
            return f"rotate({angle} {fmt(item.cx or ZERO)} {fmt(item.cy or ZERO)})"
        return f"rotate({angle})"
    if isinstance(item, Scale):
        if item.sx == item.sy:
            return f"scale({fmt(item.sx)})"
        return f"scale({fmt(item.sx)} {fmt(item.sy)})"
    return item.value.to_svg_matrix(precision)


@in_numeric_context
def serialize_transform_list(transforms: list[NamedTransform], precision: int = 6) -> str:
    return " ".join(serialize_transform(item, precision) for item in transforms)
