"""Decimal affine algebra.

A 2D affine transform is the homogeneous 3x3 matrix::

    | a  c  e |
    | b  d  f |
    | 0  0  1 |

Only the six affine parameters are stored; the bottom row is fixed, so a
:class:`Matrix` can never stop being affine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.diagnostics import TransformInputError
from svgbake.engine.numeric import (
    EPSILON,
    ONE,
    VERIFICATION_TOLERANCE,
    ZERO,
    cos,
    format_number,
    in_numeric_context,
    sin,
    tan,
    to_decimal,
)


@dataclass(frozen=True)
class Vector2:
    x: Decimal
    y: Decimal

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(frozen=True)
class Matrix:
    a: Decimal = ONE
    b: Decimal = ZERO
    c: Decimal = ZERO
    d: Decimal = ONE
    e: Decimal = ZERO
    f: Decimal = ZERO

    # --- construction -----------------------------------------------------

    @classmethod
    def identity(cls) -> Matrix:
        return cls()

    @classmethod
    @in_numeric_context
    def from_svg_values(cls, a, b, c, d, e, f) -> Matrix:
        """Build from the six ``matrix(a, b, c, d, e, f)`` values."""
        return cls(*(to_decimal(v) for v in (a, b, c, d, e, f)))

    @classmethod
    @in_numeric_context
    def from_rows(cls, rows) -> Matrix:
        """Build from a 3x3 nested sequence; the bottom row must be 0 0 1."""
        if len(rows) != 3 or any(len(r) != 3 for r in rows):
            raise TransformInputError("matrix must be 3x3")
        bottom = [to_decimal(v) for v in rows[2]]
        if bottom != [ZERO, ZERO, ONE]:
            raise TransformInputError(f"bottom row must be [0, 0, 1], got {rows[2]}")
        return cls.from_svg_values(rows[0][0], rows[1][0], rows[0][1], rows[1][1], rows[0][2], rows[1][2])

    # --- element access ---------------------------------------------------

    def __getitem__(self, index: tuple[int, int]) -> Decimal:
        row, col = index
        return self.rows()[row][col]

    def rows(self) -> tuple[tuple[Decimal, Decimal, Decimal], ...]:
        return (
            (self.a, self.c, self.e),
            (self.b, self.d, self.f),
            (ZERO, ZERO, ONE),
        )

    def to_svg_values(self) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal, Decimal]:
        return (self.a, self.b, self.c, self.d, self.e, self.f)

    # --- algebra ----------------------------------------------------------

    @in_numeric_context
    def multiply(self, other: Matrix) -> Matrix:
        """``self @ other``: ``other`` is applied to points first."""
        return Matrix(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def __matmul__(self, other: Matrix) -> Matrix:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.multiply(other)

    @in_numeric_context
    def determinant(self) -> Decimal:
        return self.a * self.d - self.b * self.c

    @in_numeric_context
    def inverse(self) -> Matrix | None:
        """Inverse matrix, or None when the determinant is below EPSILON."""
        det = self.determinant()
        if abs(det) < EPSILON:
            return None
        return Matrix(
            a=self.d / det,
            b=-self.b / det,
            c=-self.c / det,
            d=self.a / det,
            e=(self.c * self.f - self.d * self.e) / det,
            f=(self.b * self.e - self.a * self.f) / det,
        )

    @in_numeric_context
    def max_difference(self, other: Matrix) -> Decimal:
        """Largest absolute element-wise difference over all nine elements."""
        return max(abs(x - y) for x, y in zip(self.to_svg_values(), other.to_svg_values()))

    @in_numeric_context
    def equals(self, other: Matrix, tolerance: Decimal = VERIFICATION_TOLERANCE) -> bool:
        return self.max_difference(other) < tolerance

    @in_numeric_context
    def is_identity(self, tolerance: Decimal = EPSILON) -> bool:
        return self.equals(IDENTITY, tolerance)

    @in_numeric_context
    def apply(self, x, y) -> Vector2:
        """Map a point (translation included)."""
        x = to_decimal(x)
        y = to_decimal(y)
        return Vector2(self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    @in_numeric_context
    def apply_linear(self, x, y) -> Vector2:
        """Map a direction vector (translation ignored)."""
        x = to_decimal(x)
        y = to_decimal(y)
        return Vector2(self.a * x + self.c * y, self.b * x + self.d * y)

    def linear_part(self) -> Matrix:
        return Matrix(self.a, self.b, self.c, self.d, ZERO, ZERO)

    def to_svg_matrix(self, precision: int = 6) -> str:
        values = ", ".join(format_number(v, precision) for v in self.to_svg_values())
        return f"matrix({values})"

    def to_floats(self) -> tuple[float, ...]:
        return tuple(float(v) for v in self.to_svg_values())


IDENTITY = Matrix()


def multiply(*matrices: Matrix) -> Matrix:
    """Left-to-right product of any number of matrices."""
    result = IDENTITY
    for m in matrices:
        result = result @ m
    return result


def equals(a: Matrix, b: Matrix, tolerance: Decimal = VERIFICATION_TOLERANCE) -> bool:
    return a.equals(b, tolerance)


def max_difference(a: Matrix, b: Matrix) -> Decimal:
    return a.max_difference(b)


# --- primitive builders ---------------------------------------------------


@in_numeric_context
def translation(tx, ty=ZERO) -> Matrix:
    return Matrix(e=to_decimal(tx), f=to_decimal(ty))


@in_numeric_context
def scaling(sx, sy=None) -> Matrix:
    sx = to_decimal(sx)
    sy = sx if sy is None else to_decimal(sy)
    return Matrix(a=sx, d=sy)


@in_numeric_context
def rotation(angle) -> Matrix:
    """Rotation by ``angle`` radians about the origin."""
    angle = to_decimal(angle)
    c = cos(angle)
    s = sin(angle)
    return Matrix(a=c, b=s, c=-s, d=c)


@in_numeric_context
def rotation_about(angle, cx, cy) -> Matrix:
    """``translate(cx, cy) rotate(angle) translate(-cx, -cy)``."""
    cx = to_decimal(cx)
    cy = to_decimal(cy)
    return translation(cx, cy) @ rotation(angle) @ translation(-cx, -cy)


@in_numeric_context
def skew_x(angle) -> Matrix:
    return Matrix(c=tan(to_decimal(angle)))


@in_numeric_context
def skew_y(angle) -> Matrix:
    return Matrix(b=tan(to_decimal(angle)))
