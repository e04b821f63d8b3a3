"""Decimal numeric context and trigonometry.

All engine arithmetic runs on ``decimal.Decimal``. Precision is carried by an
explicit ``decimal.Context`` instead of a process-wide setter: every public
entry point is wrapped with :func:`in_numeric_context`, which installs the
caller's context (or the default one) with ``decimal.localcontext`` for the
duration of the call. Nested engine calls reuse the context already active,
so a whole operation runs at one precision. ``decimal.localcontext`` is
thread- and task-local, so concurrent callers with different precisions do
not interfere.

The trigonometric functions follow the series recipes from the ``decimal``
module documentation, computed with two guard digits.
"""

from __future__ import annotations

import functools
from contextvars import ContextVar
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
    getcontext,
    localcontext,
)

from svgbake.engine.diagnostics import TransformInputError

DEFAULT_PRECISION = 80

# Numbers smaller than this are treated as zero by the engine
EPSILON = Decimal("1e-40")
# Maximum element-wise difference accepted by recompose-and-compare checks
VERIFICATION_TOLERANCE = Decimal("1e-30")

ZERO = Decimal(0)
ONE = Decimal(1)
TWO = Decimal(2)

_ACTIVE: ContextVar[Context | None] = ContextVar("svgbake_numeric_context", default=None)
_PI_CACHE: dict[int, Decimal] = {}


def numeric_context(precision: int = DEFAULT_PRECISION) -> Context:
    """Build a fresh decimal context for engine arithmetic."""
    if precision < 20:
        raise TransformInputError(f"precision must be at least 20 digits, got {precision}")
    return Context(
        prec=precision,
        rounding=ROUND_HALF_EVEN,
        traps=[InvalidOperation, DivisionByZero, Overflow],
    )


_DEFAULT_CONTEXT = numeric_context()


def active_context() -> Context:
    """The context engine arithmetic is currently running under."""
    ctx = _ACTIVE.get()
    return ctx if ctx is not None else _DEFAULT_CONTEXT


def in_numeric_context(func):
    """Run ``func`` under the caller-supplied or already-active context.

    The wrapped function accepts an extra keyword-only ``context`` argument.
    An explicit context always wins; otherwise an outer engine call's context
    is reused, falling back to the default 80-digit context.
    """

    @functools.wraps(func)
    def wrapper(*args, context: Context | None = None, **kwargs):
        current = _ACTIVE.get()
        if context is None and current is not None:
            return func(*args, **kwargs)
        ctx = context if context is not None else _DEFAULT_CONTEXT
        token = _ACTIVE.set(ctx)
        try:
            with localcontext(ctx):
                return func(*args, **kwargs)
        finally:
            _ACTIVE.reset(token)

    return wrapper


def to_decimal(value) -> Decimal:
    """Convert an edge value (str, int, float, Decimal) to a finite Decimal."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        result = Decimal(int(value))
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest round-tripping form, so 0.1 stays 0.1
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise TransformInputError(f"not a number: {value!r}") from exc
    else:
        raise TransformInputError(f"cannot convert {type(value).__name__} to a number")
    if not result.is_finite():
        raise TransformInputError(f"number must be finite, got {value!r}")
    return result


def is_zero(value: Decimal, eps: Decimal = EPSILON) -> bool:
    return abs(value) < eps


def format_number(value: Decimal, precision: int = 6) -> str:
    """Round to ``precision`` decimals and print without trailing zeros."""
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + precision + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_EVEN)
    if rounded.is_zero():
        return "0"
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def pi() -> Decimal:
    """Pi at the current precision (cached per precision)."""
    prec = getcontext().prec
    cached = _PI_CACHE.get(prec)
    if cached is not None:
        return cached
    with localcontext() as ctx:
        ctx.prec += 2
        three = Decimal(3)
        lasts, t, s, n, na, d, da = 0, three, 3, 1, 0, 0, 24
        while s != lasts:
            lasts = s
            n, na = n + na, na + 8
            d, da = d + da, da + 32
            t = (t * n) / d
            s += t
    result = +s
    _PI_CACHE[prec] = result
    return result


def _reduce_angle(x: Decimal) -> Decimal:
    """Reduce ``x`` into [-pi, pi] so the Taylor series converges quickly."""
    two_pi = 2 * pi()
    if abs(x) <= pi():
        return x
    x = x % two_pi
    if x > pi():
        x -= two_pi
    elif x < -pi():
        x += two_pi
    return x


def cos(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += 2
        x = _reduce_angle(x)
        i, lasts, s, fact, num, sign = 0, 0, ONE, 1, ONE, 1
        while s != lasts:
            lasts = s
            i += 2
            fact *= i * (i - 1)
            num *= x * x
            sign *= -1
            s += num / fact * sign
    return +s


def sin(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += 2
        x = _reduce_angle(x)
        i, lasts, s, fact, num, sign = 1, 0, x, 1, x, 1
        while s != lasts:
            lasts = s
            i += 2
            fact *= i * (i - 1)
            num *= x * x
            sign *= -1
            s += num / fact * sign
    return +s


def tan(x: Decimal) -> Decimal:
    """Tangent; a cosine below EPSILON is an undefined tangent."""
    with localcontext() as ctx:
        ctx.prec += 2
        c = cos(x)
        if is_zero(c):
            raise TransformInputError(f"tangent is undefined at {x}")
        result = sin(x) / c
    return +result


def sqrt(x: Decimal) -> Decimal:
    return x.sqrt()


def atan(x: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += 4
        if x.is_zero():
            return +ZERO
        negative = x < 0
        x = abs(x)
        invert = x > 1
        if invert:
            x = ONE / x
        # Halve the angle twice so the series converges fast near |x| = 1
        halvings = 2
        for _ in range(halvings):
            x = x / (ONE + (ONE + x * x).sqrt())
        x2 = x * x
        i, lasts, s, num = 1, 0, x, x
        sign = 1
        while s != lasts:
            lasts = s
            i += 2
            num *= x2
            sign *= -1
            s += num / i * sign
        s *= 2**halvings
        if invert:
            s = pi() / 2 - s
        if negative:
            s = -s
    return +s


def atan2(y: Decimal, x: Decimal) -> Decimal:
    """Quadrant-aware arctangent of ``y / x`` in (-pi, pi]."""
    with localcontext() as ctx:
        ctx.prec += 2
        if x > 0:
            result = atan(y / x)
        elif x < 0:
            if y >= 0:
                result = atan(y / x) + pi()
            else:
                result = atan(y / x) - pi()
        elif y > 0:
            result = pi() / 2
        elif y < 0:
            result = -pi() / 2
        else:
            result = ZERO
    return +result


def radians(degrees_value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += 2
        result = degrees_value * pi() / 180
    return +result


def degrees(radians_value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec += 2
        result = radians_value * 180 / pi()
    return +result


def normalize_angle(angle: Decimal) -> Decimal:
    """Map an angle in radians into (-pi, pi]."""
    with localcontext() as ctx:
        ctx.prec += 2
        two_pi = 2 * pi()
        result = angle % two_pi
        if result > pi():
            result -= two_pi
        elif result <= -pi():
            result += two_pi
    return +result
