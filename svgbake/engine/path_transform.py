"""Bake a CTM into path coordinates.

Relative commands are resolved against the current point before the matrix
is applied. ``H`` and ``V`` cannot survive a rotation or skew, so they are
always emitted as linetos. Smooth curves (``S``, ``T``) keep their letter:
their implicit control point is a reflection about the current point, and an
affine map preserves reflections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.arc import EllipticalArc, transform_arc
from svgbake.engine.diagnostics import Diagnostics, ensure
from svgbake.engine.matrix import Matrix, Vector2
from svgbake.engine.numeric import ZERO, in_numeric_context
from svgbake.engine.path_data import PathCommand, parse_path_data, serialize_path_data

logger = logging.getLogger(__name__)


@dataclass
class TransformedPath:
    commands: list[PathCommand]
    verified: bool  # every arc passed its self-check
    max_error: Decimal


def _absolute_points(command: PathCommand, current: Vector2) -> list[Vector2]:
    """Coordinate pairs of a non-arc command in absolute input space."""
    args = command.args
    if command.letter == "H":
        x = args[0] + current.x if command.relative else args[0]
        return [Vector2(x, current.y)]
    if command.letter == "V":
        y = args[0] + current.y if command.relative else args[0]
        return [Vector2(current.x, y)]
    points = []
    for i in range(0, len(args), 2):
        x, y = args[i], args[i + 1]
        if command.relative:
            x += current.x
            y += current.y
        points.append(Vector2(x, y))
    return points


@in_numeric_context
def transform_path_commands(
    commands: list[PathCommand],
    ctm: Matrix,
    to_absolute: bool = True,
    diagnostics: Diagnostics | None = None,
) -> TransformedPath:
    diagnostics = ensure(diagnostics)
    current = Vector2(ZERO, ZERO)
    subpath_start = current
    # current point in output space, for relative output
    out_current = Vector2(ZERO, ZERO)
    out_subpath_start = out_current
    verified = True
    max_error = ZERO
    result: list[PathCommand] = []

    for command in commands:
        relative_out = command.relative and not to_absolute

        if command.letter == "Z":
            result.append(PathCommand("Z", relative_out))
            current = subpath_start
            out_current = out_subpath_start
            continue

        if command.letter == "A":
            rx, ry, rotation, large_arc, sweep, x, y = command.args
            if command.relative:
                x += current.x
                y += current.y
            baked = transform_arc(EllipticalArc(rx, ry, rotation, int(large_arc), int(sweep), x, y), ctm, diagnostics)
            verified = verified and baked.verified
            max_error = max(max_error, baked.max_error)
            arc = baked.arc
            end = Vector2(arc.x, arc.y)
            if relative_out:
                end_out = Vector2(end.x - out_current.x, end.y - out_current.y)
            else:
                end_out = end
            args = (arc.rx, arc.ry, arc.x_axis_rotation, Decimal(arc.large_arc), Decimal(arc.sweep), end_out.x, end_out.y)
            result.append(PathCommand("A", relative_out, args))
            current = Vector2(x, y)
            out_current = end
            continue

        points = _absolute_points(command, current)
        mapped = [ctm.apply(p.x, p.y) for p in points]
        args = []
        for p in mapped:
            if relative_out:
                args.extend((p.x - out_current.x, p.y - out_current.y))
            else:
                args.extend((p.x, p.y))
        letter = "L" if command.letter in ("H", "V") else command.letter
        result.append(PathCommand(letter, relative_out, tuple(args)))

        current = points[-1]
        out_current = mapped[-1]
        if command.letter == "M":
            subpath_start = current
            out_subpath_start = out_current

    return TransformedPath(commands=result, verified=verified, max_error=max_error)


@in_numeric_context
def transform_path_data(
    d: str,
    ctm: Matrix,
    precision: int = 6,
    to_absolute: bool = True,
    diagnostics: Diagnostics | None = None,
) -> str:
    """Apply ``ctm`` to every coordinate of ``d`` and serialize the result."""
    diagnostics = ensure(diagnostics)
    commands = parse_path_data(d, diagnostics)
    baked = transform_path_commands(commands, ctm, to_absolute, diagnostics)
    if not baked.verified:
        diagnostics.fatal("transform_path_data", f"arc transform self-check failed, max error {baked.max_error:.3e}")
    logger.debug("Transformed %d path commands", len(commands))
    return serialize_path_data(baked.commands, precision)
