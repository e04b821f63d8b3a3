"""Transform attribute grammar.

Parses ``transform="translate(10 20) rotate(45 5 5) scale(2)"`` into a
:class:`Matrix` (left-to-right product) or into a list of named transforms.
Malformed and unknown functions degrade to the identity with a diagnostic;
the rest of the chain is still applied.
"""

from __future__ import annotations

import re

from svgbake.engine.diagnostics import Diagnostics, TransformInputError, ensure
from svgbake.engine.matrix import IDENTITY, Matrix, rotation, rotation_about, scaling, skew_x, skew_y, translation
from svgbake.engine.numeric import ZERO, in_numeric_context, radians, to_decimal
from svgbake.engine.transforms import MatrixTransform, NamedTransform, Rotate, Scale, Translate

_FUNCTION_RE = re.compile(r"([A-Za-z]+)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# name -> allowed argument counts
_ARITY = {
    "matrix": (6,),
    "translate": (1, 2),
    "scale": (1, 2),
    "rotate": (1, 3),
    "skewX": (1,),
    "skewY": (1,),
}


def _parse_args(raw: str) -> list:
    return [to_decimal(tok) for tok in _NUMBER_RE.findall(raw)]


def _stray(text: str) -> str:
    """Text left once separators are removed."""
    return text.strip(" \t\r\n\f,")


def _args_are_numbers(name: str, raw: str, diagnostics: Diagnostics) -> bool:
    leftover = _stray(_NUMBER_RE.sub(" ", raw))
    if leftover:
        diagnostics.degenerate("parse_transform", f"{name}() has non-numeric arguments {leftover!r}, using identity")
        return False
    return True


def tokenize_transform(text: str, diagnostics: Diagnostics | None = None) -> list[tuple[str, str]]:
    """Split an attribute into ``(name, raw_args)`` pairs.

    Text between or after the functions that is not a separator, such as an
    unclosed ``rotate(45``, is skipped with a diagnostic.
    """
    if text is None:
        raise TransformInputError("transform text is required")
    diagnostics = ensure(diagnostics)
    tokens = []
    pos = 0
    for match in _FUNCTION_RE.finditer(text):
        gap = _stray(text[pos : match.start()])
        if gap:
            diagnostics.degenerate("parse_transform", f"ignoring unparseable transform text {gap!r}")
        tokens.append((match.group(1), match.group(2)))
        pos = match.end()
    tail = _stray(text[pos:])
    if tail:
        diagnostics.degenerate("parse_transform", f"ignoring unparseable transform text {tail!r}")
    return tokens


def _check_arity(name: str, args: list, diagnostics: Diagnostics) -> bool:
    allowed = _ARITY.get(name)
    if allowed is None:
        diagnostics.degenerate("parse_transform", f"unknown transform function {name!r}, using identity")
        return False
    if len(args) not in allowed:
        diagnostics.degenerate(
            "parse_transform",
            f"{name}() takes {' or '.join(map(str, allowed))} arguments, got {len(args)}; using identity",
        )
        return False
    return True


@in_numeric_context
def parse_transform_function(name: str, raw_args: str, diagnostics: Diagnostics | None = None) -> Matrix:
    """Matrix of a single ``name(args)`` function."""
    diagnostics = ensure(diagnostics)
    if not _args_are_numbers(name, raw_args, diagnostics):
        return IDENTITY
    args = _parse_args(raw_args)
    if not _check_arity(name, args, diagnostics):
        return IDENTITY

    if name == "matrix":
        return Matrix(*args)
    if name == "translate":
        return translation(args[0], args[1] if len(args) > 1 else ZERO)
    if name == "scale":
        return scaling(args[0], args[1] if len(args) > 1 else None)
    if name == "rotate":
        angle = radians(args[0])
        if len(args) == 3:
            return rotation_about(angle, args[1], args[2])
        return rotation(angle)
    try:
        if name == "skewX":
            return skew_x(radians(args[0]))
        return skew_y(radians(args[0]))
    except TransformInputError:
        diagnostics.degenerate("parse_transform", f"{name}({args[0]}) has an undefined tangent, using identity")
        return IDENTITY


@in_numeric_context
def parse_transform(text: str, diagnostics: Diagnostics | None = None) -> Matrix:
    """Parse a transform attribute into one matrix."""
    diagnostics = ensure(diagnostics)
    result = IDENTITY
    for name, raw in tokenize_transform(text, diagnostics):
        result = result @ parse_transform_function(name, raw, diagnostics)
    return result


@in_numeric_context
def parse_transform_list(text: str, diagnostics: Diagnostics | None = None) -> list[NamedTransform]:
    """Parse into named transforms; skews are kept as raw matrices."""
    diagnostics = ensure(diagnostics)
    items: list[NamedTransform] = []
    for name, raw in tokenize_transform(text, diagnostics):
        if not _args_are_numbers(name, raw, diagnostics):
            continue
        args = _parse_args(raw)
        if not _check_arity(name, args, diagnostics):
            continue
        if name == "translate":
            items.append(Translate(args[0], args[1] if len(args) > 1 else ZERO))
        elif name == "scale":
            items.append(Scale(args[0], args[1] if len(args) > 1 else args[0]))
        elif name == "rotate":
            if len(args) == 3:
                items.append(Rotate(radians(args[0]), args[1], args[2]))
            else:
                items.append(Rotate(radians(args[0])))
        elif name == "matrix":
            items.append(MatrixTransform(Matrix(*args)))
        else:
            items.append(MatrixTransform(parse_transform_function(name, raw, diagnostics)))
    return items
