"""Viewport, viewBox and CTM construction.

The current transformation matrix of an element is the product, root to
leaf, of every ancestor's contribution: an ``<svg>`` contributes its viewBox
mapping followed by its own ``transform``; a ``<g>`` or the element itself
contributes its ``transform``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

from svgbake.engine.diagnostics import Diagnostics, TransformInputError, ensure
from svgbake.engine.matrix import IDENTITY, Matrix, scaling, translation
from svgbake.engine.numeric import in_numeric_context, to_decimal
from svgbake.engine.transform_parser import parse_transform
from svgbake.engine.units import resolve_length

_SEPARATOR_RE = re.compile(r"[\s,]+")
_ALIGN_VALUES = {
    "none",
    "xMinYMin",
    "xMidYMin",
    "xMaxYMin",
    "xMinYMid",
    "xMidYMid",
    "xMaxYMid",
    "xMinYMax",
    "xMidYMax",
    "xMaxYMax",
}
# alignment keyword fragment -> fraction of the leftover space placed before the content
_ALIGN_FRACTION = {"Min": Decimal(0), "Mid": Decimal("0.5"), "Max": Decimal(1)}


@dataclass(frozen=True)
class ViewBox:
    min_x: Decimal
    min_y: Decimal
    width: Decimal
    height: Decimal


@dataclass(frozen=True)
class PreserveAspectRatio:
    align: str = "xMidYMid"
    meet_or_slice: str = "meet"
    defer: bool = False


@in_numeric_context
def parse_view_box(text: str | None, diagnostics: Diagnostics | None = None) -> ViewBox | None:
    """Parse ``"minX minY width height"``; None when absent or unusable."""
    diagnostics = ensure(diagnostics)
    if text is None or not text.strip():
        return None
    parts = [p for p in _SEPARATOR_RE.split(text.strip()) if p]
    if len(parts) != 4:
        diagnostics.degenerate("parse_view_box", f"viewBox needs 4 numbers, got {text!r}")
        return None
    try:
        min_x, min_y, width, height = (to_decimal(p) for p in parts)
    except TransformInputError:
        diagnostics.degenerate("parse_view_box", f"viewBox has a non-numeric value: {text!r}")
        return None
    if width <= 0 or height <= 0:
        diagnostics.degenerate("parse_view_box", f"viewBox width and height must be positive: {text!r}")
        return None
    return ViewBox(min_x, min_y, width, height)


def parse_preserve_aspect_ratio(text: str | None, diagnostics: Diagnostics | None = None) -> PreserveAspectRatio:
    """Parse ``[defer] <align> [meet|slice]``; defaults to ``xMidYMid meet``."""
    diagnostics = ensure(diagnostics)
    if text is None or not text.strip():
        return PreserveAspectRatio()
    tokens = text.split()
    defer = False
    if tokens and tokens[0] == "defer":
        defer = True
        tokens = tokens[1:]

    align = "xMidYMid"
    if tokens:
        if tokens[0] in _ALIGN_VALUES:
            align = tokens[0]
        else:
            diagnostics.degenerate("parse_preserve_aspect_ratio", f"unknown align {tokens[0]!r}, using xMidYMid")
        tokens = tokens[1:]

    meet_or_slice = "meet"
    if tokens:
        # keywords are case-sensitive
        if tokens[0] in ("meet", "slice"):
            meet_or_slice = tokens[0]
        else:
            diagnostics.degenerate("parse_preserve_aspect_ratio", f"unknown meetOrSlice {tokens[0]!r}, using meet")
    return PreserveAspectRatio(align=align, meet_or_slice=meet_or_slice, defer=defer)


@in_numeric_context
def compute_view_box_transform(
    view_box: ViewBox | None,
    viewport_width,
    viewport_height,
    preserve_aspect_ratio: PreserveAspectRatio | None = None,
    diagnostics: Diagnostics | None = None,
) -> Matrix:
    """Map viewBox user space into a viewport of the given size."""
    diagnostics = ensure(diagnostics)
    if view_box is None:
        return IDENTITY
    width = to_decimal(viewport_width)
    height = to_decimal(viewport_height)
    if width <= 0 or height <= 0 or view_box.width <= 0 or view_box.height <= 0:
        diagnostics.degenerate(
            "compute_view_box_transform", "viewport or viewBox has a non-positive size, using identity"
        )
        return IDENTITY

    par = preserve_aspect_ratio or PreserveAspectRatio()
    scale_x = width / view_box.width
    scale_y = height / view_box.height
    to_origin = translation(-view_box.min_x, -view_box.min_y)

    if par.align == "none":
        return scaling(scale_x, scale_y) @ to_origin

    if par.meet_or_slice == "slice":
        scale = max(scale_x, scale_y)
    else:
        scale = min(scale_x, scale_y)

    # align is "x<Min|Mid|Max>Y<Min|Mid|Max>"
    fraction_x = _ALIGN_FRACTION[par.align[1:4]]
    fraction_y = _ALIGN_FRACTION[par.align[5:8]]
    offset_x = (width - view_box.width * scale) * fraction_x
    offset_y = (height - view_box.height * scale) * fraction_y
    return translation(offset_x, offset_y) @ scaling(scale) @ to_origin


@dataclass(frozen=True)
class Viewport:
    """An ``<svg>`` viewport: size, optional viewBox, optional transform."""

    width: Decimal
    height: Decimal
    view_box: ViewBox | None = None
    preserve_aspect_ratio: PreserveAspectRatio = PreserveAspectRatio()
    transform: str | None = None

    @classmethod
    @in_numeric_context
    def from_attributes(
        cls,
        width,
        height,
        view_box: str | None = None,
        preserve_aspect_ratio: str | None = None,
        transform: str | None = None,
        diagnostics: Diagnostics | None = None,
    ) -> Viewport:
        if width is None or height is None:
            raise TransformInputError("viewport width and height are required")
        diagnostics = ensure(diagnostics)
        return cls(
            width=resolve_length(width, diagnostics=diagnostics),
            height=resolve_length(height, diagnostics=diagnostics),
            view_box=parse_view_box(view_box, diagnostics),
            preserve_aspect_ratio=parse_preserve_aspect_ratio(preserve_aspect_ratio, diagnostics),
            transform=transform,
        )

    @in_numeric_context
    def matrix(self, diagnostics: Diagnostics | None = None) -> Matrix:
        """viewBox mapping followed by the viewport's own transform."""
        diagnostics = ensure(diagnostics)
        if self.width <= 0 or self.height <= 0:
            diagnostics.degenerate("Viewport.matrix", "viewport has a non-positive size, using identity")
            return IDENTITY
        result = compute_view_box_transform(
            self.view_box, self.width, self.height, self.preserve_aspect_ratio, diagnostics
        )
        if self.transform:
            result = result @ parse_transform(self.transform, diagnostics)
        return result


# --- ancestor hierarchy ---------------------------------------------------


@dataclass(frozen=True)
class SvgEntry:
    width: str | Decimal | int | float | None
    height: str | Decimal | int | float | None
    view_box: str | None = None
    preserve_aspect_ratio: str | None = None
    transform: str | None = None


@dataclass(frozen=True)
class GroupEntry:
    transform: str | None = None


@dataclass(frozen=True)
class ElementEntry:
    transform: str | None = None


HierarchyEntry = SvgEntry | GroupEntry | ElementEntry | str


@in_numeric_context
def entry_matrix(entry: HierarchyEntry, diagnostics: Diagnostics | None = None) -> Matrix:
    diagnostics = ensure(diagnostics)
    if isinstance(entry, str):
        return parse_transform(entry, diagnostics) if entry.strip() else IDENTITY
    if isinstance(entry, SvgEntry):
        viewport = Viewport.from_attributes(
            entry.width,
            entry.height,
            entry.view_box,
            entry.preserve_aspect_ratio,
            entry.transform,
            diagnostics,
        )
        return viewport.matrix(diagnostics)
    if entry.transform:
        return parse_transform(entry.transform, diagnostics)
    return IDENTITY


@in_numeric_context
def build_full_ctm(hierarchy: list[HierarchyEntry], diagnostics: Diagnostics | None = None) -> Matrix:
    """CTM of the last entry, multiplying root to leaf."""
    if hierarchy is None:
        raise TransformInputError("hierarchy is required")
    diagnostics = ensure(diagnostics)
    ctm = IDENTITY
    for entry in hierarchy:
        ctm = ctm @ entry_matrix(entry, diagnostics)
    return ctm


@in_numeric_context
def build_ctm(transforms: list[str], diagnostics: Diagnostics | None = None) -> Matrix:
    """CTM from a plain stack of transform attributes, root first."""
    diagnostics = ensure(diagnostics)
    ctm = IDENTITY
    for text in transforms:
        if text:
            ctm = ctm @ parse_transform(text, diagnostics)
    return ctm
