"""Document flattening: bake group and element transforms into coordinates.

Walks the element tree with the CTM of every element below the root ``<svg>``
(the root viewport mapping stays in place), converts basic shapes to paths
and rewrites their coordinates so no ``transform`` attribute is left.
Anything that cannot be baked without changing what is drawn keeps the
shortest equivalent ``transform`` instead:

- text, images, ``<use>`` and other non-geometry content;
- elements that reference clip paths, masks, filters or paint servers, whose
  referenced content lives in the untransformed user space;
- stroked elements under a CTM that is not a similarity, because a
  non-uniform scale or skew distorts the stroke outline;
- nested ``<svg>`` viewports, which get wrapped in a ``<g>``.
"""

from __future__ import annotations

import logging
import re
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from decimal import Decimal

from svgbake.engine.config import FlattenOptions
from svgbake.engine.decomposition import matrix_to_minimal_transform
from svgbake.engine.diagnostics import Diagnostics, TransformInputError
from svgbake.engine.matrix import IDENTITY, Matrix
from svgbake.engine.numeric import format_number, in_numeric_context, is_zero
from svgbake.engine.path_data import PathCommand, parse_path_data, serialize_path_data
from svgbake.engine.path_transform import transform_path_commands
from svgbake.engine.shapes import (
    circle_to_path,
    ellipse_to_path,
    line_to_path,
    polygon_to_path,
    polyline_to_path,
    rect_to_path,
)
from svgbake.engine.transform_parser import parse_transform
from svgbake.engine.units import normalized_diagonal, resolve_length
from svgbake.engine.verification import verify_path_transformation
from svgbake.engine.viewport import parse_view_box

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

SHAPE_TAGS = {"path", "circle", "ellipse", "rect", "line", "polyline", "polygon"}
CONTAINER_TAGS = {"g", "a", "switch"}
# Content rendered only through a reference, in its own coordinate system
REFERENCED_TAGS = {
    "defs",
    "symbol",
    "clipPath",
    "mask",
    "pattern",
    "marker",
    "linearGradient",
    "radialGradient",
    "filter",
    "style",
    "script",
    "title",
    "desc",
    "metadata",
}
_REFERENCE_ATTRS = ("clip-path", "mask", "filter", "fill", "stroke", "marker-start", "marker-mid", "marker-end")
_URL_RE = re.compile(r"url\(")
_STYLE_DECL_RE = re.compile(r"\s*([\w-]+)\s*:\s*([^;]+)")
_DASH_SPLIT_RE = re.compile(r"[\s,]+")

# Attributes a shape drops once it is a path
_SHAPE_ATTRS = {
    "circle": ("cx", "cy", "r"),
    "ellipse": ("cx", "cy", "rx", "ry"),
    "rect": ("x", "y", "width", "height", "rx", "ry"),
    "line": ("x1", "y1", "x2", "y2"),
    "polyline": ("points",),
    "polygon": ("points",),
    "path": (),
}


@dataclass
class FlattenReport:
    svg: str
    baked_elements: int = 0
    converted_shapes: int = 0
    kept_transforms: int = 0
    verification_failures: list[str] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    processing_time_ms: float = 0.0

    @property
    def verified(self) -> bool:
        return not self.verification_failures and not self.diagnostics.has_fatal


@dataclass
class _Inherited:
    """Presentation state inherited down the tree."""

    stroked: bool = False
    stroke_width: Decimal = Decimal(1)
    dasharray: tuple[Decimal, ...] | None = None
    dashoffset: Decimal | None = None


@dataclass
class FlattenContext:
    options: FlattenOptions
    diagnostics: Diagnostics
    viewport_width: Decimal
    viewport_height: Decimal
    report: FlattenReport


def local_name(tag: str) -> str:
    return tag.split("}")[-1] if "}" in tag else tag


def _qualified(element: ET.Element, name: str) -> str:
    """``name`` in the same namespace as ``element``."""
    if element.tag.startswith("{"):
        return element.tag.split("}")[0] + "}" + name
    return name


def _style(element: ET.Element) -> dict[str, str]:
    style = element.get("style")
    if not style:
        return {}
    return {m.group(1): m.group(2).strip() for m in _STYLE_DECL_RE.finditer(style) if m.group(1)}


def _presentation(element: ET.Element, name: str) -> str | None:
    """Style declaration or presentation attribute; the style wins."""
    return _style(element).get(name, element.get(name))


def _has_references(element: ET.Element) -> bool:
    for name in _REFERENCE_ATTRS:
        value = _presentation(element, name)
        if value and _URL_RE.search(value):
            return True
    return False


def _inherit(element: ET.Element, parent: _Inherited, ctx: FlattenContext) -> _Inherited:
    stroke = _presentation(element, "stroke")
    width = _presentation(element, "stroke-width")
    dasharray = _presentation(element, "stroke-dasharray")
    offset = _presentation(element, "stroke-dashoffset")
    reference = normalized_diagonal(ctx.viewport_width, ctx.viewport_height)

    def length(value: str) -> Decimal:
        return resolve_length(value, reference, ctx.options.dpi, ctx.diagnostics)

    inherited = _Inherited(
        stroked=parent.stroked if stroke is None else stroke.strip() not in ("none", "transparent"),
        stroke_width=parent.stroke_width if width is None else length(width),
        dasharray=parent.dasharray,
        dashoffset=parent.dashoffset if offset is None else length(offset),
    )
    if dasharray is not None:
        values = [v for v in _DASH_SPLIT_RE.split(dasharray.strip()) if v]
        inherited.dasharray = None if values in ([], ["none"]) else tuple(length(v) for v in values)
    return inherited


def similarity_scale(matrix: Matrix) -> Decimal | None:
    """Uniform scale factor when ``matrix`` is a similarity, else None."""
    a, b, c, d = matrix.a, matrix.b, matrix.c, matrix.d
    proper = is_zero(a - d) and is_zero(b + c)
    improper = is_zero(a + d) and is_zero(b - c)
    if not (proper or improper):
        return None
    return (a * a + b * b).sqrt()


def _set_transform(element: ET.Element, ctm: Matrix, ctx: FlattenContext) -> None:
    minimal = matrix_to_minimal_transform(ctm, ctx.options.precision)
    if minimal.is_identity:
        element.attrib.pop("transform", None)
        return
    element.set("transform", minimal.transform)
    ctx.report.kept_transforms += 1


def _shape_commands(element: ET.Element, tag: str, ctx: FlattenContext) -> list[PathCommand]:
    width, height = ctx.viewport_width, ctx.viewport_height
    diagonal = normalized_diagonal(width, height)
    dpi = ctx.options.dpi
    diagnostics = ctx.diagnostics

    def length(name: str, reference: Decimal, default: str | None = "0") -> Decimal | None:
        value = element.get(name, default)
        if value is None:
            return None
        return resolve_length(value, reference, dpi, diagnostics)

    if tag == "path":
        return parse_path_data(element.get("d", ""), diagnostics)
    if tag == "circle":
        return circle_to_path(
            length("cx", width), length("cy", height), length("r", diagonal), bezier_arcs=ctx.options.bezier_arcs
        )
    if tag == "ellipse":
        return ellipse_to_path(
            length("cx", width),
            length("cy", height),
            length("rx", width),
            length("ry", height),
            bezier_arcs=ctx.options.bezier_arcs,
        )
    if tag == "rect":
        return rect_to_path(
            length("x", width),
            length("y", height),
            length("width", width),
            length("height", height),
            length("rx", width, None),
            length("ry", height, None),
        )
    if tag == "line":
        return line_to_path(length("x1", width), length("y1", height), length("x2", width), length("y2", height))
    if tag == "polyline":
        return polyline_to_path(element.get("points", ""), diagnostics)
    return polygon_to_path(element.get("points", ""), diagnostics)


def _scale_stroke(element: ET.Element, inherited: _Inherited, scale: Decimal, ctx: FlattenContext) -> None:
    """Write the scaled inherited stroke geometry onto ``element``."""
    precision = ctx.options.precision
    scaled = {"stroke-width": format_number(inherited.stroke_width * scale, precision)}
    if inherited.dasharray is not None:
        scaled["stroke-dasharray"] = " ".join(format_number(v * scale, precision) for v in inherited.dasharray)
    if inherited.dashoffset is not None:
        scaled["stroke-dashoffset"] = format_number(inherited.dashoffset * scale, precision)

    style = _style(element)
    for name, value in scaled.items():
        element.set(name, value)
        if name in style:
            style[name] = value
    if any(name in style for name in scaled):
        element.set("style", ";".join(f"{k}:{v}" for k, v in style.items()))


def _has_zero_radius_arc(commands: list[PathCommand]) -> bool:
    return any(c.letter == "A" and (c.args[0] <= 0 or c.args[1] <= 0) for c in commands)


def _bake_shape(element: ET.Element, tag: str, ctm: Matrix, inherited: _Inherited, ctx: FlattenContext) -> None:
    scale = similarity_scale(ctm)
    if inherited.stroked and scale is None:
        # a non-uniform stroke cannot be expressed on the baked geometry
        _set_transform(element, ctm, ctx)
        return

    noted = len(ctx.diagnostics)
    try:
        commands = _shape_commands(element, tag, ctx)
    except TransformInputError as exc:
        # zero-sized shapes are not rendered; leave them as they are
        ctx.diagnostics.degenerate("flatten_svg", f"<{tag}> not converted: {exc}")
        _set_transform(element, ctm, ctx)
        return
    # path data that was only partly readable no longer matches the original
    lossy = tag == "path" and len(ctx.diagnostics) > noted

    baked = transform_path_commands(commands, ctm, True, ctx.diagnostics)
    d = serialize_path_data(baked.commands, ctx.options.precision)
    verified = baked.verified and not lossy
    if verified and ctx.options.verify and commands and not _has_zero_radius_arc(commands):
        original_d = serialize_path_data(commands, 12)
        result = verify_path_transformation(
            original_d, d, ctm, ctx.options.e2e_tolerance, ctx.options.clip_segments
        )
        verified = result.valid
    if not verified:
        ctx.report.verification_failures.append(element.get("id") or tag)

    for name in _SHAPE_ATTRS[tag]:
        element.attrib.pop(name, None)
    if tag != "path":
        element.tag = _qualified(element, "path")
        ctx.report.converted_shapes += 1
    element.set("d", d)
    element.attrib.pop("transform", None)
    if inherited.stroked and scale is not None and not is_zero(scale - 1):
        _scale_stroke(element, inherited, scale, ctx)
    ctx.report.baked_elements += 1


def _wrap_in_group(parent: ET.Element, child: ET.Element, ctm: Matrix, ctx: FlattenContext) -> None:
    minimal = matrix_to_minimal_transform(ctm, ctx.options.precision)
    if minimal.is_identity:
        return
    index = list(parent).index(child)
    group = ET.Element(_qualified(child, "g"), {"transform": minimal.transform})
    group.tail = child.tail
    child.tail = None
    parent.remove(child)
    group.append(child)
    parent.insert(index, group)
    ctx.report.kept_transforms += 1


def _walk(parent: ET.Element, ctm: Matrix, inherited: _Inherited, ctx: FlattenContext) -> None:
    for child in list(parent):
        if not isinstance(child.tag, str):
            continue  # comments and processing instructions
        tag = local_name(child.tag)
        if tag in REFERENCED_TAGS:
            continue

        own = child.get("transform")
        child_ctm = ctm @ parse_transform(own, ctx.diagnostics) if own else ctm
        child_inherited = _inherit(child, inherited, ctx)

        if tag == "svg":
            _wrap_in_group(parent, child, ctm, ctx)
        elif _has_references(child) or (tag not in CONTAINER_TAGS and tag not in SHAPE_TAGS):
            _set_transform(child, child_ctm, ctx)
        elif tag in CONTAINER_TAGS:
            child.attrib.pop("transform", None)
            _walk(child, child_ctm, child_inherited, ctx)
        else:
            _bake_shape(child, tag, child_ctm, child_inherited, ctx)


def _viewport_size(root: ET.Element, diagnostics: Diagnostics) -> tuple[Decimal, Decimal]:
    view_box = parse_view_box(root.get("viewBox"), diagnostics)
    if view_box is not None:
        return view_box.width, view_box.height
    width = resolve_length(root.get("width", "100"), diagnostics=diagnostics)
    height = resolve_length(root.get("height", "100"), diagnostics=diagnostics)
    return width, height


@in_numeric_context
def flatten_svg(
    svg_text: str, options: FlattenOptions | None = None, diagnostics: Diagnostics | None = None
) -> FlattenReport:
    """Flatten every transform below the root ``<svg>`` of ``svg_text``."""
    if not svg_text or not svg_text.strip():
        raise TransformInputError("svg text is required")
    start = time.perf_counter()
    options = options or FlattenOptions()
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as exc:
        raise TransformInputError(f"not well-formed XML: {exc}") from exc
    if local_name(root.tag) != "svg":
        raise TransformInputError(f"root element must be <svg>, got <{local_name(root.tag)}>")

    width, height = _viewport_size(root, diagnostics)
    report = FlattenReport(svg="", diagnostics=diagnostics)
    ctx = FlattenContext(
        options=options,
        diagnostics=diagnostics,
        viewport_width=width,
        viewport_height=height,
        report=report,
    )
    _walk(root, IDENTITY, _inherit(root, _Inherited(), ctx), ctx)

    report.svg = ET.tostring(root, encoding="unicode")
    report.processing_time_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "Flatten: %d baked, %d shapes converted, %d transforms kept, %d verification failures in %.1fms",
        report.baked_elements,
        report.converted_shapes,
        report.kept_transforms,
        len(report.verification_failures),
        report.processing_time_ms,
    )
    return report
