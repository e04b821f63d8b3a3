"""Tests for document flattening."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from svgbake.engine.config import FlattenOptions
from svgbake.engine.diagnostics import Severity, TransformInputError
from svgbake.engine.matrix import Matrix, rotation, scaling
from svgbake.engine.numeric import pi
from svgbake.svg.flatten import SVG_NS, flatten_svg, similarity_scale
from tests.conftest import (
    CLIPPED_SVG,
    DASHED_GROUP_SVG,
    GROUPED_RECT_SVG,
    NESTED_SVG,
    PARTIAL_PATH_SVG,
    ROTATED_CIRCLE_SVG,
    STROKED_SKEW_SVG,
    STROKED_UNIFORM_SVG,
    ZERO_WIDTH_RECT_SVG,
)


def q(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


def transforms_in(root: ET.Element) -> list[str]:
    return [el.get("transform") for el in root.iter() if el.get("transform") is not None]


def test_group_translation_is_baked():
    report = flatten_svg(GROUPED_RECT_SVG)
    root = ET.fromstring(report.svg)
    paths = list(root.iter(q("path")))
    assert len(paths) == 1
    assert paths[0].get("d") == "M10 20 L20 20 L20 30 L10 30 Z"
    assert paths[0].get("id") == "box"
    assert paths[0].get("fill") == "red"
    assert paths[0].get("width") is None
    assert transforms_in(root) == []
    assert report.baked_elements == 1
    assert report.converted_shapes == 1
    assert report.kept_transforms == 0
    assert report.verified


def test_rotated_circle_is_verified():
    report = flatten_svg(ROTATED_CIRCLE_SVG)
    root = ET.fromstring(report.svg)
    path = root.find(q("path"))
    assert path is not None
    assert path.get("d").startswith("M50 60 A10 10")
    assert transforms_in(root) == []
    assert report.verified


def test_circle_as_cubics():
    report = flatten_svg(ROTATED_CIRCLE_SVG, FlattenOptions(bezier_arcs=True))
    path = ET.fromstring(report.svg).find(q("path"))
    assert " C" in path.get("d")
    assert " A" not in path.get("d")
    assert report.verified


def test_non_uniform_stroke_keeps_transform():
    report = flatten_svg(STROKED_SKEW_SVG)
    root = ET.fromstring(report.svg)
    circle = root.find(f"{q('g')}/{q('circle')}")
    assert circle is not None
    assert circle.get("transform") == "scale(2 1)"
    assert root.find(q("g")).get("transform") is None
    assert report.kept_transforms == 1
    assert report.baked_elements == 0


def test_uniform_stroke_is_scaled():
    report = flatten_svg(STROKED_UNIFORM_SVG)
    path = ET.fromstring(report.svg).find(f"{q('g')}/{q('path')}")
    assert path.get("d") == "M0 0 L20 0"
    assert path.get("stroke-width") == "6"
    assert report.verified


def test_inherited_dash_pattern_is_scaled():
    report = flatten_svg(DASHED_GROUP_SVG)
    path = ET.fromstring(report.svg).find(f"{q('g')}/{q('g')}/{q('path')}")
    assert path.get("d") == "M0 0 L12 0"
    assert path.get("stroke-width") == "3"
    assert path.get("stroke-dasharray") == "6 3"
    assert path.get("stroke-dashoffset") == "3"
    assert report.verified


def test_partly_readable_path_keeps_later_commands_and_is_not_verified():
    report = flatten_svg(PARTIAL_PATH_SVG)
    path = ET.fromstring(report.svg).find(q("path"))
    assert path.get("d") == "M1 1 L21 21 L31 31 Z"
    assert path.get("transform") is None
    assert report.verification_failures == ["path"]
    assert not report.verified


def test_references_and_text_keep_transform():
    report = flatten_svg(CLIPPED_SVG)
    root = ET.fromstring(report.svg)
    group = root.find(q("g"))
    rect = group.find(q("rect"))
    text = group.find(q("text"))
    assert rect.get("transform") == "translate(5 5)"
    assert text.get("transform") == "translate(5 5)"
    assert group.get("transform") is None
    # clip path content lives in its own coordinate system
    assert root.find(f"{q('defs')}/{q('clipPath')}/{q('rect')}").get("transform") == "scale(3)"
    assert report.kept_transforms == 2
    assert report.baked_elements == 0


def test_nested_viewport_is_wrapped():
    report = flatten_svg(NESTED_SVG)
    root = ET.fromstring(report.svg)
    outer = root.find(q("g"))
    assert outer.get("transform") is None
    wrapper = outer.find(q("g"))
    assert wrapper.get("transform") == "translate(5 5)"
    assert wrapper.find(q("svg")) is not None
    # content of the nested viewport is untouched
    assert wrapper.find(f"{q('svg')}/{q('rect')}") is not None


def test_zero_sized_shape_is_left_alone():
    report = flatten_svg(ZERO_WIDTH_RECT_SVG)
    rect = ET.fromstring(report.svg).find(q("rect"))
    assert rect is not None
    assert rect.get("transform") == "translate(1 1)"
    assert len(report.diagnostics.by_severity(Severity.DEGENERATE)) == 1


def test_identity_document_is_unchanged_geometry():
    svg = '<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"><path d="M1 1 L2 2"/></svg>'
    report = flatten_svg(svg)
    path = ET.fromstring(report.svg).find(q("path"))
    assert path.get("d") == "M1 1 L2 2"
    assert report.converted_shapes == 0
    assert report.baked_elements == 1


def test_output_precision():
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10">'
        '<g transform="scale(0.333333333)"><path d="M1 1 L3 3"/></g></svg>'
    )
    report = flatten_svg(svg, FlattenOptions(precision=2))
    assert ET.fromstring(report.svg).find(f"{q('g')}/{q('path')}").get("d") == "M0.33 0.33 L1 1"


@pytest.mark.parametrize("text", ["", "   ", "<svg", "<html/>"])
def test_invalid_documents_raise(text):
    with pytest.raises(TransformInputError):
        flatten_svg(text)


def test_similarity_scale():
    assert similarity_scale(scaling(3)) == 3
    assert similarity_scale(scaling(-2, 2)) == 2
    assert similarity_scale(scaling(2, 1)) is None
    assert similarity_scale(Matrix(a=1, c=1)) is None
    assert abs(similarity_scale(rotation(pi() / 5) @ scaling(2)) - 2) < 1e-20
