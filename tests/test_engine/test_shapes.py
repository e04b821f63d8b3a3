"""Tests for basic shape to path conversion."""

from __future__ import annotations

import pytest

from svgbake.engine.diagnostics import TransformInputError
from svgbake.engine.path_data import serialize_path_data
from svgbake.engine.shapes import (
    circle_to_path,
    ellipse_to_path,
    line_to_path,
    parse_points,
    polygon_to_path,
    polyline_to_path,
    rect_to_path,
)


def test_plain_rect():
    assert serialize_path_data(rect_to_path(0, 0, 10, 20)) == "M0 0 L10 0 L10 20 L0 20 Z"


def test_rounded_rect():
    d = serialize_path_data(rect_to_path(0, 0, 100, 50, rx=10))
    assert d == (
        "M10 0 L90 0 A10 10 0 0 1 100 10 L100 40 A10 10 0 0 1 90 50 "
        "L10 50 A10 10 0 0 1 0 40 L0 10 A10 10 0 0 1 10 0 Z"
    )


def test_rect_radii_default_to_each_other_and_clamp():
    commands = rect_to_path(0, 0, 10, 10, rx=None, ry=20)
    arc = next(c for c in commands if c.letter == "A")
    assert arc.args[:2] == (5, 5)


def test_rect_requires_area():
    with pytest.raises(TransformInputError):
        rect_to_path(0, 0, 0, 10)
    with pytest.raises(TransformInputError):
        rect_to_path(0, 0, 10, 10, rx=-1)


def test_circle_as_arcs():
    d = serialize_path_data(circle_to_path(50, 50, 10))
    assert d == (
        "M60 50 A10 10 0 0 0 50 40 A10 10 0 0 0 40 50 "
        "A10 10 0 0 0 50 60 A10 10 0 0 0 60 50 Z"
    )


def test_circle_as_cubics():
    commands = circle_to_path(50, 50, 10, bezier_arcs=True)
    assert [c.code for c in commands] == ["M", "C", "C", "C", "C", "Z"]
    assert commands[1].args[-2:] == (50, 40)
    assert commands[4].args[-2:] == (60, 50)


def test_ellipse():
    d = serialize_path_data(ellipse_to_path(0, 0, 20, 10))
    assert d.startswith("M20 0 A20 10 0 0 0 0 -10")


def test_circle_requires_radius():
    with pytest.raises(TransformInputError):
        circle_to_path(0, 0, 0)


def test_line():
    assert serialize_path_data(line_to_path(0, 0, 10, 10)) == "M0 0 L10 10"


def test_polyline_and_polygon():
    assert serialize_path_data(polyline_to_path("0,0 10,10 20,0")) == "M0 0 L10 10 L20 0"
    assert serialize_path_data(polygon_to_path("0,0 10,10 20,0")) == "M0 0 L10 10 L20 0 Z"
    assert polygon_to_path("") == []


def test_odd_points_drop_last_value(diagnostics):
    assert parse_points("0 0 10", diagnostics) == [(0, 0)]
    assert len(diagnostics) == 1
