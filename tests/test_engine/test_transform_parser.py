"""Tests for the transform attribute parser."""

from __future__ import annotations

from decimal import Decimal

import pytest

from svgbake.engine.diagnostics import Severity, TransformInputError
from svgbake.engine.matrix import IDENTITY, Matrix, scaling, translation
from svgbake.engine.transform_parser import parse_transform, parse_transform_list, tokenize_transform
from svgbake.engine.transforms import MatrixTransform, Rotate, Scale, Translate, serialize_transform_list
from tests.conftest import close


def test_tokenize():
    assert tokenize_transform("translate(10,20) scale( 2 )") == [("translate", "10,20"), ("scale", " 2 ")]
    with pytest.raises(TransformInputError):
        tokenize_transform(None)


def test_translate_defaults_ty():
    assert parse_transform("translate(10)").equals(translation(10, 0))
    assert parse_transform("translate(10, 20)").equals(translation(10, 20))


def test_uniform_scale():
    assert parse_transform("scale(2)").equals(scaling(2, 2))
    assert parse_transform("scale(2 3)").equals(scaling(2, 3))


def test_rotate_degrees():
    m = parse_transform("rotate(90)")
    assert close(m.a, 0)
    assert close(m.b, 1)
    assert close(m.c, -1)
    assert close(m.d, 0)


def test_rotate_about_point():
    m = parse_transform("rotate(90 10 10)")
    center = m.apply(10, 10)
    assert close(center.x, 10) and close(center.y, 10)
    moved = m.apply(20, 10)
    assert close(moved.x, 10) and close(moved.y, 20)


def test_skew():
    assert close(parse_transform("skewX(45)").c, 1)
    assert close(parse_transform("skewY(45)").b, 1)


def test_matrix_function():
    m = parse_transform("matrix(1 2 3 4 5 6)")
    assert m.to_svg_values() == (1, 2, 3, 4, 5, 6)


def test_chain_applies_left_to_right():
    m = parse_transform("translate(10,20) scale(2)")
    p = m.apply(1, 1)
    assert p.x == 12 and p.y == 22


def test_number_formats():
    m = parse_transform("translate(1e2-.5)")
    assert m.e == 100
    assert m.f == Decimal("-0.5")


def test_unknown_function_is_skipped(diagnostics):
    m = parse_transform("foo(1) translate(5)", diagnostics)
    assert m.equals(translation(5))
    assert len(diagnostics.by_severity(Severity.DEGENERATE)) == 1


def test_function_names_are_case_sensitive(diagnostics):
    assert parse_transform("Translate(10)", diagnostics).equals(IDENTITY)
    assert len(diagnostics) == 1


def test_wrong_arity_is_identity(diagnostics):
    assert parse_transform("translate()", diagnostics).equals(IDENTITY)
    assert parse_transform("matrix(1 2 3)", diagnostics).equals(IDENTITY)
    assert parse_transform("rotate(10 5)", diagnostics).equals(IDENTITY)
    assert len(diagnostics) == 3


def test_unclosed_function_is_reported(diagnostics):
    m = parse_transform("translate(10 20) rotate(45", diagnostics)
    assert m.equals(translation(10, 20))
    assert len(diagnostics.by_severity(Severity.DEGENERATE)) == 1


def test_stray_text_between_functions_is_reported(diagnostics):
    m = parse_transform("translate(10) junk scale(2)", diagnostics)
    assert m.equals(translation(10) @ scaling(2))
    assert len(diagnostics) == 1


def test_units_in_arguments_are_identity(diagnostics):
    assert parse_transform("translate(10px)", diagnostics).equals(IDENTITY)
    assert parse_transform_list("translate(10px) scale(2)", diagnostics) == [Scale(Decimal(2), Decimal(2))]
    assert len(diagnostics) == 2


def test_undefined_skew_is_identity(diagnostics):
    assert parse_transform("skewX(90)", diagnostics).equals(IDENTITY)
    assert len(diagnostics) == 1


def test_empty_transform_is_identity():
    assert parse_transform("") == IDENTITY
    assert parse_transform("   ") == IDENTITY


def test_parse_list():
    items = parse_transform_list("translate(1 2) rotate(30) scale(2) skewX(10) matrix(1 0 0 1 3 4)")
    assert [type(i) for i in items] == [Translate, Rotate, Scale, MatrixTransform, MatrixTransform]
    assert items[2] == Scale(Decimal(2), Decimal(2))
    assert items[4].value == Matrix.from_svg_values(1, 0, 0, 1, 3, 4)


def test_list_serialization():
    items = parse_transform_list("translate(10) rotate(45 5 5) scale(2 3)")
    assert serialize_transform_list(items) == "translate(10) rotate(45 5 5) scale(2 3)"
