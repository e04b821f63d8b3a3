"""Tests for path data parsing and coordinate baking."""

from __future__ import annotations

from decimal import Decimal

import pytest

from svgbake.engine.diagnostics import Severity, TransformInputError
from svgbake.engine.matrix import IDENTITY, scaling, translation
from svgbake.engine.path_data import PathCommand, parse_path_data, serialize_path_data
from svgbake.engine.path_transform import transform_path_commands, transform_path_data
from svgbake.engine.transform_parser import parse_transform


def test_parse_basic_path():
    commands = parse_path_data("M10 20 L30 40 Z")
    assert [c.code for c in commands] == ["M", "L", "Z"]
    assert commands[1].args == (Decimal(30), Decimal(40))


def test_implicit_lineto_after_moveto():
    commands = parse_path_data("m0 0 10 10 20 20")
    assert [c.code for c in commands] == ["m", "l", "l"]


def test_implicit_repeats_are_split():
    commands = parse_path_data("M0 0 C1 1 2 2 3 3 4 4 5 5 6 6")
    assert [c.code for c in commands] == ["M", "C", "C"]


def test_compact_arc_flags():
    commands = parse_path_data("M0 0a5 5 0 105 5")
    assert commands[1].args == tuple(Decimal(v) for v in (5, 5, 0, 1, 0, 5, 5))


def test_compact_numbers():
    commands = parse_path_data("M1e2-.5.5.5")
    assert commands[0].args == (Decimal(100), Decimal("-0.5"))
    assert commands[1].args == (Decimal("0.5"), Decimal("0.5"))


def test_incomplete_group_is_dropped(diagnostics):
    commands = parse_path_data("M10 20 L30", diagnostics)
    assert [c.code for c in commands] == ["M"]
    assert len(diagnostics.by_severity(Severity.DEGENERATE)) == 1


def test_incomplete_group_mid_path_keeps_later_commands(diagnostics):
    commands = parse_path_data("M0 0 L10 L20 20 L30 30 Z", diagnostics)
    assert [c.code for c in commands] == ["M", "L", "L", "Z"]
    assert commands[1].args == (Decimal(20), Decimal(20))
    assert len(diagnostics.by_severity(Severity.DEGENERATE)) == 1


def test_invalid_arc_flag_skips_to_next_command(diagnostics):
    commands = parse_path_data("M0 0 A5 5 0 2 1 10 10 L20 20", diagnostics)
    assert [c.code for c in commands] == ["M", "L"]
    assert commands[1].args == (Decimal(20), Decimal(20))
    assert len(diagnostics) == 1


def test_transform_continues_after_incomplete_group(diagnostics):
    d = transform_path_data("M0 0 L10 L20 20 L30 30 Z", translation(1, 1), diagnostics=diagnostics)
    assert d == "M1 1 L21 21 L31 31 Z"
    assert len(diagnostics) == 1


def test_path_must_start_with_moveto(diagnostics):
    assert parse_path_data("L10 10", diagnostics) == []
    assert len(diagnostics) == 1


def test_parse_stops_at_garbage(diagnostics):
    commands = parse_path_data("M0 0 L10 10 X 5 5", diagnostics)
    assert len(commands) == 2
    assert len(diagnostics) == 1


def test_missing_path_data_raises():
    with pytest.raises(TransformInputError):
        parse_path_data(None)
    with pytest.raises(TransformInputError):
        transform_path_data(None, IDENTITY)


def test_serialize():
    commands = [
        PathCommand("M", False, (Decimal(10), Decimal(20))),
        PathCommand("L", True, (Decimal("0.1234567"), Decimal(-3))),
        PathCommand("Z", False),
    ]
    assert serialize_path_data(commands) == "M10 20 l0.123457 -3 Z"


def test_identity_round_trip():
    d = "M10 20 L30 40 C1 2 3 4 5 6 S7 8 9 10 Q1 1 2 2 T3 3 A5 4 30 0 1 20 20 Z"
    assert transform_path_data(d, IDENTITY) == d


def test_translation():
    assert transform_path_data("M0 0 L10 0", translation(10, 20)) == "M10 20 L20 20"


def test_horizontal_and_vertical_become_lines():
    assert transform_path_data("M0 0 H10 V10", IDENTITY) == "M0 0 L10 0 L10 10"


def test_rotation_bakes_axis_aligned_segments():
    assert transform_path_data("M10 0 H20", parse_transform("rotate(90)")) == "M0 10 L0 20"


def test_relative_commands_become_absolute():
    d = transform_path_data("m10 10 l5 5 h5 v5 z", translation(100, 0))
    assert d == "M110 10 L115 15 L120 15 L120 20 Z"


def test_relative_output_is_kept_when_requested():
    d = transform_path_data("m10 10 l5 5 h5", scaling(2), to_absolute=False)
    assert d == "m20 20 l10 10 l10 0"


def test_closepath_resets_current_point():
    d = transform_path_data("M10 10 L20 10 Z l5 5", IDENTITY)
    assert d == "M10 10 L20 10 Z L15 15"


def test_second_subpath_relative_moveto():
    d = transform_path_data("M10 10 L20 10 Z m5 5 l1 0", translation(1, 1))
    assert d == "M11 11 L21 11 Z M16 16 L17 16"


def test_curves_transform_every_point():
    d = transform_path_data("M0 0 C1 2 3 4 5 6 Q7 8 9 10", scaling(2))
    assert d == "M0 0 C2 4 6 8 10 12 Q14 16 18 20"


def test_reflected_arc_flips_sweep():
    assert transform_path_data("M0 0 A10 5 0 0 1 20 0", scaling(-1, 1)) == "M0 0 A10 5 0 0 0 -20 0"


def test_relative_arc_endpoint():
    d = transform_path_data("M10 10 a5 5 0 0 1 10 0", translation(1, 1))
    assert d == "M11 11 A5 5 0 0 1 21 11"


def test_arc_check_is_reported():
    baked = transform_path_commands(parse_path_data("M0 0 A10 5 0 0 1 20 0"), scaling(2, 3))
    assert baked.verified
    assert baked.max_error < Decimal("1e-30")
