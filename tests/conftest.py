"""Shared test fixtures."""

from __future__ import annotations

from decimal import Decimal, localcontext

import pytest

from svgbake.engine.diagnostics import Diagnostics
from svgbake.engine.numeric import numeric_context


# Sample SVGs for the flattening and API tests

GROUPED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="200" viewBox="0 0 200 200">
  <g transform="translate(10 20)">
    <rect id="box" x="0" y="0" width="10" height="10" fill="red"/>
  </g>
</svg>'''

ROTATED_CIRCLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <circle id="dot" cx="50" cy="50" r="10" transform="rotate(90 50 50)" fill="blue"/>
</svg>'''

STROKED_SKEW_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" fill="none">
  <g transform="scale(2 1)">
    <circle cx="5" cy="5" r="5" stroke="black"/>
  </g>
</svg>'''

STROKED_UNIFORM_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">
  <g transform="scale(2)">
    <line x1="0" y1="0" x2="10" y2="0" stroke="black" stroke-width="3"/>
  </g>
</svg>'''

CLIPPED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <defs>
    <clipPath id="c"><rect width="5" height="5" transform="scale(3)"/></clipPath>
  </defs>
  <g transform="translate(5 5)">
    <rect width="10" height="10" clip-path="url(#c)"/>
    <text x="0" y="0">label</text>
  </g>
</svg>'''

NESTED_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <g transform="translate(5 5)">
    <svg x="0" y="0" width="10" height="10" viewBox="0 0 1 1">
      <rect width="1" height="1"/>
    </svg>
  </g>
</svg>'''

DASHED_GROUP_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24">
  <g stroke="black" stroke-dasharray="2 1" style="stroke-dashoffset:1">
    <g transform="scale(3)">
      <line x1="0" y1="0" x2="4" y2="0"/>
    </g>
  </g>
</svg>'''

PARTIAL_PATH_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <path transform="translate(1 1)" d="M0 0 L10 L20 20 L30 30 Z"/>
</svg>'''

ZERO_WIDTH_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <rect width="0" height="10" transform="translate(1 1)"/>
</svg>'''


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def precise():
    """Run the test body under the engine's default 80-digit context."""
    with localcontext(numeric_context()) as ctx:
        yield ctx


def close(a, b, tolerance: str = "1e-25") -> bool:
    return abs(Decimal(a) - Decimal(b)) < Decimal(tolerance)
