"""Engine configuration: numeric precision and flattening behaviour."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context

from svgbake.engine.numeric import DEFAULT_PRECISION, numeric_context


@dataclass
class FlattenOptions:
    """Controls how a document is flattened."""

    # Decimal places written to d and transform attributes
    precision: int = 6

    # Emit circles/ellipses as four cubics instead of arcs
    bezier_arcs: bool = False

    # End-to-end check of every baked path (float sampling)
    verify: bool = True
    e2e_tolerance: float = 1e-3  # max deviation in user units
    clip_segments: int = 64  # samples per path segment used by the check

    # Resolution for physical units (pt, mm, in, ...)
    dpi: int = 96


@dataclass
class EngineConfig:
    """Numeric settings shared by every engine call."""

    precision: int = DEFAULT_PRECISION  # significant digits

    def context(self) -> Context:
        return numeric_context(self.precision)
