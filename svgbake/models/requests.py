"""API request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TransformRequest(BaseModel):
    transform: str = Field(..., description="SVG transform attribute, e.g. 'translate(10 20) rotate(45)'")
    precision: int = Field(default=6, ge=0, le=40, description="Decimal places in the output")


class DecomposeRequest(BaseModel):
    transform: str | None = Field(default=None, description="Transform attribute to decompose")
    matrix: list[str] | None = Field(
        default=None,
        min_length=6,
        max_length=6,
        description="Six matrix(a, b, c, d, e, f) values as decimal strings",
    )
    precision: int = Field(default=6, ge=0, le=40)


class HierarchyItem(BaseModel):
    type: Literal["svg", "g", "element", "transform"] = Field(..., description="Ancestor kind, root first")
    transform: str | None = None
    width: str | None = Field(default=None, description="Viewport width (svg only), may carry a unit")
    height: str | None = Field(default=None, description="Viewport height (svg only), may carry a unit")
    view_box: str | None = None
    preserve_aspect_ratio: str | None = None


class CTMRequest(BaseModel):
    hierarchy: list[HierarchyItem] = Field(..., description="Ancestors from the root svg down to the element")
    precision: int = Field(default=6, ge=0, le=40)


class PathTransformRequest(BaseModel):
    d: str = Field(..., description="Path data")
    transform: str = Field(..., description="Transform attribute to bake into the path")
    precision: int = Field(default=6, ge=0, le=40)
    to_absolute: bool = Field(default=True, description="Emit absolute commands")


class FlattenRequest(BaseModel):
    svg: str = Field(..., description="Raw SVG code")
    precision: int = Field(default=6, ge=0, le=40)
    bezier_arcs: bool = Field(default=False, description="Emit circles and ellipses as cubic curves")
    verify: bool = Field(default=True, description="Check every baked path by sampling")
