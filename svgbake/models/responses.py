"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    precision: int = 80


class DiagnosticModel(BaseModel):
    severity: str
    source: str
    message: str


class MatrixResponse(BaseModel):
    matrix: list[str] = Field(..., description="a, b, c, d, e, f")
    svg_matrix: str
    minimal_transform: str = ""
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)


class OptimizeResponse(BaseModel):
    transform: str
    optimization_count: int = 0
    verified: bool = True
    max_error: str = "0"
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)


class DecomposeResponse(BaseModel):
    translate_x: str
    translate_y: str
    rotation_degrees: str
    scale_x: str
    scale_y: str
    skew_x_degrees: str
    skew_y_degrees: str
    verified: bool
    max_error: str
    singular: bool
    minimal_transform: str
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)


class PathTransformResponse(BaseModel):
    d: str
    verified: bool = True
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)


class FlattenResponse(BaseModel):
    svg: str
    baked_elements: int = 0
    converted_shapes: int = 0
    kept_transforms: int = 0
    verified: bool = True
    verification_failures: list[str] = Field(default_factory=list)
    processing_time_ms: float = 0.0
    diagnostics: list[DiagnosticModel] = Field(default_factory=list)


def diagnostic_models(diagnostics) -> list[DiagnosticModel]:
    return [DiagnosticModel(severity=d.severity.value, source=d.source, message=d.message) for d in diagnostics]
