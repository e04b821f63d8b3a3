"""svgbake arbitrary-precision transform engine."""

from svgbake.engine.arc import EllipticalArc, transform_arc
from svgbake.engine.bbox import object_bounding_box_transform
from svgbake.engine.decomposition import compose_transform, decompose_matrix, matrix_to_minimal_transform
from svgbake.engine.diagnostics import Diagnostics, Severity, TransformInputError
from svgbake.engine.matrix import IDENTITY, Matrix
from svgbake.engine.numeric import EPSILON, VERIFICATION_TOLERANCE, numeric_context
from svgbake.engine.optimization import optimize_transform_list
from svgbake.engine.path_transform import transform_path_data
from svgbake.engine.transform_parser import parse_transform
from svgbake.engine.viewport import build_full_ctm

__all__ = [
    "EllipticalArc",
    "transform_arc",
    "object_bounding_box_transform",
    "compose_transform",
    "decompose_matrix",
    "matrix_to_minimal_transform",
    "Diagnostics",
    "Severity",
    "TransformInputError",
    "IDENTITY",
    "Matrix",
    "EPSILON",
    "VERIFICATION_TOLERANCE",
    "numeric_context",
    "optimize_transform_list",
    "transform_path_data",
    "parse_transform",
    "build_full_ctm",
]
