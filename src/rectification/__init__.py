"""
Perspective rectification of detected documents.

Warps an arbitrary document quadrilateral to a top-down rectangular view.
"""

from src.rectification.perspective import (
    PerspectiveRectifier,
    calculate_target_dimensions,
    rectify_perspective,
)
from src.rectification.types import RectificationConfig

__all__ = [
    "PerspectiveRectifier",
    "calculate_target_dimensions",
    "rectify_perspective",
    "RectificationConfig",
]
