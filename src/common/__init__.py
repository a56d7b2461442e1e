"""
Common types and utilities shared across all stages.

This module provides standardized data types for the document scan pipeline,
ensuring consistency across detection, rectification, enhancement and
orchestration.
"""

from src.common.exceptions import (
    AdvisorError,
    EngineUnavailableError,
    RectificationError,
    ScanPipelineError,
    UnknownFilterError,
    UnsupportedInputError,
)
from src.common.types import Point, Quadrilateral, RasterSurface, as_raster_surface

__all__ = [
    "RasterSurface",
    "Point",
    "Quadrilateral",
    "as_raster_surface",
    "ScanPipelineError",
    "UnsupportedInputError",
    "RectificationError",
    "UnknownFilterError",
    "EngineUnavailableError",
    "AdvisorError",
]
