"""
Document boundary detection.

Locates document quadrilaterals through an edge/contour/polygon pipeline
that runs on any BoundaryDetectionEngine backend.

Modes:
1. Single document: best of the five largest contours, full-frame fallback
2. Multi document: every sufficiently large contour, rectified, no fallback
"""

from src.detection.boundary_detector import BoundaryDetector
from src.detection.engine import BoundaryDetectionEngine, OpenCVEngine, initialize_engine
from src.detection.types import (
    DetectedDocument,
    DetectionConfig,
    DetectionResult,
    EngineInitResult,
)

__all__ = [
    "BoundaryDetector",
    "BoundaryDetectionEngine",
    "OpenCVEngine",
    "initialize_engine",
    "DetectionConfig",
    "DetectionResult",
    "DetectedDocument",
    "EngineInitResult",
]
