"""
Data types for the scan pipeline.

Provides the orchestration settings, the warning policy and the output
record returned for every scanned document.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from src.common.types import Quadrilateral, RasterSurface

DETECTION_FALLBACK_WARNING = (
    "Could not detect document boundaries precisely. Using best approximation."
)
DETECTION_UNAVAILABLE_WARNING = (
    "Document detection unavailable. Enhancing the full image."
)


class WarningPrecedence(str, Enum):
    """Which stage's warning becomes the single displayed ``warning``."""

    ADVISOR = "advisor"  # Advisor problem hides detection fallback
    DETECTION = "detection"  # Detection fallback hides advisor problem


class OrchestrationConfig(BaseModel):
    """Stage sequencing settings.

    Attributes:
        crop: Detect and rectify the document before enhancing
        warning_precedence: Policy for choosing the displayed warning
        max_dimension: Longest side allowed before processing; larger inputs
            are downscaled, None disables downscaling
        detection_backend: Backend passed to ``initialize_engine``
    """

    crop: bool = True
    warning_precedence: WarningPrecedence = WarningPrecedence.ADVISOR
    max_dimension: Optional[int] = Field(default=2000, ge=1)
    detection_backend: str = "opencv"


@dataclass
class ScanResult:
    """
    Output record of one scanned document.

    Corners are expressed in the coordinate system of the processed
    (possibly downscaled) frame.

    Attributes:
        raster: Enhanced output raster.
        filter_name: Preset that was applied.
        confidence: Enhancement confidence (nominal 0.95).
        corners: Detected corners [TL, TR, BR, BL], None when not cropped.
        warning: Single warning selected by the precedence policy.
        warnings: Every warning raised during the run, in stage order.
        detection_confidence: Boundary confidence, None when not cropped.
        used_fallback: True when detection fell back to the full frame.
        rationale: Why the filter was chosen, when the advisor was consulted.
        document_type: Document kind reported by the advisor.
    """

    raster: RasterSurface
    filter_name: str
    confidence: float
    corners: Optional[Quadrilateral] = None
    warning: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    detection_confidence: Optional[float] = None
    used_fallback: bool = False
    rationale: Optional[str] = None
    document_type: Optional[str] = None

    @property
    def was_cropped(self) -> bool:
        return self.corners is not None and not self.used_fallback
