"""
Data types for boundary detection.

Provides configuration and immutable result containers for the
single-document and multi-document detection modes.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator

from src.common.types import Quadrilateral, RasterSurface


class DetectionConfig(BaseModel):
    """Edge/contour pipeline settings and acceptance thresholds.

    Attributes:
        blur_kernel_size: Gaussian kernel size (odd)
        blur_sigma: Gaussian sigma, 0 lets the backend derive it from the kernel
        canny_low: Lower hysteresis threshold for edge detection
        canny_high: Upper hysteresis threshold for edge detection
        max_candidates: Contours examined in single-document mode (largest first)
        approx_epsilon_ratio: Polygon approximation tolerance as a fraction of perimeter
        accept_threshold: Single-document confidence must exceed this
        fallback_confidence: Confidence reported for the full-frame fallback
        multi_min_area_ratio: Multi-document contours below this area ratio are skipped
        multi_accept_threshold: Multi-document confidence must exceed this
        max_workers: Threads used to rectify multi-document candidates
    """

    blur_kernel_size: int = Field(default=5, ge=1)
    blur_sigma: float = Field(default=0.0, ge=0.0)
    canny_low: float = Field(default=75.0, ge=0.0)
    canny_high: float = Field(default=200.0, ge=0.0)
    max_candidates: int = Field(default=5, ge=1)
    approx_epsilon_ratio: float = Field(default=0.02, gt=0.0, lt=1.0)
    accept_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    fallback_confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    multi_min_area_ratio: float = Field(default=0.05, ge=0.0, le=1.0)
    multi_accept_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_workers: int = Field(default=1, ge=1)

    @field_validator("blur_kernel_size")
    @classmethod
    def _check_odd_kernel(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"blur_kernel_size must be odd, got {v}")
        return v

    @model_validator(mode="after")
    def _check_canny_thresholds(self) -> "DetectionConfig":
        if self.canny_low >= self.canny_high:
            raise ValueError(
                f"canny_low ({self.canny_low}) must be less than "
                f"canny_high ({self.canny_high})"
            )
        return self


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of one detection call.

    Attributes:
        quadrilateral: Canonical corners [TL, TR, BR, BL], shape (4, 2), read-only.
        confidence: Heuristic plausibility in [0, 1].
        used_fallback: True when the quadrilateral is the full raster bounds.
    """

    quadrilateral: np.ndarray
    confidence: float
    used_fallback: bool = False

    def __post_init__(self) -> None:
        quad = np.array(self.quadrilateral, dtype=np.float32)
        if quad.shape != (4, 2):
            raise ValueError(
                f"Expected quadrilateral with shape (4, 2), got {quad.shape}"
            )
        quad.setflags(write=False)
        object.__setattr__(self, "quadrilateral", quad)
        object.__setattr__(self, "confidence", float(self.confidence))

    @property
    def corners(self) -> Quadrilateral:
        """Corners as a pydantic Quadrilateral for output records."""
        return Quadrilateral.from_numpy(self.quadrilateral)


@dataclass(frozen=True)
class DetectedDocument:
    """A multi-document hit together with its rectified crop."""

    detection: DetectionResult
    raster: RasterSurface

    @property
    def confidence(self) -> float:
        return self.detection.confidence


@dataclass
class EngineInitResult:
    """
    Result of starting a detection backend once at application start.

    Attributes:
        engine: Ready backend, or None if it could not be started.
        error: Why the backend is unavailable, None when ready.
    """

    engine: Optional[object] = None
    error: Optional[str] = field(default=None)

    @property
    def is_ready(self) -> bool:
        return self.engine is not None
