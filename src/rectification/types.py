"""
Configuration types for perspective rectification.
"""

import cv2
from pydantic import BaseModel, Field, field_validator

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


class RectificationConfig(BaseModel):
    """Perspective rectification settings.

    Attributes:
        interpolation: Resampling method ("linear", "cubic", "nearest", "area", "lanczos")
        min_area_px: Quadrilaterals with a smaller area are treated as degenerate
        max_condition_number: Homographies worse conditioned than this are rejected
    """

    interpolation: str = "linear"
    min_area_px: float = Field(default=1.0, ge=0.0)
    max_condition_number: float = Field(default=1e10, gt=1.0)

    @field_validator("interpolation")
    @classmethod
    def _check_interpolation(cls, v: str) -> str:
        if v not in INTERPOLATION_FLAGS:
            raise ValueError(
                f"Invalid interpolation: {v}. "
                f"Must be one of {list(INTERPOLATION_FLAGS)}"
            )
        return v

    @property
    def interpolation_flag(self) -> int:
        return INTERPOLATION_FLAGS[self.interpolation]
