"""
Configuration types for quadrilateral scoring.
"""

from pydantic import BaseModel, Field, model_validator


class ScoringConfig(BaseModel):
    """Penalty constants of the boundary confidence heuristic.

    Attributes:
        edge_margin_px: Corners closer than this to any raster edge are penalized
        edge_penalty: Factor applied when a corner touches the margin
        min_area_ratio: Quad/raster area ratio below which the quad is noise
        small_area_penalty: Factor applied below ``min_area_ratio``
        max_area_ratio: Ratio above which the quad is likely the photo frame
        large_area_penalty: Factor applied above ``max_area_ratio``
    """

    edge_margin_px: float = Field(default=10.0, ge=0.0)
    edge_penalty: float = Field(default=0.5, ge=0.0, le=1.0)
    min_area_ratio: float = Field(default=0.10, ge=0.0, le=1.0)
    small_area_penalty: float = Field(default=0.3, ge=0.0, le=1.0)
    max_area_ratio: float = Field(default=0.95, ge=0.0, le=1.0)
    large_area_penalty: float = Field(default=0.5, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_area_bounds(self) -> "ScoringConfig":
        if self.min_area_ratio >= self.max_area_ratio:
            raise ValueError(
                f"min_area_ratio ({self.min_area_ratio}) must be less than "
                f"max_area_ratio ({self.max_area_ratio})"
            )
        return self
