"""
Data types for the enhancement filter bank.
"""

from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator

from src.common.types import RasterSurface
from src.enhancement.presets import DEFAULT_FILTER, PRESETS


class EnhancementConfig(BaseModel):
    """Filter bank settings.

    Attributes:
        default_filter: Preset used when the caller names none
        nominal_confidence: Confidence reported for every applied preset
    """

    default_filter: str = DEFAULT_FILTER
    nominal_confidence: float = Field(default=0.95, ge=0.0, le=1.0)

    @field_validator("default_filter")
    @classmethod
    def _check_filter(cls, v: str) -> str:
        if v not in PRESETS:
            raise ValueError(f"Unknown filter '{v}'. Available: {list(PRESETS)}")
        return v


@dataclass(frozen=True)
class EnhancementResult:
    """
    Output of one preset application.

    Attributes:
        raster: New enhanced raster; the input is left untouched.
        filter_name: Preset that was applied.
        confidence: Nominal constant meaning "the filter applied successfully",
            not a measured quality.
    """

    raster: RasterSurface
    filter_name: str
    confidence: float
