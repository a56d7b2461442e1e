"""
Document enhancement filters.

Deterministic per-pixel operations (grayscale, contrast, brightness,
threshold, sharpen) composed into named presets.
"""

from src.enhancement.filter_bank import EnhancementFilterBank
from src.enhancement.filters import (
    apply_brightness,
    apply_contrast,
    apply_grayscale,
    apply_sharpen,
    apply_threshold,
    compute_luma,
    contrast_factor,
)
from src.enhancement.presets import (
    DEFAULT_FILTER,
    PRESETS,
    FilterPreset,
    FilterStep,
    get_preset,
    list_presets,
)
from src.enhancement.types import EnhancementConfig, EnhancementResult

__all__ = [
    "EnhancementFilterBank",
    "EnhancementConfig",
    "EnhancementResult",
    "FilterPreset",
    "FilterStep",
    "PRESETS",
    "DEFAULT_FILTER",
    "get_preset",
    "list_presets",
    "apply_grayscale",
    "apply_contrast",
    "apply_brightness",
    "apply_threshold",
    "apply_sharpen",
    "compute_luma",
    "contrast_factor",
]
