"""
Enhancement filter bank.

Applies a named preset to a private copy of a raster. The caller's raster
is never modified.
"""

import logging
from typing import List, Optional

from src.common.types import RasterSurface, as_raster_surface
from src.enhancement.filters import OPERATIONS
from src.enhancement.presets import FilterPreset, get_preset, list_presets
from src.enhancement.types import EnhancementConfig, EnhancementResult

logger = logging.getLogger(__name__)


class EnhancementFilterBank:
    """
    Deterministic document enhancement presets.

    Example:
        >>> bank = EnhancementFilterBank()
        >>> result = bank.apply(surface, "highContrast")
        >>> result.filter_name, result.confidence
        ('highContrast', 0.95)
    """

    def __init__(self, config: Optional[EnhancementConfig] = None):
        self.config = config or EnhancementConfig()

    def apply(
        self, raster: RasterSurface, filter_name: Optional[str] = None
    ) -> EnhancementResult:
        """
        Apply a preset to a copy of ``raster``.

        Args:
            raster: Source raster. Not modified.
            filter_name: Preset name. Defaults to ``config.default_filter``.

        Returns:
            EnhancementResult with a new raster.

        Raises:
            UnsupportedInputError: If ``raster`` is not a RasterSurface.
            UnknownFilterError: If the preset does not exist.
        """
        raster = as_raster_surface(raster)
        name = filter_name or self.config.default_filter
        preset = get_preset(name)

        working = raster.data.copy()
        for step in preset.steps:
            OPERATIONS[step.operation](working, *step.args)

        logger.info(
            f"Applied filter '{name}' ({len(preset.steps)} steps) "
            f"to {raster.width}x{raster.height} raster"
        )

        return EnhancementResult(
            raster=RasterSurface(data=working),
            filter_name=name,
            confidence=self.config.nominal_confidence,
        )

    @staticmethod
    def available_filters() -> List[FilterPreset]:
        return list_presets()
