"""
Raster size helpers.
"""

import logging
from typing import Optional, Tuple

import cv2

from src.common.types import RasterSurface

logger = logging.getLogger(__name__)


def fit_dimensions(width: int, height: int, max_dimension: int) -> Tuple[int, int]:
    """
    Scale (width, height) so the longer side is at most ``max_dimension``.

    Aspect ratio is preserved; sizes already within bounds are returned
    unchanged.

    Example:
        >>> fit_dimensions(4000, 3000, 2000)
        (2000, 1500)
    """
    if width >= height and width > max_dimension:
        return max_dimension, max(1, int(round(height * max_dimension / width)))
    if height > width and height > max_dimension:
        return max(1, int(round(width * max_dimension / height))), max_dimension
    return width, height


def resize_to_fit(
    raster: RasterSurface, max_dimension: Optional[int]
) -> RasterSurface:
    """
    Downscale a raster whose longer side exceeds ``max_dimension``.

    Args:
        raster: Source raster. Not modified.
        max_dimension: Longest side allowed, None to disable.

    Returns:
        The input itself when no resize is needed, otherwise a new raster.
    """
    if max_dimension is None:
        return raster

    width, height = fit_dimensions(raster.width, raster.height, max_dimension)
    if (width, height) == (raster.width, raster.height):
        return raster

    logger.info(
        f"Downscaling {raster.width}x{raster.height} raster to {width}x{height}"
    )
    resized = cv2.resize(raster.data, (width, height), interpolation=cv2.INTER_AREA)
    return RasterSurface(data=resized)
