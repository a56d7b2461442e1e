"""
Perspective Rectification

Maps a skewed document quadrilateral to an axis-aligned rectangle so the
page appears as if scanned flat. Output size is inferred from the corners.
"""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from src.common.exceptions import RectificationError
from src.common.types import RasterSurface, as_raster_surface
from src.geometry.geometry_utils import (
    PointArray,
    order_points,
    polygon_area,
    side_length,
)
from src.rectification.types import RectificationConfig

logger = logging.getLogger(__name__)


def calculate_target_dimensions(ordered_quad: PointArray) -> Tuple[float, float]:
    """
    Calculate width and height of the rectified document.

    Each dimension is the longer of its two opposing edges, which undoes the
    foreshortening of the edge farther from the camera.

    Args:
        ordered_quad: 4 corner points in order [TL, TR, BR, BL].

    Returns:
        Tuple of (width, height) as floats.

    Example:
        >>> w, h = calculate_target_dimensions([[100, 150], [450, 100], [470, 300], [80, 320]])
        >>> print(f"{w:.0f} x {h:.0f}")
        391 x 201
    """
    tl, tr, br, bl = np.asarray(ordered_quad, dtype=np.float64)

    width = max(side_length(br, bl), side_length(tr, tl))
    height = max(side_length(tr, br), side_length(tl, bl))

    logger.debug(f"Target dimensions: {width:.1f} x {height:.1f}")
    return width, height


def _compute_homography(
    ordered: np.ndarray, width: float, height: float, config: RectificationConfig
) -> np.ndarray:
    dst = np.array(
        [
            [0, 0],  # Top-Left
            [width, 0],  # Top-Right
            [width, height],  # Bottom-Right
            [0, height],  # Bottom-Left
        ],
        dtype=np.float32,
    )

    try:
        matrix = cv2.getPerspectiveTransform(ordered.astype(np.float32), dst)
    except cv2.error as e:
        raise RectificationError(f"Perspective transform failed: {e}") from e

    if matrix is None or not np.all(np.isfinite(matrix)):
        raise RectificationError("Perspective transform is not finite")

    condition = np.linalg.cond(matrix)
    if not np.isfinite(condition) or condition > config.max_condition_number:
        raise RectificationError(
            f"Perspective transform is ill-conditioned (condition number {condition:.3g})"
        )

    return matrix


def rectify_perspective(
    raster: RasterSurface,
    corners: PointArray,
    config: Optional[RectificationConfig] = None,
) -> RasterSurface:
    """
    Rectify a quadrilateral region of a raster into a flat rectangle.

    Args:
        raster: Source raster. Not modified.
        corners: 4 corner points in any order (canonicalized internally).
        config: Rectification settings. Defaults to ``RectificationConfig()``.

    Returns:
        New RasterSurface of size (round(width), round(height)).

    Raises:
        UnsupportedInputError: If ``raster`` is not a RasterSurface.
        ValueError: If ``corners`` does not hold exactly 4 points.
        RectificationError: If the corners are collinear, duplicated or
            otherwise too degenerate for a projective transform.

    Example:
        >>> surface = RasterSurface.from_array(cv2.imread("page.jpg"))
        >>> flat = rectify_perspective(surface, [[120, 80], [610, 95], [640, 880], [90, 860]])
    """
    config = config or RectificationConfig()
    raster = as_raster_surface(raster)

    ordered = order_points(corners)

    area = polygon_area(ordered)
    if area < config.min_area_px:
        raise RectificationError(
            f"Corners enclose {area:.2f}px², quadrilateral is degenerate "
            "(collinear or duplicate points)"
        )

    width, height = calculate_target_dimensions(ordered)
    out_width, out_height = int(round(width)), int(round(height))
    if out_width < 1 or out_height < 1:
        raise RectificationError(
            f"Rectified size too small: width={out_width}, height={out_height}"
        )

    matrix = _compute_homography(ordered, width, height, config)

    rectified = cv2.warpPerspective(
        raster.data,
        matrix,
        (out_width, out_height),
        flags=config.interpolation_flag,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(0, 0, 0, 0),
    )

    logger.info(f"Rectified quadrilateral to {out_width}x{out_height} rectangle")

    return RasterSurface(data=rectified)


class PerspectiveRectifier:
    """
    Rectifies document quadrilaterals with a fixed configuration.

    Example:
        >>> rectifier = PerspectiveRectifier()
        >>> flat = rectifier.rectify(surface, detection.quadrilateral)
    """

    def __init__(self, config: Optional[RectificationConfig] = None):
        self.config = config or RectificationConfig()

    def rectify(self, raster: RasterSurface, corners: PointArray) -> RasterSurface:
        return rectify_perspective(raster, corners, self.config)
