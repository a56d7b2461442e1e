"""
Confidence scoring for candidate document boundaries.

The score is a heuristic plausibility index in [0, 1], not a probability.
It starts at 1.0 and is multiplied by a penalty for each failed check:

1. Edge proximity: a corner inside the margin suggests the photo frame
   itself was detected rather than a document inside it.
2. Area ratio: too small is noise, too large is the whole image.
3. Rectangularity: mean min/max ratio of the two opposite-side pairs.
"""

import logging
from typing import Optional

import numpy as np

from src.geometry.geometry_utils import (
    PointArray,
    calculate_edge_lengths,
    order_points,
    polygon_area,
)
from src.geometry.types import ScoringConfig

logger = logging.getLogger(__name__)


def _pair_ratio(a: float, b: float) -> float:
    longest = max(a, b)
    if longest <= 0:
        return 0.0
    return min(a, b) / longest


def calculate_rectangularity(ordered_quad: PointArray) -> float:
    """
    Mean of the opposite-side length ratios of an ordered quadrilateral.

    A perfect rectangle (or any parallelogram) scores 1.0.

    Example:
        >>> calculate_rectangularity([[0, 0], [100, 0], [100, 50], [0, 50]])
        1.0
    """
    top, right, bottom, left = calculate_edge_lengths(ordered_quad)
    return (_pair_ratio(top, bottom) + _pair_ratio(right, left)) / 2.0


def score_quadrilateral(
    points: PointArray,
    image_width: int,
    image_height: int,
    config: Optional[ScoringConfig] = None,
) -> float:
    """
    Score a candidate quadrilateral as a document boundary.

    Args:
        points: 4 corner points in any order.
        image_width: Width of the raster the points belong to.
        image_height: Height of the raster the points belong to.
        config: Penalty constants. Defaults to ``ScoringConfig()``.

    Returns:
        Confidence in [0, 1]. Inputs that are not exactly 4 points score 0.

    Example:
        >>> quad = [[100, 100], [900, 100], [900, 725], [100, 725]]
        >>> score_quadrilateral(quad, 1000, 1000)
        1.0
    """
    config = config or ScoringConfig()

    pts = np.asarray(points, dtype=np.float64)
    if pts.shape != (4, 2):
        logger.warning(f"Cannot score shape {pts.shape}, expected (4, 2)")
        return 0.0
    if image_width <= 0 or image_height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {image_width}x{image_height}"
        )

    ordered = order_points(pts).astype(np.float64)
    score = 1.0

    margin = config.edge_margin_px
    xs, ys = ordered[:, 0], ordered[:, 1]
    too_close_to_edge = bool(
        np.any(
            (xs < margin)
            | (xs > image_width - margin)
            | (ys < margin)
            | (ys > image_height - margin)
        )
    )
    if too_close_to_edge:
        score *= config.edge_penalty

    area_ratio = polygon_area(ordered) / float(image_width * image_height)
    if area_ratio < config.min_area_ratio:
        score *= config.small_area_penalty
    elif area_ratio > config.max_area_ratio:
        score *= config.large_area_penalty

    rectangularity = calculate_rectangularity(ordered)
    score *= rectangularity

    score = float(np.clip(score, 0.0, 1.0))

    logger.debug(
        f"Confidence {score:.3f} (edge_penalty={too_close_to_edge}, "
        f"area_ratio={area_ratio:.3f}, rectangularity={rectangularity:.3f})"
    )
    return score


class ConfidenceScorer:
    """
    Scores quadrilaterals with a fixed set of penalty constants.

    Example:
        >>> scorer = ConfidenceScorer()
        >>> scorer.score([[0, 0], [500, 0], [500, 500], [0, 500]], 1000, 1000)
        0.5
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()

    def score(self, points: PointArray, image_width: int, image_height: int) -> float:
        return score_quadrilateral(points, image_width, image_height, self.config)
