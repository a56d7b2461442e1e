"""
Geometric helpers for document quadrilaterals.

Pure functions over (4, 2) point arrays: canonical corner ordering,
shoelace area and edge lengths. Used by the confidence scorer, the boundary
detector and the perspective rectifier.
"""

import logging
from typing import Sequence, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

PointArray = Union[np.ndarray, Sequence[Sequence[float]]]


def _as_quad_array(points: PointArray) -> np.ndarray:
    pts = np.asarray(points, dtype=np.float32)
    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )
    return pts


def order_points(points: PointArray) -> np.ndarray:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    Points are sorted by y (ties broken by x so every permutation of the same
    input produces the same result), split into the top pair and the bottom
    pair, and each pair is sorted by x.

    Degenerate input (duplicates, collinear points) is not rejected here.
    It yields a degenerate quadrilateral that the rectifier refuses later.

    Args:
        points: Array of 4 points with shape (4, 2) or list of [x, y] pairs.

    Returns:
        Array of shape (4, 2), dtype float32: [TL, TR, BR, BL].

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> order_points([[400, 300], [100, 100], [100, 300], [400, 100]]).tolist()
        [[100.0, 100.0], [400.0, 100.0], [400.0, 300.0], [100.0, 300.0]]
    """
    pts = _as_quad_array(points)

    # lexsort uses the last key as primary: y first, then x
    by_y = pts[np.lexsort((pts[:, 0], pts[:, 1]))]

    top = by_y[:2][np.argsort(by_y[:2, 0], kind="stable")]
    bottom = by_y[2:][np.argsort(by_y[2:, 0], kind="stable")]

    ordered = np.array([top[0], top[1], bottom[1], bottom[0]], dtype=np.float32)

    logger.debug(
        f"Ordered points: TL={ordered[0]}, TR={ordered[1]}, "
        f"BR={ordered[2]}, BL={ordered[3]}"
    )
    return ordered


def polygon_area(points: PointArray) -> float:
    """
    Area of a polygon via the shoelace formula.

    The vertices are taken in the given order; for a canonical quadrilateral
    the result does not depend on how the corners were originally listed.

    Example:
        >>> polygon_area([[0, 0], [100, 0], [100, 50], [0, 50]])
        5000.0
    """
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2 or len(pts) < 3:
        raise ValueError(f"Expected at least 3 points with shape (N, 2), got {pts.shape}")

    x = pts[:, 0]
    y = pts[:, 1]
    signed = np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)
    return float(abs(signed) / 2.0)


def side_length(a: PointArray, b: PointArray) -> float:
    """Euclidean distance between two points."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return float(np.hypot(*(b - a)))


def calculate_edge_lengths(
    quad: PointArray,
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of an ordered quadrilateral.

    Args:
        quad: 4 corner points in order [TL, TR, BR, BL].

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> calculate_edge_lengths([[100, 100], [400, 100], [400, 200], [100, 200]])
        (300.0, 100.0, 300.0, 100.0)
    """
    tl, tr, br, bl = _as_quad_array(quad)

    top_edge = side_length(tl, tr)
    right_edge = side_length(tr, br)
    bottom_edge = side_length(br, bl)
    left_edge = side_length(bl, tl)

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def full_frame_quadrilateral(width: int, height: int) -> np.ndarray:
    """Corners of the whole raster: [(0,0), (w,0), (w,h), (0,h)]."""
    return np.array(
        [[0, 0], [width, 0], [width, height], [0, height]], dtype=np.float32
    )
