"""
Quadrilateral geometry and boundary confidence scoring.

Pure functions with no dependency on any vision backend.
"""

from src.geometry.confidence_scorer import (
    ConfidenceScorer,
    calculate_rectangularity,
    score_quadrilateral,
)
from src.geometry.geometry_utils import (
    calculate_edge_lengths,
    full_frame_quadrilateral,
    order_points,
    polygon_area,
    side_length,
)
from src.geometry.types import ScoringConfig

__all__ = [
    "order_points",
    "polygon_area",
    "side_length",
    "calculate_edge_lengths",
    "full_frame_quadrilateral",
    "calculate_rectangularity",
    "score_quadrilateral",
    "ConfidenceScorer",
    "ScoringConfig",
]
