"""
Document boundary detection.

Pipeline shared by both modes:
1. Grayscale conversion
2. Gaussian blur (5x5, sigma derived from kernel)
3. Canny edge detection (75 / 200)
4. External contour extraction
5. Polygon approximation at 2% of the contour perimeter

Single-document mode examines the five largest contours and accepts the
first quadrilateral scoring above 0.5, otherwise it falls back to the full
raster bounds. Multi-document mode examines every contour above 5% of the
raster area, keeps quadrilaterals scoring above 0.6 and never falls back.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from src.common.exceptions import RectificationError
from src.common.types import RasterSurface, as_raster_surface
from src.detection.engine import BoundaryDetectionEngine
from src.detection.types import DetectedDocument, DetectionConfig, DetectionResult
from src.geometry.confidence_scorer import ConfidenceScorer
from src.geometry.geometry_utils import full_frame_quadrilateral, order_points
from src.geometry.types import ScoringConfig
from src.rectification.perspective import PerspectiveRectifier

logger = logging.getLogger(__name__)


class BoundaryDetector:
    """
    Finds document quadrilaterals in a raster.

    Args:
        engine: Vision backend implementing BoundaryDetectionEngine.
        config: Detection settings. Defaults to ``DetectionConfig()``.
        scoring_config: Confidence penalty constants.
        rectifier: Used by multi-document mode to crop each hit.

    Example:
        >>> detector = BoundaryDetector(initialize_engine().engine)
        >>> result = detector.detect(surface)
        >>> if not result.used_fallback:
        ...     print(result.quadrilateral, result.confidence)
    """

    def __init__(
        self,
        engine: BoundaryDetectionEngine,
        config: Optional[DetectionConfig] = None,
        scoring_config: Optional[ScoringConfig] = None,
        rectifier: Optional[PerspectiveRectifier] = None,
    ):
        if engine is None:
            raise ValueError("BoundaryDetector requires a detection engine")

        self.engine = engine
        self.config = config or DetectionConfig()
        self.scorer = ConfidenceScorer(scoring_config)
        self.rectifier = rectifier or PerspectiveRectifier()

        logger.info(
            f"BoundaryDetector initialized: backend={getattr(engine, 'name', '?')}, "
            f"canny=({self.config.canny_low}, {self.config.canny_high}), "
            f"max_candidates={self.config.max_candidates}"
        )

    @contextmanager
    def _edge_workspace(self, raster: RasterSurface) -> Iterator[np.ndarray]:
        """Yield the edge map; intermediate buffers are released on every exit path."""
        buffers: Dict[str, np.ndarray] = {}
        try:
            buffers["gray"] = self.engine.grayscale(raster)
            buffers["blurred"] = self.engine.blur(
                buffers["gray"], self.config.blur_kernel_size, self.config.blur_sigma
            )
            buffers["edges"] = self.engine.edge_detect(
                buffers["blurred"], self.config.canny_low, self.config.canny_high
            )
            yield buffers["edges"]
        finally:
            buffers.clear()

    def _find_contours(self, raster: RasterSurface) -> List[np.ndarray]:
        with self._edge_workspace(raster) as edges:
            contours = self.engine.find_contours(edges)
        logger.debug(f"Found {len(contours)} contours")
        return contours

    def _approximate(self, contour: np.ndarray) -> np.ndarray:
        perimeter = self.engine.arc_length(contour, True)
        return self.engine.approx_polygon(
            contour, self.config.approx_epsilon_ratio * perimeter, True
        )

    def _rank_by_area(
        self, contours: List[np.ndarray]
    ) -> List[Tuple[np.ndarray, float]]:
        ranked = [(c, self.engine.contour_area(c)) for c in contours]
        # sorted() is stable, equal areas keep contour order
        ranked.sort(key=lambda item: item[1], reverse=True)
        return ranked

    def detect(self, raster: RasterSurface) -> DetectionResult:
        """
        Detect a single document boundary.

        Args:
            raster: Source raster. Not modified.

        Returns:
            DetectionResult. When no quadrilateral scores above the accept
            threshold, the full raster bounds with the fallback confidence
            and ``used_fallback=True``.

        Raises:
            UnsupportedInputError: If ``raster`` is not a RasterSurface.
        """
        raster = as_raster_surface(raster)
        width, height = raster.width, raster.height

        ranked = self._rank_by_area(self._find_contours(raster))

        corners = None
        confidence = 0.0
        for index, (contour, area) in enumerate(ranked[: self.config.max_candidates]):
            approx = self._approximate(contour)
            logger.debug(
                f"Candidate {index}: area={area:.0f}, vertices={len(approx)}"
            )
            if len(approx) == 4:
                corners = order_points(approx)
                confidence = self.scorer.score(corners, width, height)
                break

        if corners is not None and confidence > self.config.accept_threshold:
            logger.info(f"Document boundary detected with confidence {confidence:.3f}")
            return DetectionResult(
                quadrilateral=corners, confidence=confidence, used_fallback=False
            )

        if corners is None:
            logger.warning("No 4-corner contour found, falling back to full frame")
        else:
            logger.warning(
                f"Best quadrilateral confidence {confidence:.3f} <= "
                f"{self.config.accept_threshold}, falling back to full frame"
            )

        return DetectionResult(
            quadrilateral=full_frame_quadrilateral(width, height),
            confidence=self.config.fallback_confidence,
            used_fallback=True,
        )

    def find_candidates(self, raster: RasterSurface) -> List[DetectionResult]:
        """
        Score every plausible document quadrilateral without rectifying.

        Contours smaller than ``multi_min_area_ratio`` of the raster are
        skipped before approximation. Only quadrilaterals scoring above
        ``multi_accept_threshold`` are returned, in contour order.
        """
        raster = as_raster_surface(raster)
        width, height = raster.width, raster.height
        min_area = width * height * self.config.multi_min_area_ratio

        candidates: List[DetectionResult] = []
        for contour in self._find_contours(raster):
            area = self.engine.contour_area(contour)
            if area < min_area:
                continue

            approx = self._approximate(contour)
            if len(approx) != 4:
                continue

            corners = order_points(approx)
            confidence = self.scorer.score(corners, width, height)
            if confidence > self.config.multi_accept_threshold:
                candidates.append(
                    DetectionResult(quadrilateral=corners, confidence=confidence)
                )
            else:
                logger.debug(f"Discarded quadrilateral with confidence {confidence:.3f}")

        return candidates

    def _try_rectify(
        self, raster: RasterSurface, candidate: DetectionResult
    ) -> Optional[DetectedDocument]:
        try:
            cropped = self.rectifier.rectify(raster, candidate.quadrilateral)
        except RectificationError as e:
            logger.warning(f"Dropping document candidate: {e}")
            return None
        return DetectedDocument(detection=candidate, raster=cropped)

    def detect_multiple(self, raster: RasterSurface) -> List[DetectedDocument]:
        """
        Detect and rectify every document in the raster.

        A candidate whose rectification fails is dropped; the others are
        still returned.

        Returns:
            Documents sorted by confidence, highest first. Equal confidences
            keep contour order. An empty list means nothing was found.
        """
        raster = as_raster_surface(raster)
        candidates = self.find_candidates(raster)

        if self.config.max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(
                max_workers=self.config.max_workers, thread_name_prefix="rectify"
            ) as executor:
                rectified = list(
                    executor.map(lambda c: self._try_rectify(raster, c), candidates)
                )
        else:
            rectified = [self._try_rectify(raster, c) for c in candidates]

        documents = [doc for doc in rectified if doc is not None]
        documents.sort(key=lambda doc: doc.confidence, reverse=True)

        logger.info(
            f"Multi-document detection: {len(documents)} accepted "
            f"of {len(candidates)} candidates"
        )
        return documents
