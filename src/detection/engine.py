"""Boundary detection backends.

The detector only needs a handful of vision primitives. They are expressed
as the ``BoundaryDetectionEngine`` protocol so the detection algorithm
(steps, thresholds, scoring) runs unchanged on any conforming backend.
``OpenCVEngine`` is the bundled implementation.

The backend is started once with ``initialize_engine`` and the resulting
``EngineInitResult`` is handed to the pipeline.

Example:
    >>> init = initialize_engine()
    >>> if init.is_ready:
    ...     detector = BoundaryDetector(init.engine)
"""

import logging
from typing import List, Protocol, runtime_checkable

import cv2
import numpy as np

from src.common.types import RasterSurface
from src.detection.types import EngineInitResult

logger = logging.getLogger(__name__)


@runtime_checkable
class BoundaryDetectionEngine(Protocol):
    """Vision primitives required by the boundary detector."""

    name: str

    def grayscale(self, raster: RasterSurface) -> np.ndarray:
        """Single channel luminance image (H, W) uint8."""
        ...

    def blur(self, gray: np.ndarray, kernel_size: int, sigma: float) -> np.ndarray:
        ...

    def edge_detect(self, image: np.ndarray, low: float, high: float) -> np.ndarray:
        """Binary edge map (H, W) uint8 with edges at 255."""
        ...

    def find_contours(self, edges: np.ndarray) -> List[np.ndarray]:
        """Outermost contours as (N, 2) point chains."""
        ...

    def contour_area(self, contour: np.ndarray) -> float:
        ...

    def arc_length(self, contour: np.ndarray, closed: bool = True) -> float:
        ...

    def approx_polygon(
        self, contour: np.ndarray, epsilon: float, closed: bool = True
    ) -> np.ndarray:
        """Simplified polygon as (K, 2) vertices."""
        ...


class OpenCVEngine:
    """BoundaryDetectionEngine backed by OpenCV.

    Uses Gaussian blur, Canny hysteresis edges, external contours with
    simple chain compression and Douglas-Peucker polygon approximation.
    """

    name = "opencv"

    def grayscale(self, raster: RasterSurface) -> np.ndarray:
        return cv2.cvtColor(raster.data, cv2.COLOR_RGBA2GRAY)

    def blur(self, gray: np.ndarray, kernel_size: int, sigma: float) -> np.ndarray:
        return cv2.GaussianBlur(gray, (kernel_size, kernel_size), sigma)

    def edge_detect(self, image: np.ndarray, low: float, high: float) -> np.ndarray:
        return cv2.Canny(image, low, high)

    def find_contours(self, edges: np.ndarray) -> List[np.ndarray]:
        # OpenCV 4.x returns (contours, hierarchy)
        contours, _ = cv2.findContours(
            edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
        )
        return [c.reshape(-1, 2) for c in contours]

    def contour_area(self, contour: np.ndarray) -> float:
        return float(cv2.contourArea(self._as_cv_contour(contour)))

    def arc_length(self, contour: np.ndarray, closed: bool = True) -> float:
        return float(cv2.arcLength(self._as_cv_contour(contour), closed))

    def approx_polygon(
        self, contour: np.ndarray, epsilon: float, closed: bool = True
    ) -> np.ndarray:
        approx = cv2.approxPolyDP(self._as_cv_contour(contour), epsilon, closed)
        return approx.reshape(-1, 2)

    @staticmethod
    def _as_cv_contour(contour: np.ndarray) -> np.ndarray:
        contour = np.asarray(contour)
        if contour.dtype not in (np.int32, np.float32):
            contour = contour.astype(np.float32)
        return contour.reshape(-1, 1, 2)


_BACKENDS = {
    "opencv": OpenCVEngine,
}


def initialize_engine(backend: str = "opencv") -> EngineInitResult:
    """
    Start a detection backend and verify it works.

    Runs a tiny edge detection as a smoke test so a broken native build is
    reported here rather than halfway through the first scan.

    Args:
        backend: Backend name. Only "opencv" is bundled.

    Returns:
        EngineInitResult with the ready engine, or with ``error`` set.
    """
    factory = _BACKENDS.get(backend)
    if factory is None:
        error = f"Unknown detection backend '{backend}'. Available: {list(_BACKENDS)}"
        logger.error(error)
        return EngineInitResult(engine=None, error=error)

    try:
        engine = factory()
        probe = np.zeros((8, 8), dtype=np.uint8)
        probe[2:6, 2:6] = 255
        engine.find_contours(engine.edge_detect(probe, 75, 200))
    except Exception as e:
        error = f"Failed to initialize {backend} detection backend: {e}"
        logger.error(error)
        return EngineInitResult(engine=None, error=error)

    logger.info(f"Detection backend '{backend}' ready")
    return EngineInitResult(engine=engine, error=None)
