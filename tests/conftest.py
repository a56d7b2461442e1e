"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import pytest


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing 4 unordered corner points of a skewed page."""
    import numpy as np

    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float32,
    )


@pytest.fixture
def make_raster():
    """Fixture providing a factory for uniform RGBA rasters."""
    import numpy as np

    from src.common.types import RasterSurface

    def _make(width=64, height=48, rgba=(128, 128, 128, 255)):
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:] = rgba
        return RasterSurface(data=data)

    return _make


@pytest.fixture
def blank_raster(make_raster):
    """Fixture providing a featureless raster where no document can be found."""
    return make_raster(width=800, height=600, rgba=(90, 90, 90, 255))


@pytest.fixture
def document_image():
    """Fixture providing a white page on a dark desk and its true corners."""
    import cv2
    import numpy as np

    from src.common.types import RasterSurface

    # Dark background
    image = np.full((600, 800, 3), 30, dtype=np.uint8)

    # Page covering ~42% of the frame, well inside the edge margin
    pts = np.array([[150, 100], [650, 100], [650, 500], [150, 500]], dtype=np.int32)
    cv2.fillPoly(image, [pts], (245, 245, 245))
    cv2.putText(
        image, "INVOICE 2041", (220, 300), cv2.FONT_HERSHEY_SIMPLEX, 1.5, (20, 20, 20), 3
    )

    return RasterSurface.from_array(image), pts.astype(np.float32)


@pytest.fixture
def two_documents_image():
    """Fixture providing two separate pages side by side on a dark desk."""
    import cv2
    import numpy as np

    from src.common.types import RasterSurface

    image = np.full((600, 800, 3), 30, dtype=np.uint8)

    left = np.array([[60, 100], [360, 100], [360, 500], [60, 500]], dtype=np.int32)
    right = np.array([[440, 100], [740, 100], [740, 500], [440, 500]], dtype=np.int32)
    cv2.fillPoly(image, [left], (240, 240, 240))
    cv2.fillPoly(image, [right], (240, 240, 240))

    return RasterSurface.from_array(image), [left, right]


@pytest.fixture
def opencv_engine():
    """Fixture providing the bundled OpenCV detection backend."""
    from src.detection.engine import OpenCVEngine

    return OpenCVEngine()
