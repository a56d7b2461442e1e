"""
Common type definitions for the document scan pipeline.

This module provides Pydantic-based type definitions for the core data
structures shared by every stage: raster surfaces, points and quadrilaterals.

These types provide:
- Type validation and conversion
- Consistent interfaces across detection, rectification and enhancement
- Integration with numpy arrays and OpenCV
"""

from typing import Any, List, Tuple, Union

import cv2
import numpy as np
from pydantic import BaseModel, Field, field_validator

from src.common.exceptions import UnsupportedInputError

# Number of samples per pixel in a RasterSurface (R, G, B, A)
RASTER_CHANNELS = 4


def _describe_invalid_raster(v: Any) -> Union[str, None]:
    """Return why ``v`` is not a valid RGBA raster, or None when it is."""
    if not isinstance(v, np.ndarray):
        return f"Expected numpy.ndarray, got {type(v).__name__}"
    if v.size == 0:
        return "Raster array is empty"
    if v.ndim != 3 or v.shape[2] != RASTER_CHANNELS:
        return f"Expected RGBA raster with shape (H, W, 4), got shape {v.shape}"
    if v.dtype != np.uint8:
        return f"Expected uint8 samples, got {v.dtype}"
    return None


class RasterSurface(BaseModel):
    """
    Two-dimensional grid of RGBA pixel samples.

    A RasterSurface is owned transiently by each pipeline stage. Stages never
    mutate a surface they receive; they work on a private copy and hand a new
    surface to the next stage.

    Build surfaces from decoded images with ``from_array``, which rejects
    anything that is not a raster with UnsupportedInputError. Direct
    construction expects RGBA data already and raises pydantic's
    ValidationError otherwise.

    Attributes:
        data: Numpy array with shape (H, W, 4), dtype uint8, channel order RGBA.

    Example:
        >>> image = cv2.imread("receipt.jpg")
        >>> surface = RasterSurface.from_array(image)
        >>> print(surface.width, surface.height)
        1280 960
    """

    data: np.ndarray = Field(..., description="RGBA samples as (H, W, 4) uint8 array")

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("data")
    @classmethod
    def _validate_raster(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the array is an RGBA uint8 raster.

        Raises:
            ValueError: If the array is not a valid raster.
        """
        problem = _describe_invalid_raster(v)
        if problem is not None:
            raise ValueError(problem)
        return v

    @classmethod
    def from_array(cls, image: Any, channel_order: str = "bgr") -> "RasterSurface":
        """
        Build a RasterSurface from a decoded image array.

        Decoders hand over grayscale (H, W), three channel or four channel
        arrays. OpenCV decoders produce BGR/BGRA, hence the default order.

        Args:
            image: Decoded uint8 image array.
            channel_order: "bgr" for OpenCV output or "rgb" for RGB/RGBA arrays.

        Returns:
            RasterSurface with its own copy of the samples.

        Raises:
            UnsupportedInputError: If ``image`` is not a decodable uint8 raster.
        """
        if channel_order not in ("bgr", "rgb"):
            raise ValueError(f"channel_order must be 'bgr' or 'rgb', got {channel_order!r}")

        if not isinstance(image, np.ndarray):
            raise UnsupportedInputError(
                f"Expected numpy.ndarray image, got {type(image).__name__}"
            )
        if image.size == 0:
            raise UnsupportedInputError("Image array is empty")
        if image.dtype != np.uint8:
            raise UnsupportedInputError(
                f"Expected uint8 image, got {image.dtype}. "
                "Images should be in range [0, 255]"
            )

        if image.ndim == 2 or (image.ndim == 3 and image.shape[2] == 1):
            rgba = cv2.cvtColor(image.reshape(image.shape[:2]), cv2.COLOR_GRAY2RGBA)
        elif image.ndim == 3 and image.shape[2] == 3:
            code = cv2.COLOR_BGR2RGBA if channel_order == "bgr" else cv2.COLOR_RGB2RGBA
            rgba = cv2.cvtColor(image, code)
        elif image.ndim == 3 and image.shape[2] == 4:
            if channel_order == "bgr":
                rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
            else:
                rgba = image.copy()
        else:
            raise UnsupportedInputError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {image.shape}"
            )

        return cls(data=np.ascontiguousarray(rgba))

    @property
    def height(self) -> int:
        """Get raster height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get raster width in pixels."""
        return int(self.data.shape[1])

    @property
    def area(self) -> int:
        """Get raster area in pixels."""
        return self.width * self.height

    def to_bgr(self) -> np.ndarray:
        """Convert to a BGR array for OpenCV encoders."""
        return cv2.cvtColor(self.data, cv2.COLOR_RGBA2BGR)

    def copy(self) -> "RasterSurface":
        """
        Create a deep copy of the raster.

        Returns:
            New RasterSurface instance with copied samples.
        """
        return RasterSurface(data=self.data.copy())

    def __repr__(self) -> str:
        return f"RasterSurface(width={self.width}, height={self.height})"


def as_raster_surface(value: Any) -> RasterSurface:
    """
    Accept a RasterSurface or reject the input immediately.

    Raises:
        UnsupportedInputError: If ``value`` is not a RasterSurface.
    """
    if not isinstance(value, RasterSurface):
        raise UnsupportedInputError(
            f"Expected RasterSurface, got {type(value).__name__}. "
            "Decode the source with RasterSurface.from_array first."
        )
    return value


class Point(BaseModel):
    """
    A 2D point (x, y) in pixel coordinates of one specific raster.

    Example:
        >>> point = Point(x=100.5, y=200)
        >>> point.to_tuple()
        (100.5, 200.0)
    """

    x: float = Field(..., description="X-coordinate (horizontal)")
    y: float = Field(..., description="Y-coordinate (vertical)")

    model_config = {"frozen": True}

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "Point":
        """
        Create Point from numpy array of shape (2,).

        Raises:
            ValueError: If array shape is not (2,).
        """
        arr = np.asarray(arr)
        if arr.shape != (2,):
            raise ValueError(f"Expected array of shape (2,), got {arr.shape}")
        return cls(x=float(arr[0]), y=float(arr[1]))

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        return np.array([self.x, self.y], dtype=dtype)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return float(np.hypot(self.x - other.x, self.y - other.y))


class Quadrilateral(BaseModel):
    """
    Exactly four corner points.

    Order is whatever the producer gave; consumers canonicalize with
    ``src.geometry.order_points`` before relying on [TL, TR, BR, BL].
    """

    points: List[Point] = Field(..., min_length=4, max_length=4)

    model_config = {"frozen": True}

    @classmethod
    def from_numpy(cls, arr: Union[np.ndarray, list]) -> "Quadrilateral":
        """
        Create Quadrilateral from an array-like of shape (4, 2).

        Raises:
            ValueError: If input does not contain exactly 4 points.
        """
        arr = np.asarray(arr, dtype=np.float64)
        if arr.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {arr.shape}"
            )
        return cls(points=[Point.from_numpy(p) for p in arr])

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Convert to a (4, 2) numpy array in stored order."""
        return np.array([p.to_tuple() for p in self.points], dtype=dtype)

    def to_list(self) -> List[Tuple[float, float]]:
        return [p.to_tuple() for p in self.points]
