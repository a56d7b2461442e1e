"""
I/O Utilities

File input/output operations for configuration files and rasters.
"""

import yaml
from pathlib import Path
from typing import Dict, Any

import cv2

from src.common.exceptions import UnsupportedInputError
from src.common.types import RasterSurface


def load_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Read a YAML mapping. An empty document reads as an empty mapping.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document is not a mapping.
        yaml.YAMLError: If YAML parsing fails.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"YAML file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a mapping in {file_path}, got {type(data).__name__}"
        )
    return data


def load_raster(file_path: Path) -> RasterSurface:
    """
    Decode an image file into an RGBA RasterSurface.

    Raises:
        FileNotFoundError: If the file does not exist.
        UnsupportedInputError: If OpenCV cannot decode the file.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    image = cv2.imread(str(file_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise UnsupportedInputError(f"Could not decode image: {file_path}")

    return RasterSurface.from_array(image, channel_order="bgr")


def save_raster(raster: RasterSurface, file_path: Path) -> None:
    """Encode a RasterSurface to disk; the format follows the file extension."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # JPEG has no alpha channel
    if file_path.suffix.lower() in (".jpg", ".jpeg"):
        image = raster.to_bgr()
    else:
        image = cv2.cvtColor(raster.data, cv2.COLOR_RGBA2BGRA)

    if not cv2.imwrite(str(file_path), image):
        raise OSError(f"Failed to write image: {file_path}")
