"""
Shared Utilities

Common functions used across all modules.
"""

from src.utils.image_utils import fit_dimensions, resize_to_fit
from src.utils.io import load_raster, load_yaml, save_raster
from src.utils.logging_config import setup_logging

__all__ = [
    "fit_dimensions",
    "resize_to_fit",
    "load_raster",
    "save_raster",
    "load_yaml",
    "setup_logging",
]
