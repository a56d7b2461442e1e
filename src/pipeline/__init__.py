"""
Document scan pipeline.

Sequences detection, rectification, filter selection and enhancement,
and reports the outcome as ScanResult records.
"""

from src.pipeline.config_loader import PipelineConfig, get_default_config, load_config
from src.pipeline.processor import DocumentPipeline, select_warning
from src.pipeline.types import (
    DETECTION_FALLBACK_WARNING,
    DETECTION_UNAVAILABLE_WARNING,
    OrchestrationConfig,
    ScanResult,
    WarningPrecedence,
)

__all__ = [
    "DocumentPipeline",
    "select_warning",
    "PipelineConfig",
    "OrchestrationConfig",
    "load_config",
    "get_default_config",
    "ScanResult",
    "WarningPrecedence",
    "DETECTION_FALLBACK_WARNING",
    "DETECTION_UNAVAILABLE_WARNING",
]
