"""
Main processor for the document scan pipeline.

Orchestrates the stages:
1. Input validation and optional downscale
2. Boundary detection (single or multi document)
3. Perspective rectification
4. Filter selection (explicit, advisor or default)
5. Enhancement

Detection never fails a scan: a missing boundary degrades to the full
frame with a warning. The advisor never fails a scan either.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from src.advisor.gemini_advisor import FilterAdvisor, GeminiFilterAdvisor
from src.advisor.resolver import resolve_filter
from src.advisor.types import FilterSuggestion
from src.common.exceptions import EngineUnavailableError
from src.common.types import RasterSurface, as_raster_surface
from src.detection.boundary_detector import BoundaryDetector
from src.detection.engine import BoundaryDetectionEngine, initialize_engine
from src.enhancement.filter_bank import EnhancementFilterBank
from src.enhancement.presets import get_preset
from src.pipeline.config_loader import PipelineConfig, get_default_config, load_config
from src.pipeline.types import (
    DETECTION_FALLBACK_WARNING,
    DETECTION_UNAVAILABLE_WARNING,
    ScanResult,
    WarningPrecedence,
)
from src.rectification.perspective import PerspectiveRectifier
from src.utils.image_utils import resize_to_fit

logger = logging.getLogger(__name__)


def select_warning(
    detection_warning: Optional[str],
    advisor_warning: Optional[str],
    precedence: WarningPrecedence = WarningPrecedence.ADVISOR,
) -> Optional[str]:
    """
    Pick the single warning shown to the user.

    Example:
        >>> select_warning("boundaries", "advisor", WarningPrecedence.ADVISOR)
        'advisor'
        >>> select_warning("boundaries", None, WarningPrecedence.ADVISOR)
        'boundaries'
    """
    if precedence == WarningPrecedence.DETECTION:
        return detection_warning or advisor_warning
    return advisor_warning or detection_warning


class DocumentPipeline:
    """
    End-to-end document scanner: detect, rectify, enhance.

    Args:
        config: Pipeline configuration. Loads the bundled config.yaml if None.
        engine: Detection backend. Without one, cropping is skipped with a
            warning and multi-document mode is unavailable.
        advisor: Optional filter advisor.

    Example:
        >>> pipeline = DocumentPipeline.from_config()
        >>> surface = load_raster(Path("receipt.jpg"))
        >>> result = pipeline.process(surface)
        >>> if result.warning:
        ...     print(result.warning)
        >>> save_raster(result.raster, Path("receipt_scan.png"))
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        engine: Optional[BoundaryDetectionEngine] = None,
        advisor: Optional[FilterAdvisor] = None,
    ):
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        else:
            self.config = get_default_config()
            logger.info("Loaded default configuration")

        self.rectifier = PerspectiveRectifier(self.config.rectification)
        self.filter_bank = EnhancementFilterBank(self.config.enhancement)
        self.advisor = advisor

        self.detector: Optional[BoundaryDetector] = None
        if engine is not None:
            self.detector = BoundaryDetector(
                engine,
                config=self.config.detection,
                scoring_config=self.config.scoring,
                rectifier=self.rectifier,
            )
        else:
            logger.warning("No detection engine provided, cropping disabled")

        logger.info(
            f"DocumentPipeline initialized: detection={self.detector is not None}, "
            f"advisor={self.advisor is not None}, "
            f"precedence={self.config.orchestration.warning_precedence.value}"
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[PipelineConfig] = None,
        config_path: Optional[Path] = None,
        use_advisor: Optional[bool] = None,
    ) -> "DocumentPipeline":
        """
        Build a pipeline with the configured detection backend and advisor.

        A backend that fails to start is logged and the pipeline runs
        without detection.

        Args:
            config: Pipeline configuration. Loaded from ``config_path`` or
                the bundled file when omitted.
            config_path: YAML file to load when ``config`` is not given.
            use_advisor: Overrides ``advisor.enabled`` when not None.
        """
        if config is None:
            config = load_config(config_path) if config_path else get_default_config()

        if use_advisor is not None and use_advisor != config.advisor.enabled:
            advisor_config = config.advisor.model_copy(update={"enabled": use_advisor})
            config = config.model_copy(update={"advisor": advisor_config})

        init = initialize_engine(config.orchestration.detection_backend)
        if not init.is_ready:
            logger.error(f"Detection unavailable: {init.error}")

        advisor = GeminiFilterAdvisor(config.advisor) if config.advisor.enabled else None
        return cls(config=config, engine=init.engine, advisor=advisor)

    def _prepare(self, raster: RasterSurface) -> RasterSurface:
        raster = as_raster_surface(raster)
        return resize_to_fit(raster, self.config.orchestration.max_dimension)

    def _choose_filter(
        self,
        raster: RasterSurface,
        filter_name: Optional[str],
        use_advisor: bool,
    ) -> Tuple[str, Optional[FilterSuggestion], Optional[str]]:
        """Return (filter name, advisor suggestion, advisor warning)."""
        if filter_name is not None:
            return filter_name, None, None

        if not use_advisor:
            return self.config.enhancement.default_filter, None, None

        outcome = resolve_filter(self.advisor, raster, self.config.advisor)
        suggestion = outcome.suggestion
        logger.info(
            f"Filter '{suggestion.suggested_filter}' selected by "
            f"{suggestion.source} ({suggestion.confidence:.2f})"
        )
        return suggestion.suggested_filter, suggestion, outcome.warning

    def process(
        self,
        raster: RasterSurface,
        filter_name: Optional[str] = None,
        crop: Optional[bool] = None,
        use_advisor: Optional[bool] = None,
    ) -> ScanResult:
        """
        Scan a single document.

        Args:
            raster: Captured frame. Not modified.
            filter_name: Preset to apply. When None the advisor (if enabled)
                or the configured default decides.
            crop: Detect and rectify first. Defaults to ``orchestration.crop``.
            use_advisor: Consult the advisor. Defaults to ``advisor.enabled``.

        Returns:
            ScanResult with the enhanced raster and any warnings.

        Raises:
            UnsupportedInputError: If ``raster`` is not a RasterSurface.
            UnknownFilterError: If ``filter_name`` is not a preset.
            RectificationError: If an accepted boundary cannot be warped.
        """
        crop = self.config.orchestration.crop if crop is None else crop
        use_advisor = self.config.advisor.enabled if use_advisor is None else use_advisor
        if filter_name is not None:
            get_preset(filter_name)

        logger.info("[Stage 1/4] Input Preparation")
        working = self._prepare(raster)

        corners = None
        detection_confidence = None
        used_fallback = False
        detection_warning = None

        logger.info("[Stage 2/4] Boundary Detection")
        if not crop:
            logger.info("Cropping disabled, enhancing full frame")
        elif self.detector is None:
            logger.warning("Cropping requested without a detection engine")
            detection_warning = DETECTION_UNAVAILABLE_WARNING
        else:
            detection = self.detector.detect(working)
            corners = detection.corners
            detection_confidence = detection.confidence
            used_fallback = detection.used_fallback

            if used_fallback:
                detection_warning = DETECTION_FALLBACK_WARNING
            else:
                working = self.rectifier.rectify(working, detection.quadrilateral)
                logger.info(f"Rectified document to {working.width}x{working.height}")

        logger.info("[Stage 3/4] Filter Selection")
        name, suggestion, advisor_warning = self._choose_filter(
            working, filter_name, use_advisor
        )

        logger.info("[Stage 4/4] Enhancement")
        enhanced = self.filter_bank.apply(working, name)

        warnings = [w for w in (detection_warning, advisor_warning) if w]
        warning = select_warning(
            detection_warning,
            advisor_warning,
            self.config.orchestration.warning_precedence,
        )

        return ScanResult(
            raster=enhanced.raster,
            filter_name=enhanced.filter_name,
            confidence=enhanced.confidence,
            corners=corners,
            warning=warning,
            warnings=warnings,
            detection_confidence=detection_confidence,
            used_fallback=used_fallback,
            rationale=suggestion.rationale if suggestion else None,
            document_type=suggestion.document_type if suggestion else None,
        )

    def process_multiple(
        self,
        raster: RasterSurface,
        filter_name: Optional[str] = None,
        use_advisor: Optional[bool] = None,
    ) -> List[ScanResult]:
        """
        Scan every document visible in one frame.

        The advisor is consulted once on the whole frame and its filter is
        applied to every document.

        Returns:
            One ScanResult per document, highest detection confidence first.
            Empty when nothing qualifies.

        Raises:
            UnsupportedInputError: If ``raster`` is not a RasterSurface.
            UnknownFilterError: If ``filter_name`` is not a preset.
            EngineUnavailableError: If the pipeline has no detection engine.
        """
        if self.detector is None:
            raise EngineUnavailableError(
                "Multi-document scanning requires a detection engine"
            )

        use_advisor = self.config.advisor.enabled if use_advisor is None else use_advisor
        if filter_name is not None:
            get_preset(filter_name)

        working = self._prepare(raster)

        name, suggestion, advisor_warning = self._choose_filter(
            working, filter_name, use_advisor
        )

        documents = self.detector.detect_multiple(working)
        if not documents:
            logger.warning("No documents found in frame")
            return []

        results = []
        for document in documents:
            enhanced = self.filter_bank.apply(document.raster, name)
            results.append(
                ScanResult(
                    raster=enhanced.raster,
                    filter_name=enhanced.filter_name,
                    confidence=enhanced.confidence,
                    corners=document.detection.corners,
                    warning=advisor_warning,
                    warnings=[advisor_warning] if advisor_warning else [],
                    detection_confidence=document.confidence,
                    used_fallback=False,
                    rationale=suggestion.rationale if suggestion else None,
                    document_type=suggestion.document_type if suggestion else None,
                )
            )

        logger.info(f"Scanned {len(results)} documents with filter '{name}'")
        return results
