"""
Integration tests for the document scan pipeline.
"""

import json
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from src.advisor.types import (
    ADVISOR_NOT_CONFIGURED_WARNING,
    AdvisorConfig,
    FilterSuggestion,
)
from src.common.exceptions import (
    AdvisorError,
    EngineUnavailableError,
    RectificationError,
    UnknownFilterError,
    UnsupportedInputError,
)
from src.detection.engine import OpenCVEngine
from src.pipeline.config_loader import PipelineConfig
from src.pipeline.processor import DocumentPipeline, select_warning
from src.pipeline.types import (
    DETECTION_FALLBACK_WARNING,
    DETECTION_UNAVAILABLE_WARNING,
    OrchestrationConfig,
    WarningPrecedence,
)


class RecordingAdvisor:
    """Advisor stub that counts calls."""

    def __init__(self, suggestion=None, error=None):
        self.suggestion = suggestion or FilterSuggestion(
            "blackAndWhite", "typed letter", 0.95, "letter"
        )
        self.error = error
        self.calls = 0

    @property
    def is_configured(self):
        return True

    def suggest(self, raster):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.suggestion


@pytest.fixture
def pipeline():
    """Pipeline with the OpenCV backend and default configuration."""
    return DocumentPipeline(config=PipelineConfig(), engine=OpenCVEngine())


def config_with(**orchestration):
    return PipelineConfig(orchestration=OrchestrationConfig(**orchestration))


class TestSelectWarning:
    """Tests for the displayed-warning policy."""

    def test_advisor_precedence(self):
        """Test that the advisor message wins by default."""
        assert select_warning("detect", "advise") == "advise"

    def test_detection_precedence(self):
        """Test the opposite policy."""
        assert select_warning("detect", "advise", WarningPrecedence.DETECTION) == "detect"

    def test_single_warning(self):
        """Test that a lone warning is shown under either policy."""
        for precedence in WarningPrecedence:
            assert select_warning("detect", None, precedence) == "detect"
            assert select_warning(None, "advise", precedence) == "advise"

    def test_no_warning(self):
        """Test that nothing is shown when nothing went wrong."""
        assert select_warning(None, None) is None


class TestProcess:
    """Tests for single-document scans."""

    def test_detects_and_rectifies(self, pipeline, document_image):
        """Test the happy path: crop, flatten, auto enhance."""
        surface, _ = document_image

        result = pipeline.process(surface)

        assert result.used_fallback is False
        assert result.was_cropped
        assert result.detection_confidence > 0.9
        assert abs(result.raster.width - 500) <= 8
        assert abs(result.raster.height - 400) <= 8
        assert result.filter_name == "auto"
        assert result.confidence == pytest.approx(0.95)
        assert result.warning is None
        assert result.warnings == []
        assert len(result.corners.points) == 4

    def test_fallback_keeps_full_frame(self, pipeline, blank_raster):
        """Test that failed detection enhances the whole frame with a warning."""
        result = pipeline.process(blank_raster)

        assert result.used_fallback is True
        assert result.detection_confidence == pytest.approx(0.3)
        assert (result.raster.width, result.raster.height) == (800, 600)
        assert result.warning == DETECTION_FALLBACK_WARNING
        assert result.warnings == [DETECTION_FALLBACK_WARNING]
        assert result.was_cropped is False

    def test_crop_disabled(self, pipeline, document_image):
        """Test that crop=False skips detection entirely."""
        surface, _ = document_image

        result = pipeline.process(surface, crop=False)

        assert result.corners is None
        assert result.detection_confidence is None
        assert (result.raster.width, result.raster.height) == (800, 600)
        assert result.warning is None

    def test_crop_without_engine(self, document_image):
        """Test that a missing engine degrades to full-frame enhancement."""
        surface, _ = document_image
        pipeline = DocumentPipeline(config=PipelineConfig())

        result = pipeline.process(surface)

        assert result.corners is None
        assert (result.raster.width, result.raster.height) == (800, 600)
        assert result.warning == DETECTION_UNAVAILABLE_WARNING

    def test_explicit_filter(self, pipeline, document_image):
        """Test that a named preset is applied."""
        surface, _ = document_image

        result = pipeline.process(surface, filter_name="grayscale")

        assert result.filter_name == "grayscale"
        data = result.raster.data
        assert (data[..., 0] == data[..., 1]).all()

    def test_unknown_filter_fails_fast(self, pipeline, document_image):
        """Test that an unknown preset is refused before any work."""
        surface, _ = document_image

        with pytest.raises(UnknownFilterError):
            pipeline.process(surface, filter_name="sepia")

    def test_rectification_error_propagates(self, pipeline, document_image, monkeypatch):
        """Test that a singular transform for a single document reaches the caller."""
        surface, _ = document_image

        def fail(raster, corners):
            raise RectificationError("singular transform")

        monkeypatch.setattr(pipeline.rectifier, "rectify", fail)

        with pytest.raises(RectificationError, match="singular transform"):
            pipeline.process(surface)

    def test_rejects_non_raster(self, pipeline):
        """Test that bare arrays are rejected."""
        with pytest.raises(UnsupportedInputError):
            pipeline.process(np.zeros((100, 100, 3), dtype=np.uint8))

    def test_input_not_modified(self, pipeline, document_image):
        """Test that the caller's raster is untouched."""
        surface, _ = document_image
        before = surface.data.copy()

        pipeline.process(surface, filter_name="enhance")

        np.testing.assert_array_equal(surface.data, before)

    def test_downscale_large_input(self, make_raster):
        """Test that inputs above max_dimension are shrunk first."""
        pipeline = DocumentPipeline(config=config_with(max_dimension=400))

        result = pipeline.process(make_raster(width=800, height=600), crop=False)

        assert (result.raster.width, result.raster.height) == (400, 300)

    def test_downscale_disabled(self, make_raster):
        """Test that max_dimension None keeps the input size."""
        pipeline = DocumentPipeline(config=config_with(max_dimension=None))

        result = pipeline.process(make_raster(width=800, height=600), crop=False)

        assert (result.raster.width, result.raster.height) == (800, 600)


class TestProcessWithAdvisor:
    """Tests for advisor-driven filter selection."""

    def test_advisor_picks_filter(self, document_image):
        """Test that the advisor's preset and rationale are reported."""
        surface, _ = document_image
        advisor = RecordingAdvisor()
        pipeline = DocumentPipeline(
            config=PipelineConfig(), engine=OpenCVEngine(), advisor=advisor
        )

        result = pipeline.process(surface, use_advisor=True)

        assert advisor.calls == 1
        assert result.filter_name == "blackAndWhite"
        assert result.rationale == "typed letter"
        assert result.document_type == "letter"
        assert result.warning is None

    def test_explicit_filter_skips_advisor(self, document_image):
        """Test that a caller-chosen preset is not second-guessed."""
        surface, _ = document_image
        advisor = RecordingAdvisor()
        pipeline = DocumentPipeline(config=PipelineConfig(), advisor=advisor)

        result = pipeline.process(surface, filter_name="original", use_advisor=True)

        assert advisor.calls == 0
        assert result.filter_name == "original"
        assert result.rationale is None

    def test_advisor_enabled_by_config(self, make_raster):
        """Test that advisor.enabled turns consultation on by default."""
        advisor = RecordingAdvisor()
        config = PipelineConfig(advisor=AdvisorConfig(enabled=True))
        pipeline = DocumentPipeline(config=config, advisor=advisor)

        pipeline.process(make_raster(), crop=False)

        assert advisor.calls == 1

    def test_advisor_not_configured(self, make_raster):
        """Test the default filter and warning without an advisor."""
        pipeline = DocumentPipeline(config=PipelineConfig())

        result = pipeline.process(make_raster(), crop=False, use_advisor=True)

        assert result.filter_name == "auto"
        assert result.rationale == "automatic enhancement"
        assert result.warning == ADVISOR_NOT_CONFIGURED_WARNING

    def test_advisor_failure_is_not_fatal(self, make_raster):
        """Test that advisor errors degrade to auto with a warning."""
        advisor = RecordingAdvisor(error=AdvisorError("HTTP 500 from advisor"))
        pipeline = DocumentPipeline(config=PipelineConfig(), advisor=advisor)

        result = pipeline.process(make_raster(), crop=False, use_advisor=True)

        assert result.filter_name == "auto"
        assert "HTTP 500" in result.warning

    def test_advisor_warning_takes_precedence(self, blank_raster):
        """Test the default policy when both stages warn."""
        pipeline = DocumentPipeline(config=PipelineConfig(), engine=OpenCVEngine())

        result = pipeline.process(blank_raster, use_advisor=True)

        assert result.warning == ADVISOR_NOT_CONFIGURED_WARNING
        assert result.warnings == [
            DETECTION_FALLBACK_WARNING,
            ADVISOR_NOT_CONFIGURED_WARNING,
        ]

    def test_detection_warning_takes_precedence(self, blank_raster):
        """Test the configurable opposite policy."""
        config = config_with(warning_precedence=WarningPrecedence.DETECTION)
        pipeline = DocumentPipeline(config=config, engine=OpenCVEngine())

        result = pipeline.process(blank_raster, use_advisor=True)

        assert result.warning == DETECTION_FALLBACK_WARNING
        assert len(result.warnings) == 2


class TestProcessMultiple:
    """Tests for multi-document scans."""

    def test_two_pages(self, pipeline, two_documents_image):
        """Test that each page becomes its own result."""
        surface, _ = two_documents_image

        results = pipeline.process_multiple(surface, filter_name="grayscale")

        assert len(results) == 2
        assert results[0].detection_confidence >= results[1].detection_confidence
        for result in results:
            assert result.filter_name == "grayscale"
            assert result.used_fallback is False
            assert result.corners is not None
            assert abs(result.raster.width - 300) <= 8

    def test_nothing_found(self, pipeline, blank_raster):
        """Test that an empty frame gives an empty list, not a fallback."""
        assert pipeline.process_multiple(blank_raster) == []

    def test_requires_engine(self, two_documents_image):
        """Test that multi mode cannot run without detection."""
        surface, _ = two_documents_image
        pipeline = DocumentPipeline(config=PipelineConfig())

        with pytest.raises(EngineUnavailableError):
            pipeline.process_multiple(surface)

    def test_advisor_consulted_once(self, two_documents_image):
        """Test that one advisor call serves every document in the frame."""
        surface, _ = two_documents_image
        advisor = RecordingAdvisor()
        pipeline = DocumentPipeline(
            config=PipelineConfig(), engine=OpenCVEngine(), advisor=advisor
        )

        results = pipeline.process_multiple(surface, use_advisor=True)

        assert advisor.calls == 1
        assert [r.filter_name for r in results] == ["blackAndWhite", "blackAndWhite"]


class TestFromConfig:
    """Tests for building a pipeline from configuration."""

    def test_builds_detector(self):
        """Test that the configured backend is started."""
        pipeline = DocumentPipeline.from_config(PipelineConfig())

        assert pipeline.detector is not None
        assert pipeline.advisor is None

    def test_unknown_backend_disables_detection(self, make_raster):
        """Test that a backend start failure leaves a working pipeline."""
        pipeline = DocumentPipeline.from_config(
            config_with(detection_backend="does-not-exist")
        )

        result = pipeline.process(make_raster())

        assert pipeline.detector is None
        assert result.warning == DETECTION_UNAVAILABLE_WARNING

    def test_enabled_advisor_is_built(self, monkeypatch):
        """Test that advisor.enabled wires the Gemini advisor."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        config = PipelineConfig(advisor=AdvisorConfig(enabled=True))

        pipeline = DocumentPipeline.from_config(config)

        assert pipeline.advisor is not None
        assert pipeline.advisor.is_configured is False

    def test_use_advisor_overrides_disabled_config(self, monkeypatch, make_raster):
        """Test that asking for the advisor wires it even when the file disables it."""
        monkeypatch.setenv("GEMINI_API_KEY", "real-key")
        response = MagicMock()
        reply_text = '{"filter": "grayscale", "reason": "receipt"}'
        payload = {"candidates": [{"content": {"parts": [{"text": reply_text}]}}]}
        response.read.return_value = json.dumps(payload).encode("utf-8")
        response.__enter__.return_value = response

        with patch("src.advisor.gemini_advisor.urllib.request.urlopen") as mock_urlopen:
            mock_urlopen.return_value = response
            pipeline = DocumentPipeline.from_config(PipelineConfig(), use_advisor=True)
            result = pipeline.process(make_raster(), crop=False)

        assert pipeline.advisor is not None
        assert pipeline.config.advisor.enabled is True
        assert mock_urlopen.call_count == 1
        assert result.filter_name == "grayscale"
        assert result.warning is None

    def test_use_advisor_false_disables_advisor(self):
        """Test that the override also turns an enabled advisor off."""
        config = PipelineConfig(advisor=AdvisorConfig(enabled=True))

        pipeline = DocumentPipeline.from_config(config, use_advisor=False)

        assert pipeline.advisor is None
        assert config.advisor.enabled is True
