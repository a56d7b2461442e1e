"""
Unit tests for enhancement presets and the filter bank.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from src.common.exceptions import UnknownFilterError, UnsupportedInputError
from src.common.types import RasterSurface
from src.enhancement.filter_bank import EnhancementFilterBank
from src.enhancement.presets import (
    DEFAULT_FILTER,
    PRESETS,
    FilterStep,
    get_preset,
    list_presets,
)
from src.enhancement.types import EnhancementConfig


@pytest.fixture
def bank():
    """Filter bank with default settings."""
    return EnhancementFilterBank()


@pytest.fixture
def gradient_raster():
    """Raster with varied colors and a non-opaque alpha channel."""
    height, width = 40, 60
    ys, xs = np.mgrid[0:height, 0:width]
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[..., 0] = (xs * 4) % 256
    data[..., 1] = (ys * 6) % 256
    data[..., 2] = 180
    data[..., 3] = 123
    return RasterSurface(data=data)


class TestPresets:
    """Tests for the static preset table."""

    def test_preset_names(self):
        """Test the available presets, default first."""
        assert list(PRESETS) == [
            "auto",
            "grayscale",
            "highContrast",
            "blackAndWhite",
            "enhance",
            "original",
        ]
        assert DEFAULT_FILTER == "auto"
        assert list_presets()[0].name == "auto"

    def test_preset_steps(self):
        """Test the operation sequence of each preset."""

        def ops(name):
            return [(s.operation, s.args) for s in get_preset(name).steps]

        assert ops("grayscale") == [("grayscale", ())]
        assert ops("highContrast") == [
            ("grayscale", ()),
            ("contrast", (1.5,)),
            ("brightness", (10,)),
        ]
        assert ops("blackAndWhite") == [("threshold", (128,))]
        assert ops("enhance") == [
            ("sharpen", ()),
            ("contrast", (1.2,)),
            ("brightness", (5,)),
        ]
        assert ops("auto") == [
            ("grayscale", ()),
            ("contrast", (1.4,)),
            ("brightness", (15,)),
        ]
        assert ops("original") == []

    def test_presets_immutable(self):
        """Test that presets cannot be added or changed at runtime."""
        with pytest.raises(TypeError):
            PRESETS["custom"] = get_preset("auto")

    def test_labels_for_presentation(self):
        """Test that every preset carries a label and description."""
        for preset in list_presets():
            assert preset.label
            assert preset.description

    def test_unknown_preset(self):
        """Test lookup of a missing preset."""
        with pytest.raises(UnknownFilterError, match="sepia"):
            get_preset("sepia")

    def test_unknown_filter_is_key_error(self):
        """Test that callers catching KeyError also catch unknown presets."""
        with pytest.raises(KeyError):
            get_preset("sepia")

    def test_unknown_operation(self):
        """Test that a step must name a known operation."""
        with pytest.raises(ValueError):
            FilterStep("blur")


class TestEnhancementFilterBank:
    """Tests for applying presets to rasters."""

    def test_default_is_auto(self, bank, gradient_raster):
        """Test that no filter name means the auto preset."""
        result = bank.apply(gradient_raster)

        assert result.filter_name == "auto"
        assert result.confidence == pytest.approx(0.95)

    def test_mid_gray_presets(self, bank, make_raster):
        """Test exact outputs on mid-gray for the contrast presets."""
        gray = make_raster(width=4, height=4, rgba=(128, 128, 128, 255))

        auto = bank.apply(gray, "auto").raster.data
        high = bank.apply(gray, "highContrast").raster.data

        # Contrast keeps 128, brightness adds 15 / 10
        assert auto[0, 0].tolist() == [143, 143, 143, 255]
        assert high[0, 0].tolist() == [138, 138, 138, 255]

    def test_black_and_white_mid_gray(self, bank, make_raster):
        """Test that blackAndWhite maps luma 128 to black."""
        gray = make_raster(width=4, height=4, rgba=(128, 128, 128, 255))

        result = bank.apply(gray, "blackAndWhite")

        assert (result.raster.data[..., :3] == 0).all()

    def test_original_is_identity_copy(self, bank, gradient_raster):
        """Test that original returns equal samples in a new buffer."""
        result = bank.apply(gradient_raster, "original")

        np.testing.assert_array_equal(result.raster.data, gradient_raster.data)
        assert result.raster.data is not gradient_raster.data

    @pytest.mark.parametrize("name", list(PRESETS))
    def test_input_not_modified(self, bank, gradient_raster, name):
        """Test that no preset mutates its input."""
        before = gradient_raster.data.copy()

        bank.apply(gradient_raster, name)

        np.testing.assert_array_equal(gradient_raster.data, before)

    @pytest.mark.parametrize("name", list(PRESETS))
    def test_alpha_preserved(self, bank, gradient_raster, name):
        """Test that alpha passes through every preset."""
        result = bank.apply(gradient_raster, name)

        assert (result.raster.data[..., 3] == 123).all()

    @pytest.mark.parametrize("name", list(PRESETS))
    def test_deterministic(self, bank, gradient_raster, name):
        """Test that the same input always gives the same output."""
        first = bank.apply(gradient_raster, name).raster.data
        second = bank.apply(gradient_raster, name).raster.data

        np.testing.assert_array_equal(first, second)

    def test_dimensions_preserved(self, bank, gradient_raster):
        """Test that enhancement never resizes."""
        result = bank.apply(gradient_raster, "enhance")

        assert (result.raster.width, result.raster.height) == (60, 40)

    def test_auto_not_idempotent(self, bank, gradient_raster):
        """Test that applying auto twice compounds the effect."""
        once = bank.apply(gradient_raster, "auto").raster
        twice = bank.apply(once, "auto").raster

        assert not np.array_equal(once.data, twice.data)

    def test_grayscale_channels_equal(self, bank, gradient_raster):
        """Test that grayscale output has R = G = B."""
        data = bank.apply(gradient_raster, "grayscale").raster.data

        assert (data[..., 0] == data[..., 1]).all()
        assert (data[..., 1] == data[..., 2]).all()

    def test_unknown_filter(self, bank, gradient_raster):
        """Test that unknown names are refused, not substituted."""
        with pytest.raises(UnknownFilterError):
            bank.apply(gradient_raster, "vintage")

    def test_rejects_non_raster(self, bank):
        """Test that bare arrays are rejected."""
        with pytest.raises(UnsupportedInputError):
            bank.apply(np.zeros((4, 4, 4), dtype=np.uint8), "auto")

    def test_configured_default(self, gradient_raster):
        """Test that the default preset is configurable."""
        bank = EnhancementFilterBank(EnhancementConfig(default_filter="grayscale"))

        assert bank.apply(gradient_raster).filter_name == "grayscale"

    def test_invalid_configured_default(self):
        """Test that the default preset must exist."""
        with pytest.raises(ValidationError):
            EnhancementConfig(default_filter="sepia")
