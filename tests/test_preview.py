"""Tests for the preview module.

This module tests the preview/display and preview/export functionality including:
- Clamping and NaN handling
- Gamma correction
- 8-bit conversion and PNG export
- Box downsampling and RMSE computation

Note: Tests avoid displaying actual windows by not calling show_preview
in automated tests. The processing functions are tested directly.
"""

import os
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


class TestApplyGamma:
    """Test gamma correction."""

    def test_gamma_1_no_change(self):
        """Test that gamma=1.0 returns the image unchanged."""
        from raycast.preview.display import apply_gamma

        image = np.random.rand(10, 10, 3).astype(np.float32)
        result = apply_gamma(image, gamma=1.0)

        assert np.allclose(result, image)

    def test_gamma_brightens_midtones(self):
        """Test that gamma > 1 brightens midtones."""
        from raycast.preview.display import apply_gamma

        image = np.full((10, 10, 3), 0.5, dtype=np.float32)
        result = apply_gamma(image, gamma=2.2)

        assert np.all(result > 0.5)

    def test_gamma_preserves_black_and_white(self):
        """Test that gamma preserves 0 and 1."""
        from raycast.preview.display import apply_gamma

        image = np.array([[[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]], dtype=np.float32)
        result = apply_gamma(image, gamma=2.2)

        assert np.allclose(result[0, 0], 0.0)
        assert np.allclose(result[0, 1], 1.0)


class TestProcessImageForDisplay:
    """Test the clamp and gamma pipeline."""

    def test_clamps_to_unit_range(self):
        """Negative and over-bright channels are clamped."""
        from raycast.preview.display import process_image_for_display

        image = np.array([[[-0.5, 0.25, 3.0]]], dtype=np.float32)
        result = process_image_for_display(image)

        assert np.allclose(result, [[[0.0, 0.25, 1.0]]])
        assert result.dtype == np.float32

    def test_nan_becomes_black(self):
        """NaN channels map to 0."""
        from raycast.preview.display import process_image_for_display

        image = np.array([[[np.nan, 0.5, np.nan]]], dtype=np.float32)
        result = process_image_for_display(image)

        assert np.allclose(result, [[[0.0, 0.5, 0.0]]])

    def test_does_not_modify_input(self):
        """The linear buffer is left untouched."""
        from raycast.preview.display import process_image_for_display

        image = np.full((4, 4, 3), 2.0, dtype=np.float32)
        process_image_for_display(image, gamma=2.2)

        assert np.all(image == 2.0)


class TestImageToUint8:
    """Test conversion to 8-bit."""

    def test_image_to_uint8_output_type(self):
        """Test dtype and shape."""
        from raycast.preview.export import image_to_uint8

        image = np.random.rand(10, 12, 3).astype(np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.shape == (10, 12, 3)

    def test_image_to_uint8_range(self):
        """Test black, white and out-of-range values."""
        from raycast.preview.export import image_to_uint8

        image = np.array([[[0.0, 1.0, 0.5], [-1.0, 5.0, 0.2]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result[0, 0].tolist() == [0, 255, 128]
        assert result[0, 1].tolist() == [0, 255, 51]


class TestSavePng:
    """Test PNG export functionality."""

    def test_save_png_creates_file(self):
        """Test that save_png creates a valid RGB PNG file."""
        from raycast.preview.export import image_to_uint8, save_png

        image = np.random.rand(16, 32, 3).astype(np.float32)

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            filepath = f.name

        try:
            save_png(image, filepath, gamma=2.2)

            assert os.path.exists(filepath)
            with PILImage.open(filepath) as img:
                assert img.size == (32, 16)
                assert img.mode == "RGB"
                assert np.array_equal(np.asarray(img), image_to_uint8(image, gamma=2.2))
        finally:
            if os.path.exists(filepath):
                os.remove(filepath)


class TestDownsampleBox:
    """Test box filtering."""

    def test_downsample_averages_blocks(self):
        """Each output pixel is the mean of a 2x2 block."""
        from raycast.preview.export import downsample_box

        image = np.zeros((2, 4, 3), dtype=np.float32)
        image[0, 0] = 1.0
        image[1, 3] = [4.0, 0.0, 0.0]
        result = downsample_box(image, 2)

        assert result.shape == (1, 2, 3)
        assert np.allclose(result[0, 0], 0.25)
        assert np.allclose(result[0, 1], [1.0, 0.0, 0.0])

    def test_downsample_factor_one_is_identity(self):
        """Test factor 1."""
        from raycast.preview.export import downsample_box

        image = np.random.rand(3, 5, 3).astype(np.float32)
        assert np.allclose(downsample_box(image, 1), image)

    def test_downsample_bad_size_raises(self):
        """Test that sizes not divisible by the factor are rejected."""
        from raycast.preview.export import downsample_box

        with pytest.raises(ValueError, match="not a multiple"):
            downsample_box(np.zeros((3, 4, 3)), 2)


class TestComputeRmse:
    """Test RMSE computation."""

    def test_rmse_identical_is_zero(self):
        """Identical images have zero error."""
        from raycast.preview.export import compute_rmse

        image = np.random.rand(8, 8, 3).astype(np.float32)
        assert compute_rmse(image, image) == 0.0

    def test_rmse_constant_offset(self):
        """A constant offset gives an RMSE equal to the offset."""
        from raycast.preview.export import compute_rmse

        a = np.zeros((4, 4, 3), dtype=np.float32)
        b = np.full((4, 4, 3), 0.5, dtype=np.float32)
        assert abs(compute_rmse(a, b) - 0.5) < 1e-9

    def test_rmse_shape_mismatch_raises(self):
        """Test that mismatched shapes are rejected."""
        from raycast.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))


class TestShowPreview:
    """Test the Matplotlib previews without opening a window."""

    @pytest.fixture(autouse=True)
    def headless(self, monkeypatch):
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        shown = []
        monkeypatch.setattr(plt, "show", lambda *args, **kwargs: shown.append(kwargs))
        yield shown
        plt.close("all")

    def test_show_preview_default_title(self, headless):
        """The default title carries the resolution."""
        import matplotlib.pyplot as plt

        from raycast.preview.display import show_preview

        show_preview(np.zeros((6, 8, 3), dtype=np.float32), block=False)

        assert headless == [{"block": False}]
        assert plt.gcf().axes[0].get_title() == "Render Preview - 8x6"

    def test_show_comparison_returns_rmse(self, headless):
        """The returned RMSE is measured on the clamped images."""
        from raycast.preview.display import show_comparison

        a = np.zeros((4, 4, 3), dtype=np.float32)
        b = np.full((4, 4, 3), 2.0, dtype=np.float32)
        rmse = show_comparison(a, b, block=False)

        assert abs(rmse - 1.0) < 1e-9
        assert len(headless) == 1
