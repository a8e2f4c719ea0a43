"""
Color Space Tests
=================

Tests for grayscale boost, channel isolation, HSV and YCbCr.
"""

import numpy as np
import pytest


class TestGrayscaleBoost:
    """Tests for grayscale_boost."""

    def test_reference_pixel(self, uniform_frame):
        """Verify luma * 1.2 for (200, 100, 50)."""
        from framelab.processing.color_space import grayscale_boost

        # 0.299*200 + 0.587*100 + 0.114*50 = 124.2; * 1.2 = 149.04
        gray = grayscale_boost(uniform_frame((200, 100, 50)))

        assert np.all(gray.pixels[..., :3] == 149)
        assert np.all(gray.pixels[..., 3] == 255)

    def test_channels_equal_and_capped(self, gradient_frame, uniform_frame):
        """Verify R == G == B and the boost saturates at 255."""
        from framelab.processing.color_space import grayscale_boost

        gray = grayscale_boost(gradient_frame)
        assert np.array_equal(gray.pixels[..., 0], gray.pixels[..., 1])
        assert np.array_equal(gray.pixels[..., 1], gray.pixels[..., 2])

        white = grayscale_boost(uniform_frame((255, 255, 255)))
        assert np.all(white.pixels[..., :3] == 255)

    def test_input_untouched(self, gradient_frame):
        """Verify the source frame is not modified."""
        from framelab.processing.color_space import grayscale_boost

        before = gradient_frame.pixels.copy()
        grayscale_boost(gradient_frame)
        assert np.array_equal(gradient_frame.pixels, before)


class TestChannelIsolation:
    """Tests for isolate_channel."""

    def test_isolate_red(self, uniform_frame):
        """Verify (200, 100, 50) isolates to (200, 0, 0, 255)."""
        from framelab.processing.color_space import isolate_channel

        red = isolate_channel(uniform_frame((200, 100, 50)), "R")
        assert np.all(red.pixels == np.array([200, 0, 0, 255], dtype=np.uint8))

    def test_additivity(self, gradient_frame):
        """Verify R + G + B isolations sum to the source colors."""
        from framelab.models.filters import ChannelSelector
        from framelab.processing.color_space import isolate_channels

        parts = isolate_channels(gradient_frame)
        total = sum(
            parts[s].pixels[..., :3].astype(np.int32)
            for s in (ChannelSelector.R, ChannelSelector.G, ChannelSelector.B)
        )
        assert np.array_equal(total, gradient_frame.pixels[..., :3])

    def test_rejects_all(self, gradient_frame):
        """Verify ALL is not a channel."""
        from framelab.processing.color_space import isolate_channel

        with pytest.raises(ValueError):
            isolate_channel(gradient_frame, "ALL")


class TestHSV:
    """Tests for to_hsv."""

    @pytest.mark.parametrize(
        "color,expected",
        [
            ((255, 0, 0), (0, 255, 255)),
            ((0, 255, 0), (85, 255, 255)),
            ((0, 0, 255), (170, 255, 255)),
            ((200, 100, 50), (14, 191, 200)),
            ((0, 0, 0), (0, 0, 0)),
        ],
    )
    def test_known_colors(self, uniform_frame, color, expected):
        """Verify hue/saturation/value packing."""
        from framelab.processing.color_space import to_hsv

        hsv = to_hsv(uniform_frame(color))
        assert tuple(hsv.pixels[0, 0, :3]) == expected

    def test_mid_gray(self, uniform_frame):
        """Verify gray has hue 0, saturation 0 and value 128."""
        from framelab.processing.color_space import to_hsv

        hsv = to_hsv(uniform_frame((128, 128, 128)))
        assert tuple(hsv.pixels[0, 0]) == (0, 0, 128, 255)

    def test_mid_gray_value_brackets_cutoff(self, uniform_frame):
        """Verify V = 128 is not above 128 but is above 127."""
        from framelab.processing.color_space import to_hsv
        from framelab.processing.threshold import threshold

        hsv = to_hsv(uniform_frame((128, 128, 128)))
        assert np.all(threshold(hsv, 128, "B").pixels[..., :3] == 0)
        assert np.all(threshold(hsv, 127, "B").pixels[..., :3] == 255)


class TestYCbCr:
    """Tests for to_ycbcr."""

    @pytest.mark.parametrize(
        "color,expected",
        [
            ((200, 100, 50), (124, 86, 182)),
            ((0, 0, 0), (0, 128, 128)),
            ((255, 255, 255), (255, 128, 128)),
        ],
    )
    def test_known_colors(self, uniform_frame, color, expected):
        """Verify full-range YCbCr packing."""
        from framelab.processing.color_space import to_ycbcr

        ycbcr = to_ycbcr(uniform_frame(color))
        assert tuple(ycbcr.pixels[0, 0, :3]) == expected

    def test_clamped(self, uniform_frame):
        """Verify Cb of pure blue (255.5) is stored as 255."""
        from framelab.processing.color_space import to_ycbcr

        ycbcr = to_ycbcr(uniform_frame((0, 0, 255)))
        assert ycbcr.pixels[0, 0, 1] == 255
