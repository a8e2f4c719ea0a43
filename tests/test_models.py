"""
Model Tests
===========

Tests for frames, geometry, filter modes and controls.
"""

import numpy as np
import pytest


class TestFrame:
    """Tests for the Frame data model."""

    def test_rejects_wrong_shape(self):
        """Verify pixels must be (H, W, 4)."""
        from framelab.models.frame import Frame

        with pytest.raises(ValueError):
            Frame(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_rejects_wrong_dtype(self):
        """Verify pixels must be uint8."""
        from framelab.models.frame import Frame

        with pytest.raises(ValueError):
            Frame(np.zeros((4, 4, 4), dtype=np.float32))

    def test_blank_is_opaque(self, uniform_frame):
        """Verify blank frames carry the color and alpha 255."""
        frame = uniform_frame((1, 2, 3), width=5, height=3)

        assert frame.size == (5, 3)
        assert tuple(frame.pixels[2, 4]) == (1, 2, 3, 255)

    def test_crop_and_paste(self, gradient_frame):
        """Verify crop copies a region and paste leaves the original alone."""
        from framelab.models.frame import Frame

        crop = gradient_frame.crop(2, 3, 4, 5)
        assert crop.size == (4, 5)
        assert np.array_equal(crop.pixels, gradient_frame.pixels[3:8, 2:6])

        patch = Frame.blank(4, 5, (9, 9, 9))
        pasted = gradient_frame.paste(patch, 2, 3)
        assert tuple(pasted.pixels[3, 2]) == (9, 9, 9, 255)
        assert not gradient_frame.same_pixels(pasted)

    def test_crop_out_of_bounds(self, gradient_frame):
        """Verify crops outside the frame are rejected."""
        with pytest.raises(ValueError):
            gradient_frame.crop(20, 20, 10, 10)

    def test_resize(self, gradient_frame):
        """Verify resize produces the requested size."""
        assert gradient_frame.resize(10, 8).size == (10, 8)

    def test_to_uint8_rounds_half_to_even(self):
        """Verify 8-bit storage rounds and clips."""
        from framelab.models.frame import to_uint8

        values = np.array([127.5, 128.5, 148.3, -4.0, 300.0])
        assert to_uint8(values).tolist() == [128, 128, 148, 0, 255]


class TestGeometry:
    """Tests for FaceBox and Rect."""

    def test_face_box_rejects_empty(self):
        """Verify non-positive sizes are rejected."""
        from framelab.models.face import FaceBox

        with pytest.raises(ValueError):
            FaceBox(x=0, y=0, width=0, height=10)

    def test_face_box_edges(self, sample_face_box):
        """Verify right/bottom edges."""
        assert sample_face_box.right == 110
        assert sample_face_box.bottom == 90

    def test_rect_rounding(self):
        """Verify Rect rounds to whole pixels for drawing."""
        from framelab.models.face import Rect

        assert Rect(x=1.4, y=2.6, width=10.5, height=3.2).as_int() == (1, 3, 10, 3)


class TestFilterMode:
    """Tests for FilterMode parsing and validation."""

    def test_parse_known_labels(self):
        """Verify UI labels map to filter kinds."""
        from framelab.models.filters import FilterKind, FilterMode

        assert FilterMode.parse("None").kind == FilterKind.IDENTITY
        assert FilterMode.parse("HSV Overlay").kind == FilterKind.COLOR_SPACE_OVERLAY
        assert FilterMode.parse("pixelate").kind == FilterKind.PIXELATE
        assert FilterMode.parse("EDGE").kind == FilterKind.EDGE

    def test_parse_sticker(self):
        """Verify unknown labels become stickers."""
        from framelab.models.filters import FilterKind, FilterMode

        mode = FilterMode.parse("Cat Ears")
        assert mode.kind == FilterKind.STICKER
        assert mode.sticker_id == "Cat Ears"

    def test_parse_empty(self):
        """Verify empty labels are rejected."""
        from framelab.models.filters import FilterMode

        with pytest.raises(ValueError):
            FilterMode.parse("  ")

    def test_sticker_requires_id(self):
        """Verify STICKER carries an id and nothing else does."""
        from framelab.models.filters import FilterKind, FilterMode

        with pytest.raises(ValueError):
            FilterMode(kind=FilterKind.STICKER)
        with pytest.raises(ValueError):
            FilterMode(kind=FilterKind.BLUR, sticker_id="Hat")

    def test_labels(self):
        """Verify captions."""
        from framelab.models.filters import FilterKind, FilterMode

        assert FilterMode.identity().label == "None"
        assert FilterMode(kind=FilterKind.COLOR_SPACE_OVERLAY).label == "HSV Overlay"
        assert FilterMode(kind=FilterKind.BLUR).label == "Blur"
        assert FilterMode.sticker("Hat").label == "Hat"

    def test_modes_compare_by_value(self):
        """Verify equal modes compare equal."""
        from framelab.models.filters import FilterMode

        assert FilterMode.sticker("Hat") == FilterMode.parse("Hat")


class TestPipelineControls:
    """Tests for the controls snapshot."""

    def test_defaults(self):
        """Verify default cutoffs."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterKind

        controls = PipelineControls()
        assert (controls.red_cutoff, controls.green_cutoff, controls.blue_cutoff) == (100, 150, 200)
        assert controls.face_filter.kind == FilterKind.IDENTITY
        assert controls.live is True

    def test_cutoffs_clamped(self):
        """Verify out-of-range cutoffs are clamped, not rejected."""
        from framelab.models.controls import PipelineControls

        controls = PipelineControls(red_cutoff=-5, green_cutoff=999, blue_cutoff=255)
        assert controls.red_cutoff == 0
        assert controls.green_cutoff == 255
        assert controls.blue_cutoff == 255

    @pytest.mark.parametrize("value", [None, "high", [1]])
    def test_non_numeric_cutoff_rejected(self, value):
        """Verify non-numeric cutoffs fail validation instead of being clamped."""
        from pydantic import ValidationError

        from framelab.models.controls import PipelineControls

        with pytest.raises(ValidationError):
            PipelineControls(red_cutoff=value)
