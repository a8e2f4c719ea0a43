"""
Orchestrator Tests
==================

Tests for the per-tick pipeline, live/frozen handling and failure isolation.
"""

import numpy as np
import pytest


def _pixel(frame):
    return tuple(int(v) for v in frame.pixels[0, 0, :3])


class TestTick:
    """Tests for FrameOrchestrator.tick with default controls."""

    def test_default_outputs(self, orchestrator_factory):
        """Verify every derived frame for a uniform (200, 100, 50) source."""
        from framelab.models.controls import PipelineControls

        outputs = orchestrator_factory().tick(PipelineControls())

        assert outputs.tick_id == 1
        assert _pixel(outputs.grayscale) == (149, 149, 149)
        assert _pixel(outputs.red) == (200, 0, 0)
        assert _pixel(outputs.green) == (0, 100, 0)
        assert _pixel(outputs.blue) == (0, 0, 50)
        assert _pixel(outputs.red_threshold) == (255, 255, 255)
        assert _pixel(outputs.green_threshold) == (0, 0, 0)
        assert _pixel(outputs.blue_threshold) == (0, 0, 0)
        assert _pixel(outputs.hsv) == (14, 191, 200)
        assert _pixel(outputs.ycbcr) == (124, 86, 182)

    def test_all_frames_share_size(self, orchestrator_factory):
        """Verify every named frame has the source resolution."""
        from framelab.models.controls import PipelineControls

        outputs = orchestrator_factory().tick(PipelineControls())
        frames = outputs.named_frames()

        assert len(frames) == 14
        assert {frame.size for frame in frames.values()} == {(160, 120)}

    def test_face_detected(self, orchestrator_factory, sample_face_box):
        """Verify the mock box is detected and composited at display scale."""
        from framelab.models.controls import PipelineControls

        outputs = orchestrator_factory().tick(PipelineControls())

        assert outputs.face_detected
        assert outputs.face_box == sample_face_box
        assert outputs.display_face_box.as_tuple() == (50, 30, 60, 60)

    def test_display_box_rescaled(self, orchestrator_factory):
        """Verify a 320x240 frame doubles the detector-space box."""
        from framelab.models.controls import PipelineControls

        orchestrator = orchestrator_factory(frame_size=(320, 240))
        outputs = orchestrator.tick(PipelineControls())

        assert outputs.source.size == (320, 240)
        assert outputs.display_face_box.as_tuple() == (100, 60, 120, 120)

    def test_face_filter_confined_to_box(self, orchestrator_factory):
        """Verify the face filter touches only the face region."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterKind, FilterMode

        controls = PipelineControls(face_filter=FilterMode(kind=FilterKind.INVERT))
        outputs = orchestrator_factory().tick(controls)
        preview = outputs.face_preview.pixels

        assert tuple(preview[60, 80, :3]) == (55, 155, 205)
        assert tuple(preview[5, 5, :3]) == (200, 100, 50)

    def test_extension_filter(self, orchestrator_factory):
        """Verify the extension filter applies to the whole frame."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterKind, FilterMode

        controls = PipelineControls(extension_filter=FilterMode(kind=FilterKind.INVERT))
        outputs = orchestrator_factory().tick(controls)

        assert np.all(outputs.extension_view.pixels[..., :3] == np.array([55, 155, 205]))
        assert outputs.sticker_rect is None

    def test_tick_ids_increase(self, orchestrator_factory):
        """Verify tick ids count up from 1."""
        from framelab.models.controls import PipelineControls

        orchestrator = orchestrator_factory()
        ids = [orchestrator.tick(PipelineControls()).tick_id for _ in range(3)]
        assert ids == [1, 2, 3]


class TestStickerRect:
    """Tests for sticker placement during a tick."""

    def test_hat_rect(self, orchestrator_factory):
        """Verify the hat placement over the default face box."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterMode

        controls = PipelineControls(extension_filter=FilterMode.sticker("Hat"))
        rect = orchestrator_factory().tick(controls).sticker_rect

        assert rect.width == pytest.approx(96.0)
        assert rect.height == pytest.approx(54.0)
        assert rect.x == pytest.approx(32.0)
        assert rect.y == pytest.approx(-21.3)

    def test_overlay_area(self, orchestrator_factory):
        """Verify placement follows the configured overlay area."""
        from framelab.models.controls import PipelineControls
        from framelab.models.face import Rect
        from framelab.models.filters import FilterMode

        orchestrator = orchestrator_factory(overlay_area=Rect(100.0, 200.0, 320.0, 240.0))
        controls = PipelineControls(extension_filter=FilterMode.sticker("Dog Nose"))
        rect = orchestrator.tick(controls).sticker_rect

        # Face rect on the canvas: (200, 260, 120, 120)
        assert rect.x == pytest.approx(200.0 + 120.0 * 0.135)
        assert rect.y == pytest.approx(260.0 + 120.0 * 0.35)

    def test_unknown_sticker(self, orchestrator_factory):
        """Verify stickers without a placement rule produce no rect."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterMode

        controls = PipelineControls(extension_filter=FilterMode.sticker("Crown"))
        outputs = orchestrator_factory().tick(controls)

        assert outputs.sticker_rect is None
        assert outputs.extension_view.same_pixels(outputs.source)

    def test_box_outside_frame_is_no_face(self, orchestrator_factory):
        """Verify a box that misses the frame counts as no face everywhere."""
        from framelab.detection.detector import MockFaceDetector
        from framelab.models.controls import PipelineControls
        from framelab.models.face import FaceBox
        from framelab.models.filters import FilterMode

        orchestrator = orchestrator_factory(
            detector=MockFaceDetector(box=FaceBox(x=500, y=500, width=10, height=10))
        )
        controls = PipelineControls(extension_filter=FilterMode.sticker("Hat"))
        outputs = orchestrator.tick(controls)

        assert outputs.face_detected is False
        assert outputs.face_box is None
        assert outputs.display_face_box is None
        assert outputs.sticker_rect is None
        assert outputs.summary().face_detected is False
        assert orchestrator.get_metrics()["faces_detected"] == 0

    def test_no_face_no_rect(self, orchestrator_factory):
        """Verify no face means no sticker."""
        from framelab.detection.detector import NullFaceDetector
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterMode

        orchestrator = orchestrator_factory(detector=NullFaceDetector())
        controls = PipelineControls(extension_filter=FilterMode.sticker("Hat"))
        outputs = orchestrator.tick(controls)

        assert not outputs.face_detected
        assert outputs.sticker_rect is None
        assert outputs.face_preview.same_pixels(outputs.source)


class TestLiveAndFrozen:
    """Tests for live polling versus the frozen buffer."""

    def test_frozen_reuses_buffer(self, scripted_source, uniform_frame):
        """Verify frozen ticks do not poll and live ticks do."""
        from framelab.detection.detector import NullFaceDetector
        from framelab.models.controls import PipelineControls
        from framelab.pipeline.orchestrator import FrameOrchestrator

        first = uniform_frame((10, 10, 10), 160, 120)
        second = uniform_frame((90, 90, 90), 160, 120)
        source = scripted_source([first, second])
        orchestrator = FrameOrchestrator(source=source, detector=NullFaceDetector())

        live = PipelineControls()
        frozen = PipelineControls(live=False)

        assert _pixel(orchestrator.tick(live).source) == (10, 10, 10)
        assert _pixel(orchestrator.tick(frozen).source) == (10, 10, 10)
        assert source.poll_count == 1
        assert _pixel(orchestrator.tick(live).source) == (90, 90, 90)

        metrics = orchestrator.get_metrics()
        assert metrics["live_ticks"] == 2
        assert metrics["frozen_ticks"] == 1

    def test_frozen_first_tick_polls(self, scripted_source, uniform_frame):
        """Verify a frozen tick with no buffer polls once."""
        from framelab.models.controls import PipelineControls
        from framelab.pipeline.orchestrator import FrameOrchestrator

        source = scripted_source([uniform_frame((1, 2, 3), 160, 120)])
        orchestrator = FrameOrchestrator(source=source, detector=None)
        orchestrator.tick(PipelineControls(live=False))

        assert source.poll_count == 1
        assert orchestrator.current_frame is not None

    def test_capture_then_freeze(self, scripted_source, uniform_frame):
        """Verify capture() snapshots a fresh frame."""
        from framelab.models.controls import PipelineControls
        from framelab.pipeline.orchestrator import FrameOrchestrator

        source = scripted_source(
            [uniform_frame((1, 1, 1), 160, 120), uniform_frame((2, 2, 2), 160, 120)]
        )
        orchestrator = FrameOrchestrator(source=source, detector=None)
        orchestrator.tick(PipelineControls())
        orchestrator.capture()

        assert _pixel(orchestrator.tick(PipelineControls(live=False)).source) == (2, 2, 2)

    def test_freeze_resizes(self, orchestrator_factory, uniform_frame):
        """Verify supplied frames are normalized to the frame size."""
        orchestrator = orchestrator_factory()
        frozen = orchestrator.freeze(uniform_frame((5, 6, 7), 320, 240))
        assert frozen.size == (160, 120)


class TestFailureIsolation:
    """Tests for capture and detector failures."""

    def test_capture_failure_blank_frame(self, scripted_source):
        """Verify a failed first poll yields a blank frame."""
        from framelab.models.controls import PipelineControls
        from framelab.pipeline.orchestrator import FrameOrchestrator

        orchestrator = FrameOrchestrator(source=scripted_source([None]), detector=None)
        outputs = orchestrator.tick(PipelineControls())

        assert outputs.source.size == (160, 120)
        assert not outputs.source.pixels[..., :3].any()
        assert orchestrator.get_metrics()["capture_errors"] == 1

    def test_capture_failure_reuses_last(self, scripted_source, uniform_frame):
        """Verify a failed poll reuses the last good frame."""
        from framelab.models.controls import PipelineControls
        from framelab.pipeline.orchestrator import FrameOrchestrator

        source = scripted_source([uniform_frame((7, 7, 7), 160, 120), None])
        orchestrator = FrameOrchestrator(source=source, detector=None)
        orchestrator.tick(PipelineControls())
        outputs = orchestrator.tick(PipelineControls())

        assert _pixel(outputs.source) == (7, 7, 7)
        assert orchestrator.metrics.capture_errors == 1

    def test_detector_failure(self, orchestrator_factory):
        """Verify a raising detector counts as no face and the tick completes."""
        from framelab.detection.detector import MockFaceDetector
        from framelab.models.controls import PipelineControls

        orchestrator = orchestrator_factory(detector=MockFaceDetector(fail_on=[1]))
        first = orchestrator.tick(PipelineControls())
        second = orchestrator.tick(PipelineControls())

        assert not first.face_detected
        assert second.face_detected
        metrics = orchestrator.get_metrics()
        assert metrics["detection"]["error_count"] == 1
        assert metrics["faces_detected"] == 1


class TestMetricsAndReset:
    """Tests for get_metrics, reset and summary."""

    def test_reset(self, orchestrator_factory):
        """Verify reset drops the buffer and counters."""
        from framelab.models.controls import PipelineControls

        orchestrator = orchestrator_factory()
        orchestrator.tick(PipelineControls())
        orchestrator.reset()

        metrics = orchestrator.get_metrics()
        assert metrics["ticks"] == 0
        assert metrics["has_frame"] is False
        assert orchestrator.tick(PipelineControls()).tick_id == 1

    def test_summary(self, orchestrator_factory):
        """Verify the JSON-safe tick summary."""
        from framelab.models.controls import PipelineControls
        from framelab.models.filters import FilterMode

        controls = PipelineControls(
            face_filter=FilterMode.parse("Pixelate"),
            extension_filter=FilterMode.sticker("Hat"),
        )
        summary = orchestrator_factory().tick(controls).summary()
        data = summary.model_dump(mode="json")

        assert data["tick_id"] == 1
        assert data["frame_size"] == {"width": 160, "height": 120}
        assert data["face_box"] == {"x": 50, "y": 30, "width": 60, "height": 60}
        assert data["face_filter"] == {"kind": "PIXELATE", "sticker_id": None}
        assert data["extension_filter"]["sticker_id"] == "Hat"
        assert data["sticker_rect"]["y"] == pytest.approx(-21.3)
        assert len(data["frames"]) == 14
