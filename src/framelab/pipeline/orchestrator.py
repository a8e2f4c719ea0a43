"""
Frame Orchestrator
==================

Runs one pipeline tick: source frame in, PipelineOutputs out.

Tick order (fixed):
    1. Source frame (live: poll the capture source; frozen: reuse buffer)
    2. Grayscale + brightness boost
    3. Channel isolation (R, G, B)
    4. Per-channel thresholds with the controls' cutoffs
    5. HSV and YCbCr visualizations
    6. Fixed-cutoff thresholds of HSV and YCbCr
    7. Face detection on the detector-size copy of the source
    8. Face compositing with the face filter
    then the extension view and the sticker placement.

Design Rules:
    - The orchestrator owns the source buffer; nothing else is carried
      between ticks
    - Controls are read once per tick as an immutable snapshot
    - Every derived frame is recomputed every tick
    - Capture and detector failures never abort a tick
"""

import logging
import time
from typing import Optional, Tuple

from framelab.capture.source import CaptureError, CaptureSource
from framelab.compositing.face_region import DETECTOR_SIZE, FaceRegionCompositor
from framelab.compositing.stickers import project_box, sticker_placement
from framelab.detection.detector import FaceDetector, GuardedDetector
from framelab.models.controls import PipelineControls
from framelab.models.face import Rect
from framelab.models.filters import ChannelSelector, FilterKind
from framelab.models.frame import Frame
from framelab.models.output import PipelineOutputs
from framelab.processing.color_space import (
    grayscale_boost,
    isolate_channels,
    to_hsv,
    to_ycbcr,
)
from framelab.processing.filters import FilterContext, apply_filter
from framelab.processing.threshold import COLOR_SPACE_CUTOFF, threshold


logger = logging.getLogger(__name__)


DEFAULT_FRAME_SIZE: Tuple[int, int] = (160, 120)


class OrchestratorMetrics:
    """Metrics for FrameOrchestrator observability."""

    __slots__ = (
        "ticks",
        "live_ticks",
        "frozen_ticks",
        "capture_errors",
        "faces_detected",
        "last_tick_ms",
        "total_tick_ms",
    )

    def __init__(self) -> None:
        self.ticks: int = 0
        self.live_ticks: int = 0
        self.frozen_ticks: int = 0
        self.capture_errors: int = 0
        self.faces_detected: int = 0
        self.last_tick_ms: float = 0.0
        self.total_tick_ms: float = 0.0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        avg = self.total_tick_ms / self.ticks if self.ticks else 0.0
        return {
            "ticks": self.ticks,
            "live_ticks": self.live_ticks,
            "frozen_ticks": self.frozen_ticks,
            "capture_errors": self.capture_errors,
            "faces_detected": self.faces_detected,
            "last_tick_ms": round(self.last_tick_ms, 3),
            "avg_tick_ms": round(avg, 3),
        }


class FrameOrchestrator:
    """
    Tick-driven pipeline driver.

    Attributes:
        source: Capture source polled on live ticks
        detector: Failure-isolated face detector
        compositor: Face-region compositor
        detector_size: (width, height) of detector space
        frame_size: (width, height) frames are normalized to
        overlay_area: Where the extension view is drawn on the overlay
            canvas (None = the source frame at the origin)
        color_space_cutoff: Cutoff of the HSV and YCbCr masks
        metrics: Operational metrics

    Example:
        orchestrator = FrameOrchestrator(
            source=StaticCaptureSource(frame),
            detector=MockFaceDetector(),
        )
        outputs = orchestrator.tick(PipelineControls())
        print(outputs.face_detected)
    """

    def __init__(
        self,
        source: CaptureSource,
        detector: Optional[FaceDetector],
        compositor: Optional[FaceRegionCompositor] = None,
        detector_size: Tuple[int, int] = DETECTOR_SIZE,
        frame_size: Tuple[int, int] = DEFAULT_FRAME_SIZE,
        overlay_area: Optional[Rect] = None,
        color_space_cutoff: int = COLOR_SPACE_CUTOFF,
        log_every_n_ticks: int = 30,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            source: Frame source
            detector: Face detector (None disables detection)
            compositor: Face compositor (default: one for detector_size)
            detector_size: Resolution the detector runs at
            frame_size: Resolution of the source buffer
            overlay_area: Extension drawing area on the overlay canvas
            color_space_cutoff: Cutoff of the HSV and YCbCr masks
            log_every_n_ticks: Tick statistics log interval (0 = never)
        """
        self.source = source
        self.detector = (
            detector if isinstance(detector, GuardedDetector) else GuardedDetector(detector)
        )
        self.compositor = compositor or FaceRegionCompositor(detector_size=detector_size)
        self.detector_size = detector_size
        self.frame_size = frame_size
        self.overlay_area = overlay_area
        self.color_space_cutoff = color_space_cutoff
        self.log_every_n_ticks = log_every_n_ticks

        self._buffer: Optional[Frame] = None
        self._tick_id: int = 0
        self.metrics = OrchestratorMetrics()

        logger.info(
            f"FrameOrchestrator initialized: source={type(source).__name__}, "
            f"detector={type(self.detector.detector).__name__}, "
            f"frame={frame_size[0]}x{frame_size[1]}, "
            f"detector_size={detector_size[0]}x{detector_size[1]}"
        )

    @property
    def current_frame(self) -> Optional[Frame]:
        """The buffered source frame, None before the first tick."""
        return self._buffer

    def _normalize(self, frame: Frame) -> Frame:
        if frame.size != self.frame_size:
            return frame.resize(*self.frame_size)
        return frame

    def _poll(self) -> Frame:
        """Poll the source, falling back to the last (or a blank) frame."""
        try:
            frame = self._normalize(self.source.get_current_frame())
        except CaptureError as e:
            self.metrics.capture_errors += 1
            logger.warning(
                f"Capture failed, reusing previous frame: {e}. "
                f"Total capture errors: {self.metrics.capture_errors}"
            )
            if self._buffer is None:
                self._buffer = Frame.blank(*self.frame_size)
            return self._buffer
        self._buffer = frame
        return frame

    def capture(self) -> Frame:
        """
        Freeze a fresh frame from the source.

        Subsequent non-live ticks reuse it.
        """
        frame = self._poll()
        logger.info(f"Captured frame {frame!r}")
        return frame

    def freeze(self, frame: Frame) -> Frame:
        """Freeze a supplied frame (resized to the frame size)."""
        self._buffer = self._normalize(frame)
        logger.info(f"Froze supplied frame {frame!r}")
        return self._buffer

    def tick(self, controls: PipelineControls) -> PipelineOutputs:
        """
        Run one pipeline tick.

        Args:
            controls: Snapshot of the user controls

        Returns:
            PipelineOutputs for this tick
        """
        started = time.perf_counter()

        # 1. Source frame
        if controls.live or self._buffer is None:
            source = self._poll()
        else:
            source = self._buffer

        # 2-4. Grayscale, channels, per-channel thresholds
        grayscale = grayscale_boost(source)
        channels = isolate_channels(source)
        red_threshold = threshold(source, controls.red_cutoff, ChannelSelector.R)
        green_threshold = threshold(source, controls.green_cutoff, ChannelSelector.G)
        blue_threshold = threshold(source, controls.blue_cutoff, ChannelSelector.B)

        # 5-6. Color spaces and their fixed-cutoff masks
        hsv = to_hsv(source)
        ycbcr = to_ycbcr(source)
        hsv_threshold = threshold(hsv, self.color_space_cutoff)
        ycbcr_threshold = threshold(ycbcr, self.color_space_cutoff)

        # 7. Detection in detector space
        face_box = self.detector.detect(source.resize(*self.detector_size))

        # 8. Face compositing
        preview = self.compositor.compose(source, face_box, controls.face_filter, hsv=hsv)
        if preview.box is None and face_box is not None:
            logger.debug(f"Face box {face_box} lies outside the frame, treating as no face")
            face_box = None

        # Extension view and sticker placement
        extension_view = apply_filter(
            source,
            controls.extension_filter,
            FilterContext(
                hsv=hsv,
                block_size=self.compositor.block_size,
                blur_radius=self.compositor.blur_radius,
            ),
        )
        sticker_rect = self._sticker_rect(controls, face_box, source)

        self._tick_id += 1
        outputs = PipelineOutputs(
            tick_id=self._tick_id,
            timestamp=time.time(),
            live=controls.live,
            source=source,
            grayscale=grayscale,
            red=channels[ChannelSelector.R],
            green=channels[ChannelSelector.G],
            blue=channels[ChannelSelector.B],
            red_threshold=red_threshold,
            green_threshold=green_threshold,
            blue_threshold=blue_threshold,
            hsv=hsv,
            ycbcr=ycbcr,
            hsv_threshold=hsv_threshold,
            ycbcr_threshold=ycbcr_threshold,
            face_preview=preview.frame,
            face_box=face_box,
            display_face_box=preview.box,
            extension_view=extension_view,
            sticker_rect=sticker_rect,
            face_filter=controls.face_filter,
            extension_filter=controls.extension_filter,
        )

        self._record(outputs, started)
        return outputs

    def _sticker_rect(self, controls, face_box, source: Frame) -> Optional[Rect]:
        mode = controls.extension_filter
        if mode.kind != FilterKind.STICKER or face_box is None:
            return None
        area = self.overlay_area or Rect(0.0, 0.0, float(source.width), float(source.height))
        face = project_box(face_box, self.detector_size, area)
        return sticker_placement(mode.sticker_id, face)

    def _record(self, outputs: PipelineOutputs, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        m = self.metrics
        m.ticks += 1
        if outputs.live:
            m.live_ticks += 1
        else:
            m.frozen_ticks += 1
        if outputs.face_detected:
            m.faces_detected += 1
        m.last_tick_ms = elapsed_ms
        m.total_tick_ms += elapsed_ms

        if self.log_every_n_ticks and m.ticks % self.log_every_n_ticks == 0:
            logger.info(
                f"Tick {outputs.tick_id}: {elapsed_ms:.1f}ms, "
                f"face={outputs.face_detected}, "
                f"faces {m.faces_detected}/{m.ticks}, "
                f"capture_errors={m.capture_errors}"
            )

    def get_metrics(self) -> dict:
        """Get orchestrator and detector metrics for observability."""
        return {
            **self.metrics.to_dict(),
            "detection": self.detector.get_metrics(),
            "has_frame": self._buffer is not None,
        }

    def reset(self) -> None:
        """Drop the buffered frame and zero the counters."""
        self._buffer = None
        self._tick_id = 0
        self.metrics = OrchestratorMetrics()
        logger.info("FrameOrchestrator reset")
