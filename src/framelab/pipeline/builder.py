"""
Pipeline Builder
================

Factories that turn Settings into pipeline components.

Backends are selected by name and fail fast on unknown values, so a
typo in config.yaml stops startup instead of silently running a mock.
"""

import logging
from typing import Optional

from framelab.capture.source import (
    CameraCaptureSource,
    CaptureSource,
    ImageCaptureSource,
    StaticCaptureSource,
)
from framelab.compositing.face_region import FaceRegionCompositor
from framelab.config import Settings
from framelab.detection.detector import (
    FaceDetector,
    HaarFaceDetector,
    MockFaceDetector,
)
from framelab.models.controls import PipelineControls
from framelab.models.face import FaceBox, Rect
from framelab.models.filters import FilterMode
from framelab.models.frame import Frame
from framelab.pipeline.orchestrator import FrameOrchestrator


logger = logging.getLogger(__name__)


def create_capture_source(settings: Settings) -> CaptureSource:
    """
    Create the frame source based on config.

    Raises:
        ValueError: On an unknown backend or a missing image path
    """
    capture = settings.capture
    size = (capture.width, capture.height)
    backend = capture.backend

    if backend == "camera":
        logger.info(f"Using CameraCaptureSource: device={capture.device_index}")
        return CameraCaptureSource(device_index=capture.device_index, size=size)

    elif backend == "image":
        if not capture.image_path:
            raise ValueError("Image capture backend requires capture.image_path")
        logger.info(f"Using ImageCaptureSource: {capture.image_path}")
        return ImageCaptureSource(capture.image_path, size=size)

    elif backend == "blank":
        logger.info("Using blank StaticCaptureSource")
        return StaticCaptureSource(Frame.blank(*size))

    else:
        raise ValueError(f"Unknown capture backend: {backend}")


def create_detector(settings: Settings) -> Optional[FaceDetector]:
    """
    Create the face detector based on config.

    Returns None when detection is disabled.
    """
    detector = settings.detector
    backend = detector.backend

    if backend == "haar":
        logger.info("Using HaarFaceDetector")
        return HaarFaceDetector(
            cascade_path=detector.cascade_path,
            scale_factor=detector.scale_factor,
            min_neighbors=detector.min_neighbors,
            min_size=detector.min_size,
        )

    elif backend == "mock":
        box = detector.mock
        logger.info("Using MockFaceDetector")
        return MockFaceDetector(
            box=FaceBox(x=box.x, y=box.y, width=box.width, height=box.height)
        )

    elif backend == "none":
        logger.info("Face detection disabled")
        return None

    else:
        raise ValueError(f"Unknown detector backend: {backend}")


def create_controls(settings: Settings) -> PipelineControls:
    """Initial control snapshot from config."""
    return PipelineControls(
        red_cutoff=settings.thresholds.red,
        green_cutoff=settings.thresholds.green,
        blue_cutoff=settings.thresholds.blue,
        face_filter=FilterMode.parse(settings.filters.face_filter),
        extension_filter=FilterMode.parse(settings.filters.extension_filter),
    )


def build_orchestrator(
    settings: Settings,
    source: Optional[CaptureSource] = None,
    detector: Optional[FaceDetector] = None,
) -> FrameOrchestrator:
    """
    Assemble a FrameOrchestrator from config.

    Args:
        settings: Loaded settings
        source: Override the configured capture source
        detector: Override the configured detector

    Returns:
        Ready-to-tick orchestrator
    """
    detector_size = (settings.detector.width, settings.detector.height)
    compositor = FaceRegionCompositor(
        detector_size=detector_size,
        block_size=settings.filters.pixelate_block_size,
        blur_radius=settings.filters.blur_radius,
    )
    overlay = settings.overlay

    return FrameOrchestrator(
        source=source if source is not None else create_capture_source(settings),
        detector=detector if detector is not None else create_detector(settings),
        compositor=compositor,
        detector_size=detector_size,
        frame_size=(settings.capture.width, settings.capture.height),
        overlay_area=Rect(x=overlay.x, y=overlay.y, width=overlay.width, height=overlay.height),
        color_space_cutoff=settings.thresholds.color_space,
    )
