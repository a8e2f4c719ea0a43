"""
FrameLab
========

Real-time webcam frame processing pipeline with face-region privacy filters.

Every tick the pipeline derives a set of images from the current camera
frame (grayscale, channel isolation, threshold masks, HSV, YCbCr and their
thresholds) and composites a face preview where only the detected face
region is filtered.

Components:
    - processing: Pure per-pixel transforms (color spaces, thresholds, pixelation, filters)
    - compositing: Face-region crop-filter-paste and sticker geometry
    - detection: Face detector protocol and failure isolation
    - capture: Camera / image capture sources and image codec
    - pipeline: FrameOrchestrator driving one pass per tick
    - observability: Grid renderer for side-by-side inspection

Example:
    from framelab.capture import StaticCaptureSource
    from framelab.detection import MockFaceDetector
    from framelab.pipeline import FrameOrchestrator
    from framelab.models import Frame, PipelineControls

    orchestrator = FrameOrchestrator(
        source=StaticCaptureSource(Frame.blank(160, 120)),
        detector=MockFaceDetector(),
    )
    outputs = orchestrator.tick(PipelineControls())
"""

__version__ = "0.1.0"
__author__ = "FrameLab Project"

__all__ = [
    "__version__",
]
