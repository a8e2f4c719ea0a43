"""
Test Configuration
==================

Pytest fixtures and test configuration for FrameLab.

No camera and no network: capture is simulated with static or scripted
sources and detection with MockFaceDetector.
"""

import numpy as np
import pytest


class ScriptedCaptureSource:
    """Returns the given frames in order, repeating the last one.

    A None entry raises CaptureError on that poll.
    """

    def __init__(self, frames):
        self.frames = list(frames)
        self.poll_count = 0

    def get_current_frame(self):
        from framelab.capture.source import CaptureError

        index = min(self.poll_count, len(self.frames) - 1)
        self.poll_count += 1
        frame = self.frames[index]
        if frame is None:
            raise CaptureError(f"Scripted capture failure on poll {self.poll_count}")
        return frame


@pytest.fixture
def uniform_frame():
    """Factory for single-color opaque frames."""
    from framelab.models.frame import Frame

    def _make(color=(200, 100, 50), width=4, height=4):
        return Frame.blank(width, height, color)

    return _make


@pytest.fixture
def gradient_frame():
    """Provide a 25x23 frame where every pixel has a distinct color."""
    from framelab.models.frame import Frame

    ys, xs = np.mgrid[0:23, 0:25]
    rgb = np.stack(
        [(xs * 10) % 256, (ys * 11) % 256, (xs * 3 + ys * 7) % 256],
        axis=-1,
    ).astype(np.uint8)
    return Frame.from_rgb(rgb)


@pytest.fixture
def scripted_source():
    """Factory for ScriptedCaptureSource."""
    return ScriptedCaptureSource


@pytest.fixture
def sample_face_box():
    """Provide the default mock detector box (detector space 160x120)."""
    from framelab.models.face import FaceBox

    return FaceBox(x=50, y=30, width=60, height=60)


@pytest.fixture
def orchestrator_factory(uniform_frame):
    """Factory for a 160x120 orchestrator over a static frame."""
    from framelab.capture.source import StaticCaptureSource
    from framelab.detection.detector import MockFaceDetector
    from framelab.pipeline.orchestrator import FrameOrchestrator

    def _make(color=(200, 100, 50), detector=None, **kwargs):
        source = StaticCaptureSource(uniform_frame(color, 160, 120))
        return FrameOrchestrator(
            source=source,
            detector=detector if detector is not None else MockFaceDetector(),
            **kwargs,
        )

    return _make
