"""
Face Detection
==============

Black-box face detector abstraction.

The pipeline consumes only the detector's output: one face box in
detector space, or nothing. Detection internals are never inspected.

Design Rules:
    - Detectors receive a frame already downscaled to detector space
    - A detector may raise; `detect_safely` turns any failure or malformed
      result into "no face" so a flaky detector cannot halt the tick loop
    - Every failure is logged and counted
"""

import logging
import numbers
import os
from typing import Optional, Protocol, Sequence

import cv2

from framelab.models.face import FaceBox
from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


class DetectorError(Exception):
    """Raised when a detector cannot be initialized or fails to run."""
    pass


class FaceDetector(Protocol):
    """
    Protocol for face detection backends.

    Implementations:
        - HaarFaceDetector: OpenCV Haar cascade (production)
        - MockFaceDetector: fixed/scripted boxes (testing)
        - NullFaceDetector: never finds a face
    """

    def detect(self, image: Frame):
        """
        Find a face.

        Args:
            image: Frame in detector space

        Returns:
            FaceBox (or an (x, y, w, h) sequence) in detector space,
            or None when no face is present
        """
        ...


class HaarFaceDetector:
    """
    OpenCV Haar-cascade face detector.

    Returns the largest detection in the frame.

    Attributes:
        scale_factor: Image pyramid step between scales
        min_neighbors: Neighbor rectangles required to keep a detection
        min_size: Smallest face edge in pixels
    """

    def __init__(
        self,
        cascade_path: Optional[str] = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 4,
        min_size: int = 20,
    ) -> None:
        """
        Initialize the cascade.

        Args:
            cascade_path: Cascade XML file (default: OpenCV's bundled
                frontal-face cascade)
            scale_factor: detectMultiScale scaleFactor (> 1)
            min_neighbors: detectMultiScale minNeighbors
            min_size: Minimum face edge in detector pixels

        Raises:
            DetectorError: If the cascade cannot be loaded
        """
        if scale_factor <= 1.0:
            raise ValueError(f"scale_factor must be > 1, got {scale_factor}")

        if cascade_path is None:
            cascade_path = os.path.join(cv2.data.haarcascades, DEFAULT_CASCADE)
        if not os.path.exists(cascade_path):
            raise DetectorError(f"Haar cascade not found: {cascade_path}")

        self._classifier = cv2.CascadeClassifier(cascade_path)
        if self._classifier.empty():
            raise DetectorError(f"Failed to load Haar cascade: {cascade_path}")

        self.cascade_path = cascade_path
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size

        logger.info(
            f"HaarFaceDetector initialized: cascade={os.path.basename(cascade_path)}, "
            f"scale_factor={scale_factor}, min_neighbors={min_neighbors}"
        )

    def detect(self, image: Frame) -> Optional[FaceBox]:
        """Largest face in the frame, or None."""
        gray = cv2.cvtColor(image.pixels, cv2.COLOR_RGBA2GRAY)
        gray = cv2.equalizeHist(gray)
        faces = self._classifier.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=(self.min_size, self.min_size),
        )

        best: Optional[FaceBox] = None
        best_area = 0
        for x, y, w, h in faces:
            area = int(w) * int(h)
            if area > best_area:
                best_area = area
                best = FaceBox(x=int(x), y=int(y), width=int(w), height=int(h))
        return best


class MockFaceDetector:
    """
    Deterministic detector for tests and camera-less runs.

    Returns the same box every call. Optionally raises on chosen calls to
    exercise failure handling.

    Attributes:
        box: Box returned on every successful call (None = no face)
        fail_on: 1-based call numbers that raise DetectorError
    """

    def __init__(
        self,
        box: Optional[FaceBox] = FaceBox(x=50, y=30, width=60, height=60),
        fail_on: Sequence[int] = (),
    ) -> None:
        self.box = box
        self.fail_on = set(fail_on)
        self._calls = 0

        logger.info(f"MockFaceDetector initialized: box={box}")

    @property
    def call_count(self) -> int:
        return self._calls

    def detect(self, image: Frame) -> Optional[FaceBox]:
        self._calls += 1
        if self._calls in self.fail_on:
            raise DetectorError(f"Scripted detector failure on call {self._calls}")
        return self.box


class NullFaceDetector:
    """Detector that never finds a face."""

    def detect(self, image: Frame) -> Optional[FaceBox]:
        return None


def _coerce_box(result) -> Optional[FaceBox]:
    """
    Normalize detector output to a FaceBox.

    Accepts a FaceBox, an (x, y, w, h) sequence, or a sequence of such
    boxes (first one wins). Returns None for empty results.

    Raises:
        ValueError: If the result is malformed
    """
    if result is None or isinstance(result, FaceBox):
        return result
    if isinstance(result, (str, bytes)):
        raise ValueError(f"Unexpected detector output: {result!r}")

    values = list(result)
    if not values:
        return None
    if not isinstance(values[0], numbers.Number):
        return _coerce_box(values[0])
    if len(values) != 4:
        raise ValueError(f"Face box needs 4 values, got {len(values)}")
    if not all(isinstance(v, numbers.Number) for v in values):
        raise ValueError(f"Face box values must be numeric, got {values!r}")

    x, y, w, h = (int(v) for v in values)
    return FaceBox(x=x, y=y, width=w, height=h)


def detect_safely(detector: Optional[FaceDetector], image: Frame) -> Optional[FaceBox]:
    """
    Run a detector with failure isolation.

    Args:
        detector: Detector to run (None = detection disabled)
        image: Frame in detector space

    Returns:
        FaceBox, or None when no face was found, the detector raised, or
        its output was malformed
    """
    return GuardedDetector(detector).detect(image)


class GuardedDetector:
    """
    Failure-isolating wrapper that also keeps detection statistics.

    `detect` never raises. Errors and malformed outputs count as
    "no face" and are tallied in `error_count`.

    Example:
        guarded = GuardedDetector(HaarFaceDetector())
        box = guarded.detect(small_frame)
        print(guarded.get_metrics())
    """

    def __init__(self, detector: Optional[FaceDetector]) -> None:
        self.detector = detector
        self._call_count: int = 0
        self._error_count: int = 0
        self._face_count: int = 0

    def detect(self, image: Frame) -> Optional[FaceBox]:
        if self.detector is None:
            return None

        self._call_count += 1
        try:
            box = _coerce_box(self.detector.detect(image))
        except Exception as e:
            self._error_count += 1
            logger.warning(
                f"Face detection failed, treating as no face: {e}. "
                f"Total errors: {self._error_count}"
            )
            return None

        if box is not None:
            self._face_count += 1
        return box

    @property
    def error_count(self) -> int:
        """Detector calls that raised or returned malformed output."""
        return self._error_count

    @property
    def call_count(self) -> int:
        return self._call_count

    def get_metrics(self) -> dict:
        """Get detection metrics for observability."""
        return {
            "detector": type(self.detector).__name__ if self.detector else None,
            "call_count": self._call_count,
            "error_count": self._error_count,
            "face_count": self._face_count,
        }
