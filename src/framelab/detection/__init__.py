"""
Detection Module
================

Face detection as a pluggable black box.

The pipeline consumes ONLY the detector's output (a box or nothing),
never detector internals.

Components:
    - FaceDetector: Protocol for detection backends
    - HaarFaceDetector: OpenCV Haar cascade
    - MockFaceDetector: Deterministic detector for testing
    - NullFaceDetector: Detection disabled
    - GuardedDetector / detect_safely: Failure isolation
"""

from framelab.detection.detector import (
    DetectorError,
    FaceDetector,
    GuardedDetector,
    HaarFaceDetector,
    MockFaceDetector,
    NullFaceDetector,
    detect_safely,
)

__all__ = [
    "DetectorError",
    "FaceDetector",
    "GuardedDetector",
    "HaarFaceDetector",
    "MockFaceDetector",
    "NullFaceDetector",
    "detect_safely",
]
