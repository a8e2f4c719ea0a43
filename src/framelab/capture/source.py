"""
Capture Sources
===============

Where the pipeline's source frames come from.

The orchestrator polls `get_current_frame()` once per tick while live.
Every source delivers frames at a fixed size, so all derived frames of a
session share one resolution.

Sources:
    - CameraCaptureSource: OpenCV VideoCapture (webcam)
    - ImageCaptureSource: a still image file
    - StaticCaptureSource: a fixed Frame (tests, blank backend)
"""

import logging
from typing import Optional, Protocol, Tuple

import cv2

from framelab.capture.image_codec import load_image
from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


class CaptureError(Exception):
    """Raised when a capture source cannot deliver a frame."""
    pass


class CaptureSource(Protocol):
    """
    Protocol for frame sources.

    `get_current_frame` returns the latest frame at the source's fixed
    size, or raises CaptureError.
    """

    def get_current_frame(self) -> Frame:
        ...


class StaticCaptureSource:
    """
    Source that always returns the same frame.

    Attributes:
        frame: Frame returned by every poll
    """

    def __init__(self, frame: Frame) -> None:
        self.frame = frame
        self._poll_count = 0

    @property
    def poll_count(self) -> int:
        return self._poll_count

    def get_current_frame(self) -> Frame:
        self._poll_count += 1
        return self.frame


class ImageCaptureSource(StaticCaptureSource):
    """Still image file, resized to the capture size."""

    def __init__(self, path: str, size: Tuple[int, int]) -> None:
        """
        Load the image.

        Raises:
            FileNotFoundError: If the file does not exist
            ImageDecodeError: If the file is not a readable image
        """
        frame = load_image(path).resize(*size)
        super().__init__(frame)
        self.path = path
        logger.info(f"ImageCaptureSource loaded {path} at {size[0]}x{size[1]}")


class CameraCaptureSource:
    """
    Webcam source backed by cv2.VideoCapture.

    Frames are converted to RGBA and resized to the configured size.
    The device is opened lazily on the first poll.

    Attributes:
        device_index: OpenCV camera index
        size: (width, height) of delivered frames
    """

    def __init__(self, device_index: int = 0, size: Tuple[int, int] = (160, 120)) -> None:
        self.device_index = device_index
        self.size = size
        self._capture: Optional[cv2.VideoCapture] = None
        self._read_errors = 0

        logger.info(
            f"CameraCaptureSource initialized: device={device_index}, "
            f"size={size[0]}x{size[1]}"
        )

    def _open(self) -> cv2.VideoCapture:
        if self._capture is None:
            capture = cv2.VideoCapture(self.device_index)
            if not capture.isOpened():
                capture.release()
                raise CaptureError(f"Cannot open camera {self.device_index}")
            self._capture = capture
            logger.info(f"Camera {self.device_index} opened")
        return self._capture

    def get_current_frame(self) -> Frame:
        """
        Read one frame from the camera.

        Raises:
            CaptureError: If the camera cannot be opened or read
        """
        capture = self._open()
        ok, bgr = capture.read()
        if not ok or bgr is None:
            self._read_errors += 1
            raise CaptureError(
                f"Camera {self.device_index} read failed "
                f"(total read errors: {self._read_errors})"
            )
        return Frame.from_bgr(bgr).resize(*self.size)

    def release(self) -> None:
        """Release the camera device."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"Camera {self.device_index} released")
