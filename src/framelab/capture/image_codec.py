"""
Image Codec
===========

Encoding and decoding between compressed images and Frames.

Design Rules:
    - This is the ONLY place in the codebase that decodes or encodes images
    - Validates shape and dtype
    - Fails fast on corrupt data with ImageDecodeError
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when image decoding fails."""
    pass


def decode_image(data: bytes) -> Frame:
    """
    Decode compressed image bytes (PNG, JPEG, ...) to an opaque frame.

    Args:
        data: Encoded image bytes

    Returns:
        Frame with alpha = 255

    Raises:
        ImageDecodeError: If decoding fails or the image is invalid
    """
    if not data:
        raise ImageDecodeError("Empty image data")

    nparr = np.frombuffer(data, np.uint8)
    bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if bgr is None:
        raise ImageDecodeError("Failed to decode image: cv2.imdecode returned None")

    if bgr.ndim != 3 or bgr.shape[2] != 3:
        raise ImageDecodeError(f"Invalid image shape: {bgr.shape}")

    if bgr.dtype != np.uint8:
        raise ImageDecodeError(f"Invalid dtype: {bgr.dtype}")

    return Frame.from_bgr(bgr)


def decode_image_b64(image_b64: str) -> Frame:
    """
    Decode a base64-encoded image to a frame.

    Raises:
        ImageDecodeError: If base64 or image decoding fails
    """
    try:
        data = base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Base64 decode failed: {e}")
    return decode_image(data)


def load_image(path: Union[str, Path]) -> Frame:
    """
    Load an image file as a frame.

    Raises:
        FileNotFoundError: If the file does not exist
        ImageDecodeError: If the file is not a readable image
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    return decode_image(file_path.read_bytes())


def encode_png(frame: Frame) -> bytes:
    """Encode a frame as PNG bytes (RGB, alpha dropped)."""
    ok, buffer = cv2.imencode(".png", frame.to_bgr())
    if not ok:
        raise ValueError(f"PNG encoding failed for {frame!r}")
    return buffer.tobytes()


def encode_bgr_png(image: np.ndarray) -> bytes:
    """Encode an OpenCV BGR canvas as PNG bytes."""
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        raise ValueError(f"PNG encoding failed for canvas {image.shape}")
    return buffer.tobytes()
