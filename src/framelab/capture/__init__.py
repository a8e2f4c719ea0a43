"""
Capture Module
==============

Frame sources and the image codec.

This module provides the ingestion layer for FrameLab:
    - CaptureSource: Protocol polled once per tick
    - CameraCaptureSource: Webcam via OpenCV
    - ImageCaptureSource: Still image file
    - StaticCaptureSource: Fixed frame
    - decode_image / encode_png: Image codec

Example:
    from framelab.capture import CameraCaptureSource

    source = CameraCaptureSource(device_index=0, size=(160, 120))
    frame = source.get_current_frame()
"""

from framelab.capture.image_codec import (
    ImageDecodeError,
    decode_image,
    decode_image_b64,
    encode_bgr_png,
    encode_png,
    load_image,
)
from framelab.capture.source import (
    CameraCaptureSource,
    CaptureError,
    CaptureSource,
    ImageCaptureSource,
    StaticCaptureSource,
)


__all__ = [
    "ImageDecodeError",
    "decode_image",
    "decode_image_b64",
    "encode_bgr_png",
    "encode_png",
    "load_image",
    "CameraCaptureSource",
    "CaptureError",
    "CaptureSource",
    "ImageCaptureSource",
    "StaticCaptureSource",
]
