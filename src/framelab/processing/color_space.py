"""
Color Space Conversion
======================

Pure per-pixel transforms from an RGBA frame to a same-size RGBA frame.

Transforms:
    - grayscale_boost: BT.601 luma, brightened by 20%
    - isolate_channel: keep one color channel, zero the others
    - to_hsv: hue/saturation/value packed into R/G/B for display
    - to_ycbcr: full-range YCbCr packed into R/G/B for display

Key Design Decisions:
    - All math is vectorized over the whole pixel array
    - Outputs are always new frames with alpha = 255
    - The HSV and YCbCr outputs are visualization encodings; they are not
      meant to be converted back to RGB
"""

from typing import Dict

import numpy as np

from framelab.models.filters import ChannelSelector
from framelab.models.frame import Frame, to_uint8


# BT.601 luma weights
LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

BRIGHTNESS_BOOST = 1.2

_CHANNEL_INDEX: Dict[ChannelSelector, int] = {
    ChannelSelector.R: 0,
    ChannelSelector.G: 1,
    ChannelSelector.B: 2,
}


def _split(frame: Frame):
    """Float64 copies of the R, G, B planes."""
    color = frame.pixels[..., :3].astype(np.float64)
    return color[..., 0], color[..., 1], color[..., 2]


def _pack(c0: np.ndarray, c1: np.ndarray, c2: np.ndarray) -> Frame:
    """Stack three float planes into an opaque frame."""
    return Frame.from_rgb(to_uint8(np.stack([c0, c1, c2], axis=-1)))


def luma(frame: Frame) -> np.ndarray:
    """BT.601 luma plane as float64, shape (H, W)."""
    r, g, b = _split(frame)
    return LUMA_R * r + LUMA_G * g + LUMA_B * b


def grayscale_boost(frame: Frame) -> Frame:
    """
    Grayscale with a brightness boost.

    gray = min(luma * 1.2, 255), replicated into R, G and B.

    Args:
        frame: Source frame

    Returns:
        New opaque frame with R == G == B
    """
    gray = np.minimum(luma(frame) * BRIGHTNESS_BOOST, 255.0)
    return _pack(gray, gray, gray)


def isolate_channel(frame: Frame, channel) -> Frame:
    """
    Keep only one color channel.

    Args:
        frame: Source frame
        channel: ChannelSelector.R/G/B or "R"/"G"/"B"

    Returns:
        New opaque frame holding the source value in the named channel
        and zero in the other two

    Raises:
        ValueError: If channel is not R, G or B
    """
    selector = ChannelSelector(channel)
    if selector not in _CHANNEL_INDEX:
        raise ValueError(f"isolate_channel needs R, G or B, got {selector.value}")
    index = _CHANNEL_INDEX[selector]

    rgb = np.zeros(frame.pixels.shape[:2] + (3,), dtype=np.uint8)
    rgb[..., index] = frame.pixels[..., index]
    return Frame.from_rgb(rgb)


def isolate_channels(frame: Frame) -> Dict[ChannelSelector, Frame]:
    """Red, green and blue isolations of the same frame snapshot."""
    return {
        selector: isolate_channel(frame, selector)
        for selector in (ChannelSelector.R, ChannelSelector.G, ChannelSelector.B)
    }


def to_hsv(frame: Frame) -> Frame:
    """
    RGB → HSV visualization.

    With r, g, b normalized to [0, 1]:
        v = max
        s = 0 if max == 0 else (max - min) / max
        h = 0 if max == min, otherwise by the channel attaining max:
            r: (g - b) / delta + (6 if g < b else 0)
            g: (b - r) / delta + 2
            b: (r - g) / delta + 4
        h /= 6

    Ties between channels resolve in r, g, b order. Each of h, s, v is
    scaled to [0, 255] and stored in R, G, B respectively.

    Args:
        frame: Source frame

    Returns:
        New opaque frame with (H, S, V) in the color channels
    """
    r, g, b = _split(frame)
    r /= 255.0
    g /= 255.0
    b /= 255.0

    max_val = np.maximum(np.maximum(r, g), b)
    min_val = np.minimum(np.minimum(r, g), b)
    delta = max_val - min_val

    # Avoid division by zero; those pixels are overwritten below.
    safe_delta = np.where(delta == 0, 1.0, delta)
    safe_max = np.where(max_val == 0, 1.0, max_val)

    saturation = np.where(max_val == 0, 0.0, delta / safe_max)

    hue_r = (g - b) / safe_delta + np.where(g < b, 6.0, 0.0)
    hue_g = (b - r) / safe_delta + 2.0
    hue_b = (r - g) / safe_delta + 4.0

    hue = np.where(
        max_val == r,
        hue_r,
        np.where(max_val == g, hue_g, hue_b),
    )
    hue = np.where(delta == 0, 0.0, hue) / 6.0

    return _pack(hue * 255.0, saturation * 255.0, max_val * 255.0)


def to_ycbcr(frame: Frame) -> Frame:
    """
    RGB → full-range YCbCr visualization.

        Y  = 0.299 R + 0.587 G + 0.114 B
        Cb = 128 - 0.168736 R - 0.331264 G + 0.5 B
        Cr = 128 + 0.5 R - 0.418688 G - 0.081312 B

    Values are clamped to [0, 255] before storage.

    Args:
        frame: Source frame

    Returns:
        New opaque frame with (Y, Cb, Cr) in the color channels
    """
    r, g, b = _split(frame)
    y = LUMA_R * r + LUMA_G * g + LUMA_B * b
    cb = 128.0 - 0.168736 * r - 0.331264 * g + 0.5 * b
    cr = 128.0 + 0.5 * r - 0.418688 * g - 0.081312 * b
    return _pack(y, cb, cr)
