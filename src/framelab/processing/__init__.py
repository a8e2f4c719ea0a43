"""
Processing Module
=================

Pure frame transforms. Nothing here holds state or touches I/O.

Components:
    - color_space: grayscale boost, channel isolation, HSV, YCbCr
    - threshold: intensity binarization
    - pixelate: block pixelation
    - filters: privacy / creative filters and FilterMode dispatch
"""

from framelab.processing.color_space import (
    grayscale_boost,
    isolate_channel,
    isolate_channels,
    to_hsv,
    to_ycbcr,
)
from framelab.processing.threshold import COLOR_SPACE_CUTOFF, threshold
from framelab.processing.pixelate import pixelate
from framelab.processing.filters import (
    FilterContext,
    apply_filter,
    blur,
    edge,
    invert,
    mean_grayscale,
    resolve_filter,
    sepia,
)

__all__ = [
    "grayscale_boost",
    "isolate_channel",
    "isolate_channels",
    "to_hsv",
    "to_ycbcr",
    "COLOR_SPACE_CUTOFF",
    "threshold",
    "pixelate",
    "FilterContext",
    "apply_filter",
    "blur",
    "edge",
    "invert",
    "mean_grayscale",
    "resolve_filter",
    "sepia",
]
