"""
Frame Filters
=============

Whole-image filters and the FilterMode dispatch.

Every filter maps a frame (a full frame or a cropped face region) to a new
frame of the same size. The face compositor applies them to a crop in
isolation; the extension view applies them to the whole frame.

Filters:
    - IDENTITY: unchanged copy
    - GRAYSCALE: unweighted mean of R, G, B
    - BLUR: Gaussian smoothing with a small fixed radius
    - COLOR_SPACE_OVERLAY: the same pixels taken from the HSV visualization
    - PIXELATE: block pixelation
    - SEPIA: classic sepia matrix, clamped at 255
    - INVERT: 255 - value
    - EDGE: grayscale, then a mid-level binarization (line-art look)
    - STICKER: pixels unchanged; the sticker is drawn by presentation

Dispatch:
    `resolve_filter(mode)` looks the variant up once and returns a callable,
    so the branch is taken once per tick rather than per pixel.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import cv2
import numpy as np

from framelab.models.filters import FilterKind, FilterMode
from framelab.models.frame import Frame, to_uint8
from framelab.processing.color_space import to_hsv
from framelab.processing.pixelate import pixelate
from framelab.processing.threshold import threshold


logger = logging.getLogger(__name__)


DEFAULT_BLOCK_SIZE = 10
DEFAULT_BLUR_RADIUS = 3
EDGE_CUTOFF = 127

# Rows produce output R, G, B from input (r, g, b)
SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ]
)


@dataclass(frozen=True, slots=True)
class FilterContext:
    """
    Extra inputs some filters need.

    Attributes:
        hsv: HSV visualization covering the same pixels as the filtered
            frame (None to compute it on demand)
        block_size: Pixelation tile size
        blur_radius: Blur radius in pixels
    """

    hsv: Optional[Frame] = None
    block_size: int = DEFAULT_BLOCK_SIZE
    blur_radius: int = DEFAULT_BLUR_RADIUS


FilterFn = Callable[[Frame, FilterContext], Frame]


def mean_grayscale(frame: Frame) -> Frame:
    """Unweighted (R + G + B) / 3, replicated into R, G, B."""
    gray = frame.pixels[..., :3].astype(np.float64).sum(axis=-1) / 3.0
    return Frame.from_rgb(to_uint8(np.repeat(gray[..., np.newaxis], 3, axis=-1)))


def blur(frame: Frame, radius: int = DEFAULT_BLUR_RADIUS) -> Frame:
    """
    Gaussian blur with a (2 * radius + 1) square kernel.

    Borders are reflected, so blurring a crop never pulls in pixels from
    outside it.
    """
    if radius < 1:
        logger.debug(f"Blur radius {radius} clamped to 1")
        radius = 1
    ksize = 2 * radius + 1
    rgb = np.ascontiguousarray(frame.pixels[..., :3])
    blurred = cv2.GaussianBlur(rgb, (ksize, ksize), 0, borderType=cv2.BORDER_REFLECT_101)
    return Frame.from_rgb(blurred)


def sepia(frame: Frame) -> Frame:
    color = frame.pixels[..., :3].astype(np.float64)
    toned = np.minimum(color @ SEPIA_MATRIX.T, 255.0)
    return Frame.from_rgb(to_uint8(toned))


def invert(frame: Frame) -> Frame:
    return Frame.from_rgb(255 - frame.pixels[..., :3])


def edge(frame: Frame) -> Frame:
    return threshold(mean_grayscale(frame), EDGE_CUTOFF)


def _color_space_overlay(frame: Frame, context: FilterContext) -> Frame:
    if context.hsv is None:
        return to_hsv(frame)
    if context.hsv.size != frame.size:
        raise ValueError(
            f"HSV overlay size {context.hsv.size} does not match frame {frame.size}"
        )
    return context.hsv.copy()


_FILTERS: Dict[FilterKind, FilterFn] = {
    FilterKind.IDENTITY: lambda frame, context: frame.copy(),
    FilterKind.GRAYSCALE: lambda frame, context: mean_grayscale(frame),
    FilterKind.BLUR: lambda frame, context: blur(frame, context.blur_radius),
    FilterKind.COLOR_SPACE_OVERLAY: _color_space_overlay,
    FilterKind.PIXELATE: lambda frame, context: pixelate(frame, context.block_size),
    FilterKind.SEPIA: lambda frame, context: sepia(frame),
    FilterKind.INVERT: lambda frame, context: invert(frame),
    FilterKind.EDGE: lambda frame, context: edge(frame),
    FilterKind.STICKER: lambda frame, context: frame.copy(),
}


def resolve_filter(mode: FilterMode) -> FilterFn:
    """Look up the filter function for a mode."""
    return _FILTERS[mode.kind]


def apply_filter(
    frame: Frame,
    mode: FilterMode,
    context: Optional[FilterContext] = None,
) -> Frame:
    """
    Apply a filter mode to a frame.

    Args:
        frame: Frame or cropped region to filter
        mode: Selected filter
        context: Extra filter inputs (defaults when None)

    Returns:
        New filtered frame of the same size
    """
    return resolve_filter(mode)(frame, context or FilterContext())
