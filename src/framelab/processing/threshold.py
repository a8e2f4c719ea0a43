"""
Thresholding
============

Binarize a frame against an intensity cutoff.

Intensity is either one raw color channel or the unweighted mean of all
three. Pixels strictly brighter than the cutoff become white, everything
else black.
"""

import logging

import numpy as np

from framelab.models.controls import clamp_cutoff
from framelab.models.filters import ChannelSelector
from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


# Cutoff applied to the HSV and YCbCr visualizations.
COLOR_SPACE_CUTOFF = 128


def intensity(frame: Frame, selector=ChannelSelector.ALL) -> np.ndarray:
    """
    Per-pixel intensity used for thresholding.

    Args:
        frame: Source frame
        selector: ChannelSelector or its string value

    Returns:
        Float64 array of shape (H, W)
    """
    selector = ChannelSelector(selector)
    color = frame.pixels[..., :3].astype(np.float64)
    if selector == ChannelSelector.R:
        return color[..., 0]
    if selector == ChannelSelector.G:
        return color[..., 1]
    if selector == ChannelSelector.B:
        return color[..., 2]
    return color.sum(axis=-1) / 3.0


def threshold(frame: Frame, cutoff: int, selector=ChannelSelector.ALL) -> Frame:
    """
    Binarize a frame.

    Output color channels are 255 where intensity > cutoff (strict) and 0
    elsewhere; alpha is 255. Cutoffs outside [0, 255] are clamped.

    Args:
        frame: Source frame
        cutoff: Intensity cutoff
        selector: Which intensity to compare (default: mean of R, G, B)

    Returns:
        New two-valued frame
    """
    cutoff = clamp_cutoff(cutoff)
    mask = intensity(frame, selector) > cutoff

    pixels = np.empty(frame.pixels.shape, dtype=np.uint8)
    pixels[..., :3] = np.where(mask, 255, 0).astype(np.uint8)[..., np.newaxis]
    pixels[..., 3] = 255
    return Frame(pixels)
