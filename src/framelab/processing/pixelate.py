"""
Block Pixelation
================

Mosaic filter built from independent square tiles.

The frame is cut into block_size × block_size tiles starting at (0, 0).
Each tile takes the color of the pixel at its center (top-left +
block_size // 2), with the center clamped to the last valid row/column so
that partial tiles on the right and bottom edges still sample inside the
frame.

Key Design Decisions:
    - Explicit 2D decomposition: sample one pixel per tile, then expand
      each sample back to tile size. Filtering a contiguous strip instead
      produces banding across the region.
"""

import logging

import numpy as np

from framelab.models.frame import Frame


logger = logging.getLogger(__name__)


def tile_centers(length: int, block_size: int) -> np.ndarray:
    """Sample index of every tile along one axis, clamped to the axis."""
    starts = np.arange(0, length, block_size)
    return np.minimum(starts + block_size // 2, length - 1)


def pixelate(frame: Frame, block_size: int) -> Frame:
    """
    Pixelate a frame with square tiles.

    Args:
        frame: Source frame (or a cropped region of one)
        block_size: Tile edge in pixels; values below 1 are clamped to 1

    Returns:
        New opaque frame where every tile is uniformly its sampled color
    """
    if block_size < 1:
        logger.debug(f"Block size {block_size} clamped to 1")
        block_size = 1

    height, width = frame.height, frame.width
    rows = tile_centers(height, block_size)
    cols = tile_centers(width, block_size)

    # (tiles_y, tiles_x, 3) grid of sampled colors
    samples = frame.pixels[rows][:, cols, :3]

    expanded = np.repeat(np.repeat(samples, block_size, axis=0), block_size, axis=1)
    return Frame.from_rgb(expanded[:height, :width])
