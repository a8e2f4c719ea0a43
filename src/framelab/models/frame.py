"""
Frame Data Model
================

Internal RGBA frame representation shared by every pipeline stage.

Design Rules:
    - Pixels are (H, W, 4) uint8 in RGBA order
    - Frames are never mutated in place; every helper returns a new Frame
    - Frames produced by the pipeline are fully opaque (alpha = 255)
"""

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np


OPAQUE = 255


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """
    Immutable RGBA image.

    Attributes:
        pixels: Pixel array of shape (H, W, 4), dtype uint8, RGBA order

    Note:
        eq is disabled because numpy arrays do not compare to a single
        bool. Use `same_pixels` to compare two frames.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        """Validate shape and dtype."""
        if not isinstance(self.pixels, np.ndarray):
            raise ValueError(f"Frame pixels must be a numpy array, got {type(self.pixels)}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"Frame pixels must have shape (H, W, 4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Frame pixels must be uint8, got {self.pixels.dtype}")

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixel array."""
        return f"Frame(width={self.width}, height={self.height})"

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) in pixels."""
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        """Read-only view of the three color channels, shape (H, W, 3)."""
        view = self.pixels[..., :3]
        view.flags.writeable = False
        return view

    # ── Constructors ─────────────────────────────────────────────────
    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "Frame":
        """Build an opaque frame from an (H, W, 3) array of color values."""
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise ValueError(f"RGB array must have shape (H, W, 3), got {rgb.shape}")
        pixels = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
        pixels[..., :3] = rgb
        pixels[..., 3] = OPAQUE
        return cls(pixels)

    @classmethod
    def from_bgr(cls, bgr: np.ndarray) -> "Frame":
        """Build an opaque frame from an OpenCV BGR image."""
        return cls(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA))

    @classmethod
    def blank(cls, width: int, height: int, color: Tuple[int, int, int] = (0, 0, 0)) -> "Frame":
        """Uniform opaque frame of the given size and color."""
        rgb = np.empty((height, width, 3), dtype=np.uint8)
        rgb[...] = color
        return cls.from_rgb(rgb)

    # ── Conversions ──────────────────────────────────────────────────
    def to_bgr(self) -> np.ndarray:
        """OpenCV BGR copy of the color channels (alpha dropped)."""
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2BGR)

    def copy(self) -> "Frame":
        return Frame(self.pixels.copy())

    def resize(self, width: int, height: int) -> "Frame":
        """
        Resize to (width, height).

        Uses area interpolation when shrinking, which is what the
        detector-space downscale wants.
        """
        if (width, height) == self.size:
            return self.copy()
        shrinking = width < self.width or height < self.height
        interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
        return Frame(cv2.resize(self.pixels, (width, height), interpolation=interpolation))

    # ── Regions ──────────────────────────────────────────────────────
    def crop(self, x: int, y: int, width: int, height: int) -> "Frame":
        """
        Copy out a rectangular region.

        The region must already lie inside the frame; callers clamp
        boxes before cropping.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Crop size must be positive, got {width}x{height}")
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            raise ValueError(
                f"Crop ({x}, {y}, {width}, {height}) exceeds frame {self.width}x{self.height}"
            )
        return Frame(self.pixels[y:y + height, x:x + width].copy())

    def paste(self, region: "Frame", x: int, y: int) -> "Frame":
        """Return a copy of this frame with `region` pasted at (x, y)."""
        if (
            x < 0 or y < 0
            or x + region.width > self.width
            or y + region.height > self.height
        ):
            raise ValueError(
                f"Region {region.width}x{region.height} at ({x}, {y}) "
                f"exceeds frame {self.width}x{self.height}"
            )
        pixels = self.pixels.copy()
        pixels[y:y + region.height, x:x + region.width] = region.pixels
        return Frame(pixels)

    def same_pixels(self, other: "Frame") -> bool:
        """Pixel-exact comparison."""
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )


def to_uint8(values: np.ndarray) -> np.ndarray:
    """
    Store float channel values as 8-bit.

    Rounds half to even and clips to [0, 255], the same conversion an
    8-bit clamped pixel buffer applies on assignment.
    """
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)
