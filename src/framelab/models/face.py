"""
Face Geometry Models
====================

Bounding boxes produced by the face detector and the float rectangles
used to place overlays on the display canvas.

Coordinate Systems:
    - Detector space: the fixed low-resolution buffer the detector runs on
    - Display space: the resolution the face preview is composited at
    - Overlay canvas: wherever presentation draws the extension view

All coordinates have their origin at the top-left, X rightward, Y downward.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class FaceBox:
    """
    Integer face bounding box.

    Attributes:
        x: Left edge (pixels)
        y: Top edge (pixels)
        width: Box width (pixels)
        height: Box height (pixels)
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"FaceBox size must be positive, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Float rectangle on an overlay canvas.

    Used for sticker placement, where sub-pixel positions are kept until
    the final draw.
    """

    x: float
    y: float
    width: float
    height: float

    def as_int(self) -> Tuple[int, int, int, int]:
        """Round to whole pixels for drawing."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.width)),
            int(round(self.height)),
        )

    def to_dict(self) -> dict:
        return {
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
        }
