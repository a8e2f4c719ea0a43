"""
Face Region Compositing
=======================

Apply a privacy filter to the detected face region only.

The detector runs on a fixed low-resolution buffer, so its boxes are in
detector space. Before use the box is rescaled to the display frame,
clamped to the frame bounds, and then:

    1. crop the display frame to the box
    2. filter the crop in isolation
    3. paste the filtered crop into a copy of the frame

Filtering the whole frame and windowing afterwards is NOT equivalent: the
blur would pull in neighboring pixels and the pixelation grid would be
anchored at the frame origin instead of the face.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from framelab.models.face import FaceBox
from framelab.models.filters import FilterKind, FilterMode
from framelab.models.frame import Frame
from framelab.processing.filters import (
    DEFAULT_BLOCK_SIZE,
    DEFAULT_BLUR_RADIUS,
    FilterContext,
    resolve_filter,
)


logger = logging.getLogger(__name__)


DETECTOR_SIZE: Tuple[int, int] = (160, 120)


@dataclass(frozen=True, slots=True, eq=False)
class FacePreview:
    """
    Composited face preview.

    Attributes:
        frame: Display frame with only the face region filtered
        box: Display-space box that was filtered, None when no face
    """

    frame: Frame
    box: Optional[FaceBox]

    @property
    def face_detected(self) -> bool:
        return self.box is not None


def rescale_box(
    box: FaceBox,
    source_size: Tuple[int, int],
    target_size: Tuple[int, int],
) -> FaceBox:
    """
    Rescale a box between coordinate systems.

    Scale factors are target/source per axis; results are floored. Sizes
    that floor to zero are kept at one pixel.

    Args:
        box: Box in source coordinates
        source_size: (width, height) of the source coordinate system
        target_size: (width, height) of the target coordinate system

    Returns:
        Box in target coordinates
    """
    scale_x = target_size[0] / source_size[0]
    scale_y = target_size[1] / source_size[1]
    return FaceBox(
        x=math.floor(box.x * scale_x),
        y=math.floor(box.y * scale_y),
        width=max(1, math.floor(box.width * scale_x)),
        height=max(1, math.floor(box.height * scale_y)),
    )


def clamp_box(box: FaceBox, width: int, height: int) -> Optional[FaceBox]:
    """
    Intersect a box with a width × height frame.

    Returns:
        The clamped box, or None when nothing of it lies inside the frame
    """
    left = max(0, box.x)
    top = max(0, box.y)
    right = min(width, box.right)
    bottom = min(height, box.bottom)
    if right <= left or bottom <= top:
        return None
    return FaceBox(x=left, y=top, width=right - left, height=bottom - top)


class FaceRegionCompositor:
    """
    Crop-filter-paste compositor for the face preview.

    Attributes:
        detector_size: (width, height) of detector space
        block_size: Pixelation tile size used on the face crop
        blur_radius: Blur radius used on the face crop

    Example:
        compositor = FaceRegionCompositor(detector_size=(160, 120))
        preview = compositor.compose(frame, box, FilterMode(kind=FilterKind.PIXELATE))
        if not preview.face_detected:
            show("No face detected")
    """

    def __init__(
        self,
        detector_size: Tuple[int, int] = DETECTOR_SIZE,
        block_size: int = DEFAULT_BLOCK_SIZE,
        blur_radius: int = DEFAULT_BLUR_RADIUS,
    ) -> None:
        """
        Initialize the compositor.

        Args:
            detector_size: (width, height) of the detector buffer
            block_size: Pixelation tile size (clamped to >= 1)
            blur_radius: Blur radius (clamped to >= 1)
        """
        if detector_size[0] <= 0 or detector_size[1] <= 0:
            raise ValueError(f"detector_size must be positive, got {detector_size}")

        self.detector_size = detector_size
        self.block_size = max(1, block_size)
        self.blur_radius = max(1, blur_radius)

        logger.info(
            f"FaceRegionCompositor initialized: detector={detector_size[0]}x{detector_size[1]}, "
            f"block_size={self.block_size}, blur_radius={self.blur_radius}"
        )

    def to_display(self, box: FaceBox, frame: Frame) -> Optional[FaceBox]:
        """Rescale a detector-space box onto `frame` and clamp it."""
        scaled = rescale_box(box, self.detector_size, frame.size)
        return clamp_box(scaled, frame.width, frame.height)

    def compose(
        self,
        frame: Frame,
        box: Optional[FaceBox],
        mode: FilterMode,
        hsv: Optional[Frame] = None,
    ) -> FacePreview:
        """
        Build the face preview.

        Args:
            frame: Display-resolution source frame
            box: Detector-space face box, or None
            mode: Filter to apply inside the face region
            hsv: Precomputed HSV visualization of `frame` (used by the
                color-space overlay; computed from the crop when None)

        Returns:
            FacePreview. Without a box (or with a box entirely outside the
            frame) the source frame is returned unchanged.
        """
        if box is None:
            return FacePreview(frame=frame, box=None)

        display_box = self.to_display(box, frame)
        if display_box is None:
            logger.debug(f"Face box {box} falls outside the frame, preview unfiltered")
            return FacePreview(frame=frame, box=None)

        x, y, w, h = display_box.as_tuple()
        crop = frame.crop(x, y, w, h)

        hsv_crop = None
        if mode.kind == FilterKind.COLOR_SPACE_OVERLAY and hsv is not None:
            hsv_crop = hsv.crop(x, y, w, h)

        context = FilterContext(
            hsv=hsv_crop,
            block_size=self.block_size,
            blur_radius=self.blur_radius,
        )
        filtered = resolve_filter(mode)(crop, context)

        return FacePreview(frame=frame.paste(filtered, x, y), box=display_box)
